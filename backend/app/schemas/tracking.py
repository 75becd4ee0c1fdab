"""Dose tracking schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, field_validator

from app.services.dose_schedule import normalize_times


class MarkTakenRequest(BaseModel):
    medication_id: uuid.UUID
    scheduled_time: str
    tracking_date: date | None = None

    @field_validator("scheduled_time")
    @classmethod
    def _single_time(cls, value: str) -> str:
        normalized = normalize_times(value)
        if "," in normalized:
            raise ValueError("Exactly one scheduled time is required")
        return normalized


class TrackingRead(BaseModel):
    id: uuid.UUID
    medication_id: uuid.UUID
    user_id: uuid.UUID
    scheduled_time: str
    tracking_date: date
    taken: bool
    taken_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class TrackingHistoryRead(TrackingRead):
    medication_name: str | None = None
    medication_dosage: str | None = None
