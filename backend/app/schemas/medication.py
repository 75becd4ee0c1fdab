"""Medication schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.dose_schedule import normalize_times


class MedicationBase(BaseModel):
    """Shared medication fields."""

    name: str = Field(min_length=1, max_length=255)
    dosage: str = Field(min_length=1, max_length=120)
    frequency: str = "Daily"
    time: str
    type: str = "Other"
    notes: str | None = None
    refill_date: date | None = None


class MedicationCreate(MedicationBase):
    """Payload for creating a medication."""

    @field_validator("time")
    @classmethod
    def _validate_time(cls, value: str) -> str:
        return normalize_times(value)


class MedicationUpdate(BaseModel):
    """Mutable medication fields."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    dosage: str | None = Field(default=None, min_length=1, max_length=120)
    frequency: str | None = None
    time: str | None = None
    type: str | None = None
    notes: str | None = None
    refill_date: date | None = None

    @field_validator("time")
    @classmethod
    def _validate_time(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return normalize_times(value)


class MedicationRead(MedicationBase):
    """Serialized medication."""

    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MedicationWithStatus(MedicationRead):
    """Medication with today's intake status."""

    taken: bool = False
    taken_times: list[str] = Field(default_factory=list)
