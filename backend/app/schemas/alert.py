"""Alert, adherence and statistics schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.alert import AlertSeverity


class AlertCreate(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    severity: AlertSeverity = AlertSeverity.MEDIUM


class AlertRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    message: str
    severity: AlertSeverity
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MarkAllReadResponse(BaseModel):
    updated: int


class MissedCheckResponse(BaseModel):
    missed: list[str]


class EscalationRunResponse(BaseModel):
    slots_evaluated: int
    emails_attempted: int
    failures: int


class EmailTestRequest(BaseModel):
    email: EmailStr | None = None


class EmailTestResponse(BaseModel):
    sent: bool


class MedicationStats(BaseModel):
    total_medications: int
    total_doses_today: int
    taken_today: int
    missed_today: int
    adherence_rate: int
