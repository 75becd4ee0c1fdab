"""Profile schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr

from app.models.user import ProfileRole


class ProfileRead(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str
    role: ProfileRole
    caretaker_email: str | None = None
    email_notifications: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Mutable profile fields; omitted fields are left unchanged."""

    full_name: str | None = None
    role: ProfileRole | None = None
    caretaker_email: EmailStr | None = None
    email_notifications: bool | None = None
