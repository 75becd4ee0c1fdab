"""Medication model."""
from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin


class Medication(TimestampMixin, Base):
    """A medication a user takes at one or more times each day."""

    __tablename__ = "medications"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    dosage: Mapped[str] = mapped_column(String(120), nullable=False)
    frequency: Mapped[str] = mapped_column(String(120), nullable=False, default="Daily")
    # comma-separated HH:MM list
    time: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(120), nullable=False, default="Other")
    notes: Mapped[str | None] = mapped_column(Text)
    refill_date: Mapped[date | None] = mapped_column(Date)

    tracking: Mapped[list["MedicationTracking"]] = relationship(
        "MedicationTracking",
        back_populates="medication",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
