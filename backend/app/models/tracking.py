"""Daily dose tracking model."""
from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin


class MedicationTracking(TimestampMixin, Base):
    """Whether one scheduled dose on one calendar date was taken."""

    __tablename__ = "medication_tracking"
    __table_args__ = (
        UniqueConstraint(
            "medication_id",
            "tracking_date",
            "scheduled_time",
            name="uq_medication_tracking_dose",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    medication_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("medications.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scheduled_time: Mapped[str] = mapped_column(String(5), nullable=False)
    tracking_date: Mapped[date] = mapped_column(Date, nullable=False)
    taken: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    taken_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    medication: Mapped["Medication"] = relationship(
        "Medication", back_populates="tracking"
    )
