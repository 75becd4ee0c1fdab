"""Alert and escalation ledger models."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.mixins import CreatedAtMixin


class AlertSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ReminderType(str, enum.Enum):
    """Escalation tiers, in the order they are sent."""

    FIRST = "first"
    SECOND = "second"
    END_OF_DAY = "end_of_day"

    @property
    def rank(self) -> int:
        return _REMINDER_ORDER.index(self)


_REMINDER_ORDER = [ReminderType.FIRST, ReminderType.SECOND, ReminderType.END_OF_DAY]


class Alert(CreatedAtMixin, Base):
    __tablename__ = "alerts"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[AlertSeverity] = mapped_column(
        Enum(AlertSeverity), default=AlertSeverity.MEDIUM, nullable=False
    )
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

class EmailNotification(CreatedAtMixin, Base):
    """Append-only ledger of escalation emails, one row per tier per dose."""

    __tablename__ = "email_notifications"
    __table_args__ = (
        UniqueConstraint(
            "medication_id",
            "tracking_date",
            "scheduled_time",
            "reminder_type",
            name="uq_email_notifications_tier",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    medication_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("medications.id", ondelete="CASCADE"), nullable=False
    )
    scheduled_time: Mapped[str] = mapped_column(String(5), nullable=False)
    tracking_date: Mapped[date] = mapped_column(Date, nullable=False)
    reminder_type: Mapped[ReminderType] = mapped_column(
        Enum(ReminderType), nullable=False
    )
    email_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    error_message: Mapped[str | None] = mapped_column(Text)