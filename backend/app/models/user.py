"""User and profile models for patient and caretaker identities."""
from __future__ import annotations

import enum
import uuid

from sqlalchemy import Boolean, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.mixins import TimestampMixin


class ProfileRole(str, enum.Enum):
    """Role a profile plays in the care relationship."""

    PATIENT = "patient"
    CARETAKER = "caretaker"
    BOTH = "both"


class User(TimestampMixin, Base):
    """Login identity."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    profile: Mapped["Profile | None"] = relationship(
        "Profile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class Profile(TimestampMixin, Base):
    """Display and notification preferences for a user.

    ``caretaker_email`` and ``email_notifications`` gate the missed-dose
    escalation emails for every medication the user owns.
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[ProfileRole] = mapped_column(
        Enum(ProfileRole), default=ProfileRole.BOTH, nullable=False
    )
    caretaker_email: Mapped[str | None] = mapped_column(String(320))
    email_notifications: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    user: Mapped[User] = relationship("User", back_populates="profile")
