"""Initial MedBuddy schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

profile_role = sa.Enum("PATIENT", "CARETAKER", "BOTH", name="profilerole")
alert_severity = sa.Enum("LOW", "MEDIUM", "HIGH", name="alertseverity")
reminder_type = sa.Enum("FIRST", "SECOND", "END_OF_DAY", name="remindertype")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _user_fk(*, index: bool = False) -> sa.Column:
    return sa.Column(
        "user_id",
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=index,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "profiles",
        sa.Column(
            "id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("role", profile_role, nullable=False, server_default="BOTH"),
        sa.Column("caretaker_email", sa.String(length=320)),
        sa.Column(
            "email_notifications",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        *_timestamps(),
    )

    op.create_table(
        "medications",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _user_fk(index=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("dosage", sa.String(length=120), nullable=False),
        sa.Column("frequency", sa.String(length=120), nullable=False, server_default="Daily"),
        sa.Column("time", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=120), nullable=False, server_default="Other"),
        sa.Column("notes", sa.Text()),
        sa.Column("refill_date", sa.Date()),
        *_timestamps(),
    )

    op.create_table(
        "medication_tracking",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "medication_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("medications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk(index=True),
        sa.Column("scheduled_time", sa.String(length=5), nullable=False),
        sa.Column("tracking_date", sa.Date(), nullable=False),
        sa.Column("taken", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("taken_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.UniqueConstraint(
            "medication_id",
            "tracking_date",
            "scheduled_time",
            name="uq_medication_tracking_dose",
        ),
    )

    op.create_table(
        "alerts",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _user_fk(index=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("severity", alert_severity, nullable=False, server_default="MEDIUM"),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    op.create_table(
        "email_notifications",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        _user_fk(),
        sa.Column(
            "medication_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("medications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("scheduled_time", sa.String(length=5), nullable=False),
        sa.Column("tracking_date", sa.Date(), nullable=False),
        sa.Column("reminder_type", reminder_type, nullable=False),
        sa.Column("email_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sent_at", sa.DateTime(timezone=True)),
        sa.Column("error_message", sa.Text()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "medication_id",
            "tracking_date",
            "scheduled_time",
            "reminder_type",
            name="uq_email_notifications_tier",
        ),
    )


def downgrade() -> None:
    op.drop_table("email_notifications")
    op.drop_table("alerts")
    op.drop_table("medication_tracking")
    op.drop_table("medications")
    op.drop_table("profiles")
    op.drop_table("users")
    bind = op.get_bind()
    for enum_type in (reminder_type, alert_severity, profile_role):
        enum_type.drop(bind, checkfirst=True)
