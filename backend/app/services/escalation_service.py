"""Missed-dose detection and tiered caretaker email escalation.

A dose that is still untaken escalates through three tiers as it gets later:

* ``first`` at 30 minutes late (medium alert),
* ``second`` at 60 minutes late (high alert),
* ``end_of_day`` at 120 minutes late (high alert).

Each tier is sent at most once per dose. The ``email_notifications`` ledger
records every attempt and has a unique key per tier, so two overlapping
checker runs cannot both claim the same tier.

In the default (strict) mode a tier is only sent when the previous tier is
the latest ledger entry and the dose is inside that tier's time window, so a
dose first seen at 90 minutes late is never escalated. With
``ESCALATION_CATCH_UP`` enabled the due tier is derived from lateness alone
and sent as long as neither it nor a later tier has been logged.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.db.session import unit_of_work
from app.models.alert import Alert, AlertSeverity, EmailNotification, ReminderType
from app.models.medication import Medication
from app.models.user import Profile
from app.services import (
    alert_service,
    email_service,
    medication_service,
    tracking_service,
)
from app.services.change_feed import ChangeFeed
from app.services.dose_schedule import (
    format_time,
    localize,
    minutes_late,
    minutes_of_day,
    parse_times,
    time_to_minutes,
)
from app.services.email_service import MissedMedicationInfo

logger = logging.getLogger(__name__)

FIRST_REMINDER_MINUTES = 30
SECOND_REMINDER_MINUTES = 60
CRITICAL_REMINDER_MINUTES = 120

_TIER_ALERTS: dict[ReminderType, tuple[str, AlertSeverity]] = {
    ReminderType.FIRST: (
        "First reminder: {name} at {time} is 30 minutes late",
        AlertSeverity.MEDIUM,
    ),
    ReminderType.SECOND: (
        "Urgent: {name} at {time} is 1 hour late!",
        AlertSeverity.HIGH,
    ),
    ReminderType.END_OF_DAY: (
        "CRITICAL: {name} at {time} is over 2 hours late!",
        AlertSeverity.HIGH,
    ),
}

EmailSender = Callable[[str, MissedMedicationInfo, ReminderType], Awaitable[bool]]


@dataclass
class CheckSummary:
    slots_evaluated: int = 0
    emails_attempted: int = 0
    emails_sent: int = 0
    failures: int = 0


@dataclass(frozen=True)
class _Candidate:
    medication_id: UUID
    user_id: UUID
    name: str
    dosage: str
    time: str
    patient_name: str
    caretaker_email: str


def due_tier(late: int) -> ReminderType | None:
    """Tier implied by lateness alone."""
    if late >= CRITICAL_REMINDER_MINUTES:
        return ReminderType.END_OF_DAY
    if late >= SECOND_REMINDER_MINUTES:
        return ReminderType.SECOND
    if late >= FIRST_REMINDER_MINUTES:
        return ReminderType.FIRST
    return None


def select_tier(
    late: int,
    previous: ReminderType | None,
    *,
    catch_up: bool = False,
) -> ReminderType | None:
    """Decide which reminder, if any, to send for a dose ``late`` minutes overdue.

    ``previous`` is the tier of the latest ledger entry for the dose.
    """

    if late <= 0:
        return None
    if catch_up:
        tier = due_tier(late)
        if tier is None:
            return None
        if previous is not None and previous.rank >= tier.rank:
            return None
        return tier

    if FIRST_REMINDER_MINUTES <= late < SECOND_REMINDER_MINUTES and previous is None:
        return ReminderType.FIRST
    if (
        SECOND_REMINDER_MINUTES <= late < CRITICAL_REMINDER_MINUTES
        and previous is ReminderType.FIRST
    ):
        return ReminderType.SECOND
    if late >= CRITICAL_REMINDER_MINUTES and previous is ReminderType.SECOND:
        return ReminderType.END_OF_DAY
    return None


async def latest_email_notification(
    session: AsyncSession,
    *,
    medication_id: UUID,
    tracking_date: date,
    scheduled_time: str,
) -> EmailNotification | None:
    stmt = (
        select(EmailNotification)
        .where(
            EmailNotification.medication_id == medication_id,
            EmailNotification.tracking_date == tracking_date,
            EmailNotification.scheduled_time == scheduled_time,
        )
    )
    result = await session.execute(stmt)
    rows = result.scalars().all()
    # tiers are only ever logged in order, so the highest tier is the latest
    return max(rows, key=lambda row: row.reminder_type.rank, default=None)


async def _load_candidates(session: AsyncSession) -> list[_Candidate]:
    stmt = (
        select(Medication, Profile)
        .join(Profile, Profile.id == Medication.user_id)
        .where(
            Profile.email_notifications.is_(True),
            Profile.caretaker_email.is_not(None),
            Profile.caretaker_email != "",
        )
    )
    result = await session.execute(stmt)
    return [
        _Candidate(
            medication_id=medication.id,
            user_id=medication.user_id,
            name=medication.name,
            dosage=medication.dosage,
            time=medication.time,
            patient_name=profile.full_name,
            caretaker_email=profile.caretaker_email or "",
        )
        for medication, profile in result.all()
    ]


async def _claim_tier(
    factory: async_sessionmaker[AsyncSession],
    candidate: _Candidate,
    scheduled_time: str,
    *,
    late: int,
    today: date,
    catch_up: bool,
) -> tuple[UUID, ReminderType] | None:
    """Commit an unsent ledger row for the tier that is due, if any.

    The row is committed before any email goes out, so the unique key on the
    tier is what decides which of two overlapping runs sends it.
    """

    try:
        async with unit_of_work(factory) as session:
            tracking = await tracking_service.find_tracking(
                session,
                medication_id=candidate.medication_id,
                tracking_date=today,
                scheduled_time=scheduled_time,
            )
            if tracking is not None and tracking.taken:
                return None

            previous = await latest_email_notification(
                session,
                medication_id=candidate.medication_id,
                tracking_date=today,
                scheduled_time=scheduled_time,
            )
            tier = select_tier(
                late,
                previous.reminder_type if previous is not None else None,
                catch_up=catch_up,
            )
            if tier is None:
                return None

            ledger = EmailNotification(
                user_id=candidate.user_id,
                medication_id=candidate.medication_id,
                scheduled_time=scheduled_time,
                tracking_date=today,
                reminder_type=tier,
                email_sent=False,
            )
            session.add(ledger)
            await session.flush()
            ledger_id = ledger.id
    except IntegrityError:
        logger.info(
            "Reminder for %s at %s already claimed by another run",
            candidate.name,
            scheduled_time,
        )
        return None
    return ledger_id, tier


async def _evaluate_slot(
    factory: async_sessionmaker[AsyncSession],
    candidate: _Candidate,
    scheduled_time: str,
    *,
    now: datetime,
    catch_up: bool,
    sender: EmailSender,
    summary: CheckSummary,
    feed: ChangeFeed | None,
) -> None:
    late = minutes_late(scheduled_time, now)
    if late <= 0:
        return

    claim = await _claim_tier(
        factory,
        candidate,
        scheduled_time,
        late=late,
        today=now.date(),
        catch_up=catch_up,
    )
    if claim is None:
        return
    ledger_id, tier = claim

    # no transaction is open while the provider is called
    display_time = format_time(scheduled_time)
    info = MissedMedicationInfo(
        patient_name=candidate.patient_name,
        medication_name=candidate.name,
        dosage=candidate.dosage,
        scheduled_time=display_time,
        missed_time=format_time(f"{now:%H:%M}"),
        delay_minutes=late,
    )
    logger.info(
        "Sending %s reminder for %s (%d mins late)", tier.value, candidate.name, late
    )
    summary.emails_attempted += 1
    error: str | None = None
    try:
        sent = await sender(candidate.caretaker_email, info, tier)
    except Exception as exc:  # recorded on the ledger row
        logger.warning(
            "Email dispatch failed for %s at %s: %s", candidate.name, scheduled_time, exc
        )
        sent = False
        error = str(exc) or exc.__class__.__name__
    else:
        if not sent:
            error = "Email provider not configured"
    if sent:
        summary.emails_sent += 1

    template, severity = _TIER_ALERTS[tier]
    alert = alert_service.build_alert(
        user_id=candidate.user_id,
        message=template.format(name=candidate.name, time=display_time),
        severity=severity,
    )
    async with unit_of_work(factory) as session:
        ledger = await session.get(EmailNotification, ledger_id)
        if ledger is not None:
            ledger.email_sent = sent
            ledger.sent_at = datetime.now(UTC) if sent else None
            ledger.error_message = error
        session.add(alert)

    alert_service.publish_alert(alert, "INSERT", feed)


async def check_and_send_missed_medication_emails(
    factory: async_sessionmaker[AsyncSession],
    *,
    now: datetime | None = None,
    catch_up: bool | None = None,
    sender: EmailSender | None = None,
    feed: ChangeFeed | None = None,
) -> CheckSummary:
    """Run one escalation pass over every notifying user's medications.

    Failures are contained to the dose being evaluated: they are logged and
    counted, and the pass carries on with the remaining doses.
    """

    settings = get_settings()
    local_now = localize(now, settings.app_timezone)
    if catch_up is None:
        catch_up = settings.escalation_catch_up
    if sender is None:
        sender = email_service.send_missed_medication_email

    summary = CheckSummary()
    logger.info("Checking for missed medications at %s", local_now.isoformat())
    try:
        async with factory() as session:
            candidates = await _load_candidates(session)
    except SQLAlchemyError:
        logger.exception("Failed to load medications for escalation check")
        summary.failures += 1
        return summary

    for candidate in candidates:
        for scheduled_time in parse_times(candidate.time):
            summary.slots_evaluated += 1
            try:
                await _evaluate_slot(
                    factory,
                    candidate,
                    scheduled_time,
                    now=local_now,
                    catch_up=catch_up,
                    sender=sender,
                    summary=summary,
                    feed=feed,
                )
            except Exception:
                summary.failures += 1
                logger.exception(
                    "Escalation check failed for medication %s at %s",
                    candidate.medication_id,
                    scheduled_time,
                )
    return summary


async def check_missed_medications(
    factory: async_sessionmaker[AsyncSession],
    *,
    user_id: UUID,
    now: datetime | None = None,
    sender: EmailSender | None = None,
    feed: ChangeFeed | None = None,
) -> list[str]:
    """Flag a user's overdue doses and kick off a full escalation pass.

    Uses the fixed grace period (``MISSED_GRACE_MINUTES``) rather than the
    email tiers. When anything is missed a single high-severity alert lists
    every missed dose, then :func:`check_and_send_missed_medication_emails`
    runs for all users.
    """

    settings = get_settings()
    local_now = localize(now, settings.app_timezone)
    current = minutes_of_day(local_now)

    async with factory() as session:
        medications = await medication_service.get_medications(session, user_id=user_id)
        tracking = await tracking_service.get_todays_tracking(
            session, user_id=user_id, tracking_date=local_now.date()
        )
    taken = {(row.medication_id, row.scheduled_time) for row in tracking if row.taken}

    missed: list[str] = []
    for medication in medications:
        for scheduled_time in parse_times(medication.time):
            try:
                scheduled = time_to_minutes(scheduled_time)
            except ValueError:
                logger.warning(
                    "Skipping malformed time %r on medication %s",
                    scheduled_time,
                    medication.id,
                )
                continue
            if current <= scheduled + settings.missed_grace_minutes:
                continue
            if (medication.id, scheduled_time) not in taken:
                missed.append(f"{medication.name} at {format_time(scheduled_time)}")

    if missed:
        async with factory() as session:
            await alert_service.create_alert(
                session,
                user_id=user_id,
                message=f"Missed medications: {', '.join(missed)}",
                severity=AlertSeverity.HIGH,
                feed=feed,
            )
        await check_and_send_missed_medication_emails(
            factory, now=now, sender=sender, feed=feed
        )
    return missed
