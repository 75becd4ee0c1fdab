"""Transactional email rendering and delivery through an HTTP email API."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.core.config import get_settings
from app.models.alert import ReminderType

logger = logging.getLogger(__name__)

__all__ = [
    "EmailDeliveryError",
    "MissedMedicationInfo",
    "deliver_email",
    "html_to_text",
    "render_missed_medication_email",
    "render_test_email",
    "send_missed_medication_email",
    "send_test_email",
]

_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
_ENV = Environment(
    loader=FileSystemLoader(_TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)
_TAG_RE = re.compile(r"<[^>]*>")
_STYLE_RE = re.compile(r"<(style|head)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")

_TIER_STYLES: dict[ReminderType, dict[str, str]] = {
    ReminderType.FIRST: {
        "primary": "#3b82f6",
        "bg": "#eff6ff",
        "border": "#93c5fd",
        "text": "#1e40af",
        "badge": "First Reminder",
        "subject": "First Reminder",
    },
    ReminderType.SECOND: {
        "primary": "#f59e0b",
        "bg": "#fffbeb",
        "border": "#fcd34d",
        "text": "#92400e",
        "badge": "Second Reminder - Urgent",
        "subject": "Urgent Reminder",
    },
    ReminderType.END_OF_DAY: {
        "primary": "#ef4444",
        "bg": "#fef2f2",
        "border": "#fca5a5",
        "text": "#991b1b",
        "badge": "End of Day Alert - Critical",
        "subject": "End of Day Alert",
    },
}


class EmailDeliveryError(RuntimeError):
    """Raised when the email provider rejects a message or cannot be reached."""


@dataclass(frozen=True)
class MissedMedicationInfo:
    patient_name: str
    medication_name: str
    dosage: str
    scheduled_time: str
    missed_time: str
    delay_minutes: int


def html_to_text(html: str) -> str:
    """Crude plain-text fallback for an HTML body."""
    without_styles = _STYLE_RE.sub("", html)
    text = _TAG_RE.sub("", without_styles)
    lines = [line.strip() for line in text.splitlines()]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


def render_missed_medication_email(
    info: MissedMedicationInfo, reminder_type: ReminderType
) -> tuple[str, str]:
    """Return ``(subject, html)`` for a missed-dose escalation email."""
    style = _TIER_STYLES[reminder_type]
    base_url = get_settings().app_base_url.rstrip("/")
    subject = f"{info.patient_name} missed {info.medication_name} - {style['subject']}"
    html = _ENV.get_template("missed_medication_email.html").render(
        info=info,
        color=style,
        badge=style["badge"],
        dashboard_url=f"{base_url}/dashboard",
        settings_url=f"{base_url}/settings",
        year=datetime.now(UTC).year,
    )
    return subject, html


def render_test_email() -> tuple[str, str]:
    html = _ENV.get_template("test_email.html").render()
    return "MedBuddy Test Notification", html


async def deliver_email(
    to_email: str,
    subject: str,
    html: str,
    text: str | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Send one email through the configured provider.

    Returns True when the provider accepted the message and False when no
    provider key is configured (the send is only logged). Raises
    :class:`EmailDeliveryError` on a non-2xx response or a transport error.
    """

    settings = get_settings()
    if not settings.email_api_key:
        logger.info("Email provider not configured; skipping email to %s", to_email)
        return False

    payload = {
        "from": settings.email_from,
        "to": to_email,
        "subject": subject,
        "html": html,
        "text": text or html_to_text(html),
    }
    headers = {"Authorization": f"Bearer {settings.email_api_key}"}

    try:
        if client is None:
            async with httpx.AsyncClient(
                timeout=settings.email_timeout_seconds
            ) as own_client:
                response = await own_client.post(
                    settings.email_api_url, json=payload, headers=headers
                )
        else:
            response = await client.post(
                settings.email_api_url, json=payload, headers=headers
            )
    except httpx.HTTPError as exc:
        raise EmailDeliveryError(f"Email provider unreachable: {exc}") from exc

    if not response.is_success:
        raise EmailDeliveryError(
            f"Email provider error {response.status_code}: {response.text[:240]}"
        )
    logger.info("Email sent to %s", to_email)
    return True


async def send_missed_medication_email(
    caretaker_email: str,
    info: MissedMedicationInfo,
    reminder_type: ReminderType = ReminderType.FIRST,
    *,
    client: httpx.AsyncClient | None = None,
) -> bool:
    subject, html = render_missed_medication_email(info, reminder_type)
    return await deliver_email(caretaker_email, subject, html, client=client)


async def send_test_email(
    email: str, *, client: httpx.AsyncClient | None = None
) -> bool:
    """Send the notification self-test email; failures are logged, not raised."""
    subject, html = render_test_email()
    try:
        return await deliver_email(email, subject, html, client=client)
    except EmailDeliveryError:
        logger.exception("Failed to send test email to %s", email)
        return False
