"""Email rendering and provider delivery tests."""

from __future__ import annotations

import json

import httpx
import pytest

from app.core.config import get_settings
from app.models import ReminderType
from app.services import email_service
from app.services.email_service import (
    EmailDeliveryError,
    MissedMedicationInfo,
    deliver_email,
    html_to_text,
    render_missed_medication_email,
    send_missed_medication_email,
    send_test_email,
)

INFO = MissedMedicationInfo(
    patient_name="Pat <Patient>",
    medication_name="Metformin",
    dosage="500mg",
    scheduled_time="8:00 AM",
    missed_time="8:45 AM",
    delay_minutes=45,
)


@pytest.fixture()
def provider_key(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("EMAIL_API_KEY", "re_test_key_123")
    monkeypatch.setenv("EMAIL_API_URL", "https://email.test/emails")
    get_settings.cache_clear()
    yield get_settings()
    monkeypatch.delenv("EMAIL_API_KEY", raising=False)
    monkeypatch.delenv("EMAIL_API_URL", raising=False)
    get_settings.cache_clear()


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.parametrize(
    ("tier", "subject_suffix", "badge"),
    [
        (ReminderType.FIRST, "First Reminder", "First Reminder"),
        (ReminderType.SECOND, "Urgent Reminder", "Second Reminder - Urgent"),
        (ReminderType.END_OF_DAY, "End of Day Alert", "End of Day Alert - Critical"),
    ],
)
def test_render_missed_medication_email(
    tier: ReminderType, subject_suffix: str, badge: str
) -> None:
    subject, html = render_missed_medication_email(INFO, tier)

    assert subject == f"Pat <Patient> missed Metformin - {subject_suffix}"
    assert badge in html
    assert "Metformin 500mg" in html
    assert "45 minutes late" in html
    assert "Pat &lt;Patient&gt;" in html


def test_html_to_text_strips_markup() -> None:
    html = "<html><head><style>p { color: red; }</style></head><body><p>Hello</p>\n\n\n<p>There</p></body></html>"
    assert html_to_text(html) == "Hello\n\nThere"


@pytest.mark.asyncio
async def test_deliver_email_without_key_is_log_only() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "x"})

    get_settings.cache_clear()
    async with _client(handler) as client:
        sent = await deliver_email("care@example.com", "Hi", "<p>Hi</p>", client=client)

    assert sent is False
    assert requests == []


@pytest.mark.asyncio
async def test_deliver_email_posts_to_provider(provider_key) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    async with _client(handler) as client:
        sent = await send_missed_medication_email(
            "care@example.com", INFO, ReminderType.SECOND, client=client
        )

    assert sent is True
    assert len(requests) == 1
    request = requests[0]
    assert str(request.url) == "https://email.test/emails"
    assert request.headers["Authorization"] == "Bearer re_test_key_123"
    body = json.loads(request.content)
    assert body["to"] == "care@example.com"
    assert body["from"] == provider_key.email_from
    assert body["subject"].endswith("Urgent Reminder")
    assert "Metformin" in body["html"]
    assert "<p>" not in body["text"]
    assert "Metformin" in body["text"]


@pytest.mark.asyncio
async def test_deliver_email_raises_on_provider_error(provider_key) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"message": "invalid from address"})

    async with _client(handler) as client:
        with pytest.raises(EmailDeliveryError) as excinfo:
            await deliver_email("care@example.com", "Hi", "<p>Hi</p>", client=client)
    assert "422" in str(excinfo.value)


@pytest.mark.asyncio
async def test_deliver_email_raises_on_transport_error(provider_key) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(EmailDeliveryError):
            await deliver_email("care@example.com", "Hi", "<p>Hi</p>", client=client)


@pytest.mark.asyncio
async def test_send_test_email_reports_failure(provider_key) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="upstream down")

    async with _client(handler) as client:
        assert await send_test_email("care@example.com", client=client) is False


def test_templates_render_from_package_directory() -> None:
    subject, html = email_service.render_test_email()
    assert subject == "MedBuddy Test Notification"
    assert "MedBuddy" in html
