"""Alert, adherence and notification endpoint tests."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_alert_lifecycle(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers = app_context["headers"]

    for message in ("Refill soon", "Appointment tomorrow"):
        created = await client.post(
            "/api/v1/alerts", json={"message": message, "severity": "high"}, headers=headers
        )
        assert created.status_code == 201
        assert created.json()["read"] is False

    alerts = (await client.get("/api/v1/alerts", headers=headers)).json()
    assert len(alerts) == 2

    marked = await client.post(f"/api/v1/alerts/{alerts[0]['id']}/read", headers=headers)
    assert marked.status_code == 200
    assert marked.json()["read"] is True

    remaining = await client.post("/api/v1/alerts/read-all", headers=headers)
    assert remaining.json() == {"updated": 1}

    again = await client.post("/api/v1/alerts/read-all", headers=headers)
    assert again.json() == {"updated": 0}


async def test_alert_limit_and_missing_alert(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers = app_context["headers"]
    for index in range(3):
        await client.post("/api/v1/alerts", json={"message": f"alert {index}"}, headers=headers)

    limited = await client.get("/api/v1/alerts?limit=2", headers=headers)
    assert len(limited.json()) == 2

    missing = await client.post(
        "/api/v1/alerts/00000000-0000-0000-0000-000000000000/read", headers=headers
    )
    assert missing.status_code == 404


async def test_escalation_endpoint_runs_a_pass(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers = app_context["headers"]
    await client.post(
        "/api/v1/medications",
        json={"name": "Metformin", "dosage": "500mg", "time": "08:00"},
        headers=headers,
    )

    response = await client.post("/api/v1/adherence/escalate", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["slots_evaluated"] == 1
    assert body["failures"] == 0


async def test_missed_check_endpoint(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]

    response = await client.post("/api/v1/adherence/check", headers=app_context["headers"])

    assert response.status_code == 200
    assert response.json() == {"missed": []}


async def test_test_email_without_provider(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]

    response = await client.post(
        "/api/v1/notifications/test-email", headers=app_context["headers"]
    )
    explicit = await client.post(
        "/api/v1/notifications/test-email",
        json={"email": "someone@example.com"},
        headers=app_context["headers"],
    )

    assert response.status_code == 200
    assert response.json() == {"sent": False}
    assert explicit.json() == {"sent": False}
