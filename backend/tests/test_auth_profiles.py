"""Registration, login and profile tests."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _authenticate(client: AsyncClient, email: str, password: str) -> str:
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 200
    return response.json()["access_token"]


async def test_registration_and_login(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    payload = {
        "email": "New.Caretaker@Example.com",
        "password": "RegisterMe1!",
        "full_name": "Casey Caretaker",
        "role": "caretaker",
    }

    register_resp = await client.post("/api/v1/auth/register", json=payload)
    assert register_resp.status_code == 201
    body = register_resp.json()
    assert body["token"]["access_token"]
    assert body["profile"]["email"] == "new.caretaker@example.com"
    assert body["profile"]["role"] == "caretaker"
    assert body["profile"]["email_notifications"] is True

    duplicate = await client.post("/api/v1/auth/register", json=payload)
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Email already registered"

    token = await _authenticate(client, "new.caretaker@example.com", payload["password"])
    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["full_name"] == "Casey Caretaker"


async def test_login_rejects_bad_password(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post(
        "/api/v1/auth/token",
        data={"username": app_context["email"], "password": "wrong-password"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 401


async def test_registration_validates_payload(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": "not-an-email", "password": "short", "full_name": "X"},
    )
    assert response.status_code == 422


async def test_requests_without_token_are_rejected(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    assert (await client.get("/api/v1/profiles/me")).status_code == 401
    bad = await client.get(
        "/api/v1/medications", headers={"Authorization": "Bearer not-a-token"}
    )
    assert bad.status_code == 401


async def test_profile_read_and_update(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    headers = app_context["headers"]

    profile = await client.get("/api/v1/profiles/me", headers=headers)
    assert profile.status_code == 200
    assert profile.json()["caretaker_email"] == app_context["caretaker_email"]
    assert profile.json()["role"] == "patient"

    updated = await client.patch(
        "/api/v1/profiles/me",
        json={"caretaker_email": "new.care@example.com", "email_notifications": False},
        headers=headers,
    )
    assert updated.status_code == 200
    body = updated.json()
    assert body["caretaker_email"] == "new.care@example.com"
    assert body["email_notifications"] is False
    assert body["full_name"] == "Pat Patient"

    invalid = await client.patch(
        "/api/v1/profiles/me", json={"caretaker_email": "nope"}, headers=headers
    )
    assert invalid.status_code == 422
