"""Test fixtures for the MedBuddy backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ["ESCALATION_ENABLED"] = "false"
os.environ.pop("EMAIL_API_KEY", None)
os.environ.pop("RESEND_API_KEY", None)

from app.core.config import get_settings
from app.core.security import create_access_token, get_password_hash
from app.db.base import Base
from app.db.session import dispose_engine, get_sessionmaker
from app.main import app
from app.models import Profile, ProfileRole, User

PATIENT_EMAIL = "patient@example.com"
PATIENT_PASSWORD = "Passw0rd!"
CARETAKER_EMAIL = "caretaker@example.com"


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


async def seed_user(
    db_url: str,
    *,
    email: str,
    full_name: str,
    caretaker_email: str | None = None,
    email_notifications: bool = True,
    role: ProfileRole = ProfileRole.PATIENT,
) -> User:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        user = User(email=email, hashed_password=get_password_hash(PATIENT_PASSWORD))
        session.add(user)
        await session.flush()
        session.add(
            Profile(
                id=user.id,
                email=email,
                full_name=full_name,
                role=role,
                caretaker_email=caretaker_email,
                email_notifications=email_notifications,
            )
        )
        await session.commit()
        return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest_asyncio.fixture()
async def patient(reset_database: AsyncIterator[None], db_url: str) -> User:
    """A patient whose caretaker receives escalation emails."""
    return await seed_user(
        db_url,
        email=PATIENT_EMAIL,
        full_name="Pat Patient",
        caretaker_email=CARETAKER_EMAIL,
    )


@pytest_asyncio.fixture()
async def app_context(patient: User) -> AsyncIterator[dict[str, object]]:
    """Yield an async client authenticated as the seeded patient."""
    context: dict[str, object] = {
        "user_id": patient.id,
        "email": PATIENT_EMAIL,
        "password": PATIENT_PASSWORD,
        "caretaker_email": CARETAKER_EMAIL,
        "headers": auth_headers(patient),
    }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context


@pytest.fixture()
def make_user(reset_database: AsyncIterator[None], db_url: str):
    """Factory for additional users in the current test database."""

    async def _make(**kwargs: object) -> User:
        return await seed_user(db_url, **kwargs)  # type: ignore[arg-type]

    return _make
