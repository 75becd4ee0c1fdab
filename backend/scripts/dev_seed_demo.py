from __future__ import annotations

import asyncio

from app.core.config import get_settings
from app.db.session import get_sessionmaker
from app.schemas.auth import RegistrationRequest
from app.schemas.medication import MedicationCreate
from app.schemas.profile import ProfileUpdate
from app.services import auth_service, medication_service, profile_service

EMAIL = "patient@medbuddy.local"
PASSWORD = "medbuddy123"
CARETAKER_EMAIL = "caretaker@medbuddy.local"

DEMO_MEDICATIONS = [
    MedicationCreate(name="Metformin", dosage="500mg", time="08:00, 20:00", type="Tablet"),
    MedicationCreate(name="Lisinopril", dosage="10mg", time="09:00", type="Tablet"),
    MedicationCreate(
        name="Vitamin D", dosage="1000 IU", time="12:30", type="Supplement"
    ),
]


async def main() -> None:
    settings = get_settings()
    sessionmaker = get_sessionmaker(settings.database_url)
    async with sessionmaker() as session:
        if await auth_service.get_user_by_email(session, EMAIL) is not None:
            print(f"User {EMAIL} already exists")
            return

        user, profile = await auth_service.register(
            session,
            RegistrationRequest(email=EMAIL, password=PASSWORD, full_name="Demo Patient"),
        )
        await profile_service.update_profile(
            session,
            profile=profile,
            payload=ProfileUpdate(caretaker_email=CARETAKER_EMAIL),
        )
        for payload in DEMO_MEDICATIONS:
            await medication_service.add_medication(session, payload, user_id=user.id)

    print(
        f"Created {EMAIL} / {PASSWORD} with {len(DEMO_MEDICATIONS)} medications; "
        f"caretaker {CARETAKER_EMAIL}"
    )


if __name__ == "__main__":
    asyncio.run(main())
