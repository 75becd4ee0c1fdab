"""ORM models package export."""

from app.models.alert import Alert, AlertSeverity, EmailNotification, ReminderType
from app.models.medication import Medication
from app.models.tracking import MedicationTracking
from app.models.user import Profile, ProfileRole, User

__all__ = [
    "Alert",
    "AlertSeverity",
    "EmailNotification",
    "ReminderType",
    "Medication",
    "MedicationTracking",
    "Profile",
    "ProfileRole",
    "User",
]
