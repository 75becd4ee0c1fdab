"""Schema exports."""

from app.schemas.alert import (
    AlertCreate,
    AlertRead,
    EmailTestRequest,
    EmailTestResponse,
    EscalationRunResponse,
    MarkAllReadResponse,
    MedicationStats,
    MissedCheckResponse,
)
from app.schemas.auth import RegistrationRequest, RegistrationResponse, Token
from app.schemas.medication import (
    MedicationCreate,
    MedicationRead,
    MedicationUpdate,
    MedicationWithStatus,
)
from app.schemas.profile import ProfileRead, ProfileUpdate
from app.schemas.tracking import MarkTakenRequest, TrackingHistoryRead, TrackingRead

__all__ = [
    "AlertCreate",
    "AlertRead",
    "EmailTestRequest",
    "EmailTestResponse",
    "EscalationRunResponse",
    "MarkAllReadResponse",
    "MedicationStats",
    "MissedCheckResponse",
    "RegistrationRequest",
    "RegistrationResponse",
    "Token",
    "MedicationCreate",
    "MedicationRead",
    "MedicationUpdate",
    "MedicationWithStatus",
    "ProfileRead",
    "ProfileUpdate",
    "MarkTakenRequest",
    "TrackingHistoryRead",
    "TrackingRead",
]
