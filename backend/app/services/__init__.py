"""Service layer: data access, escalation, email and realtime helpers."""
