"""Helpers for the comma-separated HH:MM dose schedules stored on medications."""

from __future__ import annotations

import re
from datetime import datetime
from zoneinfo import ZoneInfo

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_times(value: str) -> list[str]:
    """Split a stored schedule into its individual ``HH:MM`` entries."""
    return [part.strip() for part in value.split(",") if part.strip()]


def time_to_minutes(value: str) -> int:
    """Return minutes since midnight for an ``HH:MM`` string."""
    match = _TIME_RE.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid time {value!r}; expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time {value!r}; expected HH:MM")
    return hours * 60 + minutes


def normalize_times(value: str) -> str:
    """Validate a schedule and render it as zero-padded ``HH:MM, HH:MM``."""
    times = parse_times(value)
    if not times:
        raise ValueError("At least one scheduled time is required")
    normalized = []
    for entry in times:
        minutes = time_to_minutes(entry)
        normalized.append(f"{minutes // 60:02d}:{minutes % 60:02d}")
    return ", ".join(normalized)


def minutes_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def minutes_late(scheduled_time: str, now: datetime) -> int:
    """Minutes elapsed since ``scheduled_time`` on ``now``'s day (negative if not yet due)."""
    return minutes_of_day(now) - time_to_minutes(scheduled_time)


def _format_one(entry: str) -> str:
    hours_part, _, minutes_part = entry.partition(":")
    hour = int(hours_part)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minutes_part} {suffix}"


def format_time(value: str) -> str:
    """Render a schedule for people: ``"08:00, 21:30"`` -> ``"8:00 AM, 9:30 PM"``."""
    if not value:
        return ""
    return ", ".join(_format_one(entry) for entry in parse_times(value))


def count_doses(schedules: list[str]) -> int:
    return sum(len(parse_times(schedule)) for schedule in schedules)


def localize(now: datetime | None, tz_name: str) -> datetime:
    """Return ``now`` as wall-clock time in ``tz_name``.

    Naive datetimes are taken to already be local wall-clock time.
    """
    zone = ZoneInfo(tz_name)
    if now is None:
        return datetime.now(zone)
    if now.tzinfo is None:
        return now
    return now.astimezone(zone)


__all__ = [
    "count_doses",
    "format_time",
    "localize",
    "minutes_late",
    "minutes_of_day",
    "normalize_times",
    "parse_times",
    "time_to_minutes",
]
