"""Logging filters that scrub credentials from log output."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Bearer\s+[\w\.-]+"
    r"|access_token\"\s*:\s*\"[^\"]+\""
    r"|password\"\s*:\s*\"[^\"]+\""
    r"|[?&]token=[\w\.-]+"
    r"|\bre_[A-Za-z0-9_]{8,})",
    re.IGNORECASE,
)
_REDACTED = "**REDACTED**"


def redact(value: str) -> str:
    return _SENSITIVE_PATTERN.sub(_REDACTED, value)


class SensitiveFilter(logging.Filter):
    """Redact bearer tokens, passwords, websocket tokens and provider keys.

    Uvicorn's access log passes the request line through ``record.args``, so
    string arguments are scrubbed as well as the message.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(
                redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True


__all__ = ["SensitiveFilter", "redact"]
