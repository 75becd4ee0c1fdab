"""Log redaction tests."""

import logging

from app.security.logging_filters import SensitiveFilter, redact


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_redacts_tokens_and_passwords() -> None:
    assert "abc.def" not in redact("Authorization: Bearer abc.def")
    assert "hunter22" not in redact('{"password": "hunter22"}')
    assert "re_live_0123456789" not in redact("key re_live_0123456789 rejected")


def test_filter_scrubs_message_and_args() -> None:
    record = _record(
        '%s "%s"', "127.0.0.1", "GET /api/v1/realtime/alerts?token=eyJhbGciOi.x.y HTTP/1.1"
    )

    assert SensitiveFilter().filter(record) is True
    assert "eyJhbGciOi" not in record.getMessage()
    assert "/api/v1/realtime/alerts" in record.getMessage()
