"""Logging filters that scrub customer contact details and credentials."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Authorization: Bearer\s+[\w\.-]+|customer_email\"\s*:\s*\"[^\"]+\")",
    re.IGNORECASE,
)
_EMAIL_PATTERN = re.compile(r"[\w\.+-]+@[\w-]+(?:\.[\w-]+)+")


def redact(message: str) -> str:
    message = _SENSITIVE_PATTERN.sub("**REDACTED**", message)
    return _EMAIL_PATTERN.sub("**EMAIL**", message)


class SensitiveFilter(logging.Filter):
    """Replace sensitive tokens in log messages with a redaction marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if record.args:
            if isinstance(record.args, tuple):
                record.args = tuple(
                    redact(arg) if isinstance(arg, str) else arg for arg in record.args
                )
        return True


__all__ = ["SensitiveFilter", "redact"]
