"""Redact credentials and personal data from SQL before it is logged."""

from __future__ import annotations

import re

_SECRET_ASSIGNMENTS = [
    (re.compile(rf"{key}\s*=\s*'[^']*'", re.IGNORECASE), f"{key}='[REDACTED]'")
    for key in ("password", "token", "secret", "api_key")
]

_EMAIL = re.compile(r"([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")
_US_PHONE = re.compile(r"\+1\d{10}")


def _mask_email(match: re.Match[str]) -> str:
    local, domain = match.group(1), match.group(2)
    return f"{local[:2]}***@{domain}"


def _mask_phone(match: re.Match[str]) -> str:
    number = match.group(0)
    return f"{number[:5]}***{number[-2:]}"


def redact_sensitive_data(sql: str) -> str:
    """Mask secrets, e-mail local parts and E.164 US phone numbers.

    The output keeps enough shape to be useful in an audit trail:
    ``password='hunter2'`` becomes ``password='[REDACTED]'``,
    ``jane.doe@example.com`` becomes ``ja***@example.com``.
    """
    redacted = sql
    for pattern, replacement in _SECRET_ASSIGNMENTS:
        redacted = pattern.sub(replacement, redacted)
    redacted = _EMAIL.sub(_mask_email, redacted)
    return _US_PHONE.sub(_mask_phone, redacted)
