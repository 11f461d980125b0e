"""Logging filters that scrub customer contact details."""

from __future__ import annotations

import logging
import re

from tablebook.security.redact import mask_email, mask_phone

_EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
_PHONE_PATTERN = re.compile(r"\+?\d[\d\s().-]{7,}\d")
_ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def _mask_phone_match(match: re.Match[str]) -> str:
    candidate = match.group(0)
    # short ids have fewer than nine digits
    if _ISO_DATE_PATTERN.search(candidate) or sum(ch.isdigit() for ch in candidate) < 9:
        return candidate
    return mask_phone(candidate) or ""


def scrub(message: str) -> str:
    """Mask e-mail addresses and phone numbers found in ``message``."""
    message = _EMAIL_PATTERN.sub(lambda match: mask_email(match.group(0)) or "", message)
    return _PHONE_PATTERN.sub(_mask_phone_match, message)


class SensitiveFilter(logging.Filter):
    """Replace customer contact details in log records with masked values."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = scrub(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    key: scrub(value) if isinstance(value, str) else value
                    for key, value in record.args.items()
                }
            else:
                record.args = tuple(
                    scrub(arg) if isinstance(arg, str) else arg for arg in record.args
                )
        return True


__all__ = ["SensitiveFilter", "scrub"]
