"""Helpers for masking customer contact details."""

from __future__ import annotations


def mask_email(value: str | None) -> str | None:
    """Keep the first character of the local part and the domain."""
    if not value or "@" not in value:
        return value
    local, _, domain = value.partition("@")
    return f"{local[:1]}***@{domain}"


def mask_phone(value: str | None) -> str | None:
    """Keep only the last two digits of a phone number."""
    if not value:
        return value
    digits = "".join(ch for ch in value if ch.isdigit())
    if len(digits) <= 2:
        return "**"
    return "*" * (len(digits) - 2) + digits[-2:]
