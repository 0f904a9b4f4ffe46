"""Shared input sanitizers for API models."""

from __future__ import annotations

import re

EMAIL_MAX_LENGTH = 254
REFERENCE_MAX_LENGTH = 100
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")
REFERENCE_PATTERN = re.compile(r"^[A-Za-z0-9._=-]+$")
_REFERENCE_UNSAFE = re.compile(r"[^A-Za-z0-9._=-]+")


def normalize_email(value: str) -> str:
    if not isinstance(value, str):  # pragma: no cover - Pydantic guards by default
        raise ValueError("email must be a string")
    cleaned = value.strip().lower()
    if not cleaned:
        raise ValueError("email cannot be blank")
    if len(cleaned) > EMAIL_MAX_LENGTH:
        raise ValueError(f"email must be <= {EMAIL_MAX_LENGTH} characters")
    if not EMAIL_PATTERN.fullmatch(cleaned):
        raise ValueError("email must look like name@domain")
    return cleaned


def normalize_reference(value: str | None) -> str | None:
    """Blank references become ``None`` so the server generates one."""
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    if len(cleaned) > REFERENCE_MAX_LENGTH:
        raise ValueError(f"reference must be <= {REFERENCE_MAX_LENGTH} characters")
    if not REFERENCE_PATTERN.fullmatch(cleaned):
        raise ValueError("reference may only contain letters, digits, '.', '_', '=' or '-'")
    return cleaned



def reference_slug(value: str) -> str:
    """Squash characters providers reject in references into single dashes."""
    return _REFERENCE_UNSAFE.sub("-", value.strip()).strip("-") or "ref"


__all__ = [
    "EMAIL_MAX_LENGTH",
    "REFERENCE_MAX_LENGTH",
    "normalize_email",
    "normalize_reference",
    "reference_slug",
]
