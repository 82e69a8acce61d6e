"""Input validation helpers for booking details."""

from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Uganda mobile (07X) and landline (020) numbers, with or without country code
_UGANDA_PHONE_RE = re.compile(r"^(?:256|0)?(7\d|20)\d{7}$")

MAX_PACKAGE_WEIGHT_KG = 1000.0


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def validate_email(email: str) -> bool:
    return bool(email) and _EMAIL_RE.match(email) is not None


def validate_phone(phone: str) -> bool:
    return _UGANDA_PHONE_RE.match(_digits(phone)) is not None


def format_phone_number(phone: str) -> str:
    """Normalise a Ugandan number to ``+256XXXXXXXXX``; unknown shapes are returned as given."""
    cleaned = _digits(phone)
    if cleaned.startswith("0"):
        return "+256" + cleaned[1:]
    if cleaned.startswith("256"):
        return "+" + cleaned
    if len(cleaned) == 9:
        return "+256" + cleaned
    return phone


def validate_package_weight(weight_kg: float) -> bool:
    return 0 < weight_kg <= MAX_PACKAGE_WEIGHT_KG
