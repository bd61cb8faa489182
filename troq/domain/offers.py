"""Domain helpers for offer types and contact field validation."""
from __future__ import annotations

import re

OFFER_TYPES = ("sell", "trade", "service", "buy")

# (XX) XXXX-XXXX or (XX) XXXXX-XXXX
PHONE_PATTERN = re.compile(r"\(\d{2}\) \d{4,5}-\d{4}")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_offer_type(value: str | None) -> bool:
    """Return True when the value is one of the fixed offer types."""
    return bool(value) and value in OFFER_TYPES


def is_valid_phone(value: str | None) -> bool:
    """Blank phones are allowed; anything else must match the display mask."""
    if not value or not value.strip():
        return True
    return bool(PHONE_PATTERN.fullmatch(value))


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    return bool(EMAIL_PATTERN.fullmatch(value.strip()))
