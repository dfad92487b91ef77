"""
E.164 phone number helpers.
"""

import re

E164_PATTERN = re.compile(r"^\+[1-9]\d{6,14}$")
_NON_PHONE_CHARS = re.compile(r"[^\d+]")


def is_valid_e164(phone: str | None) -> bool:
    """Check a phone number is already in E.164 form."""
    return bool(phone) and E164_PATTERN.match(phone) is not None


def clean_phone(raw: str | None) -> str:
    """Strip everything except digits and '+' (spaces, dashes, parentheses, dots)."""
    if not raw:
        return ""
    return _NON_PHONE_CHARS.sub("", str(raw))


def normalize_phone(raw: str | None) -> str | None:
    """
    Clean a user-supplied phone number and validate it.

    Returns:
        The E.164 number, or None if it is not valid after cleaning
    """
    cleaned = clean_phone(raw)
    return cleaned if is_valid_e164(cleaned) else None
