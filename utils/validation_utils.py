"""
utils/validation_utils.py

Purpose: Input validation

- Email normalization
- Phone number format (international, loose)
- PIN format
- Input sanitization
"""

import re
from typing import Optional


PIN_LENGTH = 5
PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")


def normalize_email(email: Optional[str]) -> str:
    """
    Normalizes an email address for storage and lookup.

    Emails are compared case-insensitively, so everything is lowercased.

    Args:
        email: Raw email as supplied by the client

    Returns:
        Lowercased, trimmed email ("" for empty input)
    """
    return (email or "").strip().lower()


def validate_phone_number(phone: str) -> bool:
    """
    Validates an international phone number.

    Accepts an optional leading +, then 7-15 digits once spaces, dashes
    and parentheses are removed. No country-specific rules are applied.

    Args:
        phone: Phone number string

    Returns:
        True if the number looks dialable
    """
    if not phone:
        return False

    compact = re.sub(r"[\s\-\(\)]", "", phone)
    return bool(PHONE_PATTERN.match(compact))


def validate_pin_format(pin: str) -> bool:
    """
    Validates an admin-issued PIN: exactly 5 non-whitespace characters.
    """
    if not pin:
        return False
    return len(pin) == PIN_LENGTH and not any(ch.isspace() for ch in pin)


def sanitize_input(text: str, max_length: int = 200) -> str:
    """
    Sanitizes free-text user input.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text[:max_length]

    # Strip markup characters
    text = re.sub(r"[<>{}\[\]]", "", text)

    # Normalize whitespace
    text = " ".join(text.split())

    return text.strip()
