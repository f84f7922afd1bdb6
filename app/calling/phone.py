"""
Phone number formatting and validation.

Numbers are normalized to E.164 before they are handed to a provider.
"""

import re
from dataclasses import dataclass

DEFAULT_COUNTRY_CODE = "+91"

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")

KNOWN_COUNTRY_CODES = [
    "+91",  # India
    "+1",  # US/Canada
    "+44",  # UK
    "+61",  # Australia
    "+86",  # China
    "+81",  # Japan
    "+49",  # Germany
    "+33",  # France
    "+39",  # Italy
    "+34",  # Spain
]


@dataclass
class PhoneValidation:
    is_valid: bool
    formatted: str
    error: str | None = None


def format_phone_number(phone: str, default_country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Normalize a phone number to E.164, adding a country code when missing."""
    if not phone:
        return ""

    cleaned = re.sub(r"\D", "", phone)

    if phone.startswith("+"):
        return phone

    if cleaned.startswith("91") and len(cleaned) == 12:
        return "+" + cleaned

    # Trunk prefix
    if cleaned.startswith("0") and len(cleaned) == 11:
        return default_country_code + cleaned[1:]

    if len(cleaned) == 10:
        return default_country_code + cleaned

    # North American number with its leading 1
    if len(cleaned) == 11 and cleaned.startswith("1"):
        return "+" + cleaned

    if len(cleaned) == 12:
        return "+" + cleaned

    return default_country_code + cleaned


def validate_phone_number(phone: str, default_country_code: str = DEFAULT_COUNTRY_CODE) -> PhoneValidation:
    formatted = format_phone_number(phone, default_country_code)

    if not E164_PATTERN.match(formatted):
        return PhoneValidation(
            is_valid=False,
            formatted=formatted,
            error="Invalid phone number format. Must be in E.164 format (e.g., +91XXXXXXXXXX)",
        )

    digits = formatted[1:]
    if len(digits) < 7 or len(digits) > 15:
        return PhoneValidation(
            is_valid=False,
            formatted=formatted,
            error="Phone number too short or too long",
        )

    return PhoneValidation(is_valid=True, formatted=formatted)


def get_country_code(phone: str) -> str:
    for code in KNOWN_COUNTRY_CODES:
        if phone.startswith(code):
            return code
    return DEFAULT_COUNTRY_CODE


def format_phone_for_display(phone: str) -> str:
    """Human readable form: +91 XXXXX XXXXX or +1 (XXX) XXX-XXXX."""
    formatted = format_phone_number(phone)

    if formatted.startswith("+91"):
        digits = formatted[3:]
        if len(digits) == 10:
            return f"+91 {digits[:5]} {digits[5:]}"

    if formatted.startswith("+1"):
        digits = formatted[2:]
        if len(digits) == 10:
            return f"+1 ({digits[:3]}) {digits[3:6]}-{digits[6:]}"

    return formatted
