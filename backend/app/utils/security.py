"""
Gym Roster — Input Sanitization & PII masking
"""

import re


def sanitize_input(text: str, max_length: int = 500) -> str:
    """
    Clean free-text input (names, condition details).
    Removes HTML tags and control characters, trims whitespace, limits length.
    """
    if not text:
        return ""
    text = re.sub(r"<[^>]+>", "", text)
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)
    return text.strip()[:max_length]


def mask_aadhaar(aadhaar: str) -> str:
    """Mask Aadhaar number for logs: XXXX-XXXX-1234."""
    digits = re.sub(r"\D", "", aadhaar or "")
    if len(digits) == 12:
        return f"XXXX-XXXX-{digits[-4:]}"
    return "XXXX-XXXX-XXXX"


def mask_contact(contact: str) -> str:
    """Keep only the last four digits of a phone number: ******3210."""
    digits = re.sub(r"\D", "", contact or "")
    if len(digits) <= 4:
        return "*" * len(digits)
    return "*" * (len(digits) - 4) + digits[-4:]
