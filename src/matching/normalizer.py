"""Text normalization for name, phone and email comparison."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_NON_DIGIT = re.compile(r"\D")


def normalize_name(name: str) -> str:
    """Canonicalize a name for comparison.

    Lowercases, maps ``&`` to ``and``, drops anything that is not a
    lowercase letter, digit or whitespace, then collapses whitespace runs
    and trims the ends.
    Callers must guard non-string input.

    Args:
        name: Raw name text

    Returns:
        Normalized name (idempotent)
    """
    text = name.lower()
    text = text.replace("&", "and")
    text = _NON_ALNUM.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def clean_text(value: object) -> str:
    """Lowercase and trim a string field; anything else becomes ''."""
    if not isinstance(value, str):
        return ""
    return _WHITESPACE.sub(" ", value.strip().lower())


def normalize_phone(phone: object) -> str:
    """Reduce a phone number to digits, dropping a single leading country 1.

    Args:
        phone: Raw phone value from a form or record

    Returns:
        Digit string, or '' when the value is missing or not a string
    """
    if not isinstance(phone, str):
        return ""
    digits = _NON_DIGIT.sub("", phone)
    if digits.startswith("1"):
        digits = digits[1:]
    return digits


def normalize_email(email: object) -> str:
    """Lowercase and trim an email address ('' for non-strings)."""
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def parse_full_name(full_name: object) -> tuple[str, str]:
    """Split a full name into (first, last).

    Middle names are dropped: the first word is the first name and the
    last word is the last name.

    Args:
        full_name: Full name as typed at signup

    Returns:
        Tuple of (first_name, last_name); missing parts are ''
    """
    if not isinstance(full_name, str):
        return "", ""
    parts = full_name.split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[-1]
