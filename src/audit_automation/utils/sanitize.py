"""Sanitization utilities for safe report output."""

from typing import Optional

# Leading characters that make spreadsheet applications evaluate a cell.
# A leading "-" is only dangerous when it is not a plain number.
_FORMULA_CHARS = ("=", "+", "@", "\t", "\r", "\n", "|")


def sanitize_for_csv(value: Optional[str]) -> Optional[str]:
    """Sanitize a string value for CSV/Excel output.

    Prefixes values that start with a formula-triggering character with a
    single quote (OWASP CSV injection mitigation). Negative numbers such as
    ``-12.50`` are left untouched.

    Args:
        value: String value to sanitize, or None.

    Returns:
        Sanitized string, or None if input was None.
    """
    if value is None:
        return None

    if not value:
        return value

    if value.startswith(_FORMULA_CHARS):
        return "'" + value

    if value.startswith("-") and not _is_number(value):
        return "'" + value

    return value


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True
