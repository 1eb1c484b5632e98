"""Date parsing and normalization utilities.

The audit engine keys its monthly trend on the first seven characters of the
date string, so ingestion normalizes every date to zero-padded ISO
``YYYY-MM-DD`` before a Transaction is built.
"""

import re
from datetime import date, datetime

# Slash-separated dates are interpreted as US (MM/DD/YYYY).
# Period-separated dates are interpreted as European (DD.MM.YYYY).
DATE_PATTERNS = [
    # ISO first
    (r"^(\d{4})-(\d{1,2})-(\d{1,2})$", "%Y-%m-%d"),
    (r"^(\d{1,2})/(\d{1,2})/(\d{4})$", "%m/%d/%Y"),
    (r"^(\d{1,2})/(\d{1,2})/(\d{2})$", "%m/%d/%y"),
    (r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$", "%d.%m.%Y"),
    (r"^(\d{1,2})-(\w{3})-(\d{4})$", "%d-%b-%Y"),
    (r"^(\w{3})\s+(\d{1,2}),?\s+(\d{4})$", "%b %d, %Y"),
    (r"^(\d{8})$", "%Y%m%d"),
]

COMPILED_PATTERNS = [(re.compile(pattern), fmt) for pattern, fmt in DATE_PATTERNS]

# ISO date with a trailing time, e.g. "2024-01-15T10:30:00" or "2024-01-15 10:30"
_ISO_DATETIME_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ].+$")


def parse_date(raw_date: str) -> date:
    """Parse a raw date string into a date object.

    Handles:
    - ISO: 2024-01-15, 2024-1-5, 2024-01-15T10:30:00
    - US: 01/15/2024, 1/15/24
    - European: 15.01.2024
    - Text: 15-Jan-2024, Jan 15, 2024
    - Compact: 20240115

    Args:
        raw_date: The raw date string to parse.

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    if not raw_date or not raw_date.strip():
        raise ValueError("Empty date string")

    date_str = raw_date.strip()

    iso_match = _ISO_DATETIME_PATTERN.match(date_str)
    if iso_match:
        date_str = iso_match.group(1)

    for pattern, fmt in COMPILED_PATTERNS:
        if pattern.match(date_str):
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                # Pattern matched but the values are out of range
                continue

    raise ValueError(f"Cannot parse date: '{raw_date}'")


def date_to_iso(d: date) -> str:
    """Convert a date to ISO 8601 format (YYYY-MM-DD)."""
    return d.isoformat()


def normalize_date(raw_date: str) -> str:
    """Parse any supported date format and return it as ``YYYY-MM-DD``.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    return date_to_iso(parse_date(raw_date))
