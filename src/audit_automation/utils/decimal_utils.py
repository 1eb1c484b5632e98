"""Decimal utilities for monetary calculations.

All monetary calculations use Decimal to avoid floating-point drift, so that
per-category and per-month totals add back up to the batch total exactly.
"""

import re
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation, getcontext
from typing import Optional

# Currency symbols to strip
CURRENCY_SYMBOLS = {"$", "€", "£", "¥", "₹"}

# Parentheses-enclosed negatives: ($1,234.56) or (1234.56)
PARENS_NEGATIVE_PATTERN = re.compile(r"^\s*\(\s*([^)]+)\s*\)\s*$")


def parse_amount(raw_amount: str) -> Decimal:
    """Parse a raw amount string into a signed Decimal.

    Handles:
    - Standard: 1234.56, -1234.56
    - With currency and grouping: $1,234.56, -$1,234.56
    - Parentheses for negative: ($1,234.56)

    Args:
        raw_amount: The raw amount string to parse.

    Returns:
        Signed amount.

    Raises:
        ValueError: If the amount cannot be parsed.
    """
    if raw_amount is None or not str(raw_amount).strip():
        raise ValueError("Empty amount string")

    original = raw_amount
    amount_str = str(raw_amount).strip()
    is_negative = False

    parens_match = PARENS_NEGATIVE_PATTERN.match(amount_str)
    if parens_match:
        amount_str = parens_match.group(1).strip()
        is_negative = True

    if amount_str.startswith("-"):
        is_negative = not is_negative
        amount_str = amount_str[1:].strip()

    for symbol in CURRENCY_SYMBOLS:
        amount_str = amount_str.replace(symbol, "")
    amount_str = amount_str.replace(",", "").replace(" ", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse amount '{original}'") from e

    if not amount.is_finite():
        raise ValueError(f"Cannot parse amount '{original}': not a finite number")

    return amount.copy_negate() if is_negative else amount


def quantize_amount(amount: Decimal, decimal_places: int = 2) -> Decimal:
    """Round half-up to a fixed number of places.

    The working precision grows with the amount, so very large values
    (1E+30 and beyond) are rounded instead of raising InvalidOperation.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    digits = max(amount.adjusted(), 0) + decimal_places + 2
    context = Context(prec=max(digits, getcontext().prec))
    return amount.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP, context=context)


def format_currency(
    amount: Decimal,
    decimal_places: int = 2,
    include_sign: bool = True,
) -> str:
    """Format a Decimal amount for plain-number output ("-1234.56").

    Args:
        amount: The amount to format.
        decimal_places: Number of decimal places (default 2).
        include_sign: Whether to include sign for negative amounts.

    Returns:
        Formatted string.
    """
    rounded = quantize_amount(amount, decimal_places)

    if include_sign and rounded < 0:
        return str(rounded)
    return str(rounded.copy_abs())


def format_money(amount: Decimal, symbol: str = "$", decimal_places: Optional[int] = 2) -> str:
    """Format an amount with a currency symbol and thousands grouping.

    ``decimal_places=None`` keeps the amount's own precision, which is how
    configured thresholds are quoted ("$1,000").
    """
    sign = "-" if amount < 0 else ""
    magnitude = amount.copy_abs()
    if decimal_places is None:
        if magnitude == magnitude.to_integral_value():
            magnitude = quantize_amount(magnitude, 0)
        return f"{sign}{symbol}{magnitude:,}"
    rounded = quantize_amount(magnitude, decimal_places)
    return f"{sign}{symbol}{rounded:,}"
