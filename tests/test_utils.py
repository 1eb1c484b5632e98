"""Tests for amount, date and sanitization helpers."""

from decimal import Decimal

import pytest

from audit_automation.models.transaction import FindingKind, Transaction
from audit_automation.processing import process_transactions
from audit_automation.utils.date_utils import normalize_date
from audit_automation.utils.decimal_utils import format_currency, format_money, parse_amount
from audit_automation.utils.sanitize import sanitize_for_csv


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1234.56", Decimal("1234.56")),
            ("$1,234.56", Decimal("1234.56")),
            ("-$1,234.56", Decimal("-1234.56")),
            ("($50.00)", Decimal("-50.00")),
            (" 7 ", Decimal("7")),
        ],
    )
    def test_valid(self, raw: str, expected: Decimal) -> None:
        """Common amount spellings are accepted."""
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "NaN", "Infinity"])
    def test_invalid(self, raw: str) -> None:
        """Unparseable or non-finite amounts raise ValueError."""
        with pytest.raises(ValueError):
            parse_amount(raw)


class TestFormatting:
    """Tests for money formatting."""

    def test_format_money(self) -> None:
        """Two decimals with grouping by default."""
        assert format_money(Decimal("3894.0545")) == "$3,894.05"
        assert format_money(Decimal("-12.5")) == "-$12.50"

    def test_format_money_threshold_style(self) -> None:
        """Whole thresholds are quoted without decimals."""
        assert format_money(Decimal("1000"), decimal_places=None) == "$1,000"
        assert format_money(Decimal("2500.50"), decimal_places=None) == "$2,500.50"

    def test_format_currency(self) -> None:
        """Plain numbers for CSV output."""
        assert format_currency(Decimal("1580")) == "1580.00"
        assert format_currency(Decimal("-20.005")) == "-20.01"
        assert format_currency(Decimal("-20"), include_sign=False) == "20.00"


class TestNormalizeDate:
    """Tests for normalize_date."""

    @pytest.mark.parametrize(
        "raw",
        ["2024-01-05", "2024-1-5", "01/05/2024", "1/5/24", "05.01.2024", "05-Jan-2024",
         "Jan 5, 2024", "20240105", "2024-01-05T10:30:00"],
    )
    def test_formats(self, raw: str) -> None:
        """Every supported spelling normalizes to ISO."""
        assert normalize_date(raw) == "2024-01-05"

    @pytest.mark.parametrize("raw", ["", "yesterday", "2024-13-40"])
    def test_invalid(self, raw: str) -> None:
        """Unparseable dates raise ValueError."""
        with pytest.raises(ValueError):
            normalize_date(raw)


class TestSanitizeForCsv:
    """Tests for sanitize_for_csv."""

    @pytest.mark.parametrize("value", ["=1+1", "+SUM(A1)", "@cmd", "-cmd|' /C calc'!A0", "|pipe"])
    def test_formula_prefixed(self, value: str) -> None:
        """Formula triggers get a leading quote."""
        assert sanitize_for_csv(value) == "'" + value

    @pytest.mark.parametrize("value", ["-20.00", "Delta", "", None])
    def test_plain_values_untouched(self, value: str | None) -> None:
        """Negative numbers and ordinary text pass through."""
        assert sanitize_for_csv(value) == value


class TestLargeAmounts:
    """Tests for amounts beyond the default Decimal precision."""

    def test_format_money_huge(self) -> None:
        """Amounts around 1E+30 format with grouping instead of raising."""
        assert format_money(Decimal("1E30")) == "$1," + ",".join(["000"] * 10) + ".00"
        assert format_money(Decimal("-1E30"), decimal_places=None) == "-$1," + ",".join(["000"] * 10)

    def test_format_currency_huge(self) -> None:
        """Plain output keeps every digit."""
        assert format_currency(Decimal("1E30")) == "1" + "0" * 30 + ".00"

    def test_parsed_scientific_amount_audits(self) -> None:
        """A parsed 1e30 amount runs through the pipeline and its messages."""
        amounts = ["100"] * 11 + ["1e30"]
        batch = [
            Transaction(
                transaction_id=f"T{i}",
                date="2024-01-05",
                amount=parse_amount(raw),
                account="ACC-1",
                category="Travel & Expenses",
                vendor="Delta",
                policy_code="P001",
            )
            for i, raw in enumerate(amounts)
        ]

        data = process_transactions(batch)

        big = data.all_transactions_with_flags[-1]
        assert big.has_finding(FindingKind.AMOUNT_THRESHOLD)
        assert big.has_finding(FindingKind.STATISTICAL_OUTLIER)
