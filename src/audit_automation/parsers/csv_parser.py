"""CSV parser for transaction audit batches."""

import csv
from pathlib import Path
from typing import Iterable, Mapping, Optional

from audit_automation.models.transaction import Transaction
from audit_automation.parsers.base import BaseParser, ParseError, ParseResult, RowError
from audit_automation.utils.date_utils import normalize_date
from audit_automation.utils.decimal_utils import parse_amount
from audit_automation.utils.logging_config import get_logger

logger = get_logger(__name__)

# Maximum CSV file size to prevent memory exhaustion (50 MB)
MAX_CSV_FILE_SIZE = 50 * 1024 * 1024

# Maximum number of data rows
MAX_CSV_ROWS = 500_000

CSV_HEADERS = [
    "transaction_id",
    "date",
    "amount",
    "account",
    "category",
    "vendor",
    "policy_code",
]

# Fields a row must carry to become a Transaction
REQUIRED_FIELDS = ("transaction_id", "date", "amount", "category")


class TransactionCSVParser(BaseParser):
    """Parser for audit CSV files.

    Every column in CSV_HEADERS must be present in the header row (names are
    trimmed, extra columns are ignored). Malformed rows are reported as
    RowError and skipped so that the valid rows can still be audited.
    """

    def __init__(self, strict: bool = False):
        """Initialize CSV parser.

        Args:
            strict: If True, raise ParseError on the first malformed row.
                   If False, record a RowError and skip the row.
        """
        self.strict = strict

    @property
    def supported_extensions(self) -> list[str]:
        """Return supported file extensions."""
        return [".csv", ".txt"]

    def parse(self, file_path: Path) -> ParseResult:
        """Parse a CSV file.

        Args:
            file_path: Path to the CSV file.

        Returns:
            ParseResult with valid transactions and row errors.

        Raises:
            ParseError: If the file is too large or lacks required headers.
            FileNotFoundError: If the file doesn't exist.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_size = file_path.stat().st_size
        if file_size > MAX_CSV_FILE_SIZE:
            raise ParseError(
                f"File too large ({file_size / 1024 / 1024:.1f} MB). "
                f"Maximum allowed is {MAX_CSV_FILE_SIZE / 1024 / 1024:.0f} MB",
                file_path,
            )

        try:
            with open(file_path, encoding="utf-8-sig", errors="replace", newline="") as f:
                reader = csv.reader(f)
                header = next(reader, None)
                if header is None:
                    raise ParseError(f"CSV file is empty: {file_path.name}", file_path)

                fieldnames = [name.strip() for name in header]
                missing = [h for h in CSV_HEADERS if h not in fieldnames]
                if missing:
                    raise ParseError(
                        f"Missing required CSV headers: {', '.join(missing)}", file_path
                    )

                rows = (
                    dict(zip(fieldnames, row))
                    for row in reader
                    if row and any(cell.strip() for cell in row)
                )
                result = self.parse_rows(rows)
        except ParseError as e:
            if e.file_path is None:
                e.file_path = file_path
            raise
        except (OSError, csv.Error) as e:
            raise ParseError(f"Failed to parse CSV file: {e}", file_path) from e

        logger.info(
            f"Parsed {len(result.transactions)} transactions from {file_path.name} "
            f"({len(result.errors)} rows skipped)"
        )
        if result.errors:
            logger.warning(
                f"{len(result.errors)} rows could not be parsed in {file_path.name}"
            )
        return result

    def parse_rows(self, rows: Iterable[Mapping[str, Optional[str]]]) -> ParseResult:
        """Parse rows that are already split into header-keyed dicts.

        Args:
            rows: Data rows (header excluded), in file order.

        Returns:
            ParseResult with valid transactions and row errors.

        Raises:
            ParseError: In strict mode, on the first malformed row, or when
                the row limit is exceeded.
        """
        result = ParseResult()

        for row_num, row in enumerate(rows, start=1):
            if row_num > MAX_CSV_ROWS:
                raise ParseError(
                    f"File exceeds maximum row limit ({MAX_CSV_ROWS:,} rows). "
                    f"Split file into smaller chunks."
                )

            try:
                result.transactions.append(self._parse_row(row))
            except ValueError as e:
                if self.strict:
                    raise ParseError(f"Row {row_num}: {e}") from e
                logger.debug(f"Skipping row {row_num}: {e}")
                result.errors.append(RowError(row=row_num, message=str(e)))

        return result

    def _parse_row(self, row: Mapping[str, Optional[str]]) -> Transaction:
        """Build a Transaction from one row.

        Args:
            row: Header-keyed cell values.

        Returns:
            Parsed transaction.

        Raises:
            ValueError: If a required field is missing or unparseable.
        """
        values = {name: (row.get(name) or "").strip() for name in CSV_HEADERS}

        missing = [name for name in REQUIRED_FIELDS if not values[name]]
        if missing:
            raise ValueError(f"Missing required field(s): {', '.join(missing)}")

        return Transaction(
            transaction_id=values["transaction_id"],
            date=normalize_date(values["date"]),
            amount=parse_amount(values["amount"]),
            account=values["account"],
            category=values["category"],
            vendor=values["vendor"],
            policy_code=values["policy_code"] or None,
        )


def parse_csv(file_path: Path, strict: bool = False) -> ParseResult:
    """Convenience function to parse an audit CSV file.

    Args:
        file_path: Path to the CSV file.
        strict: Abort on the first malformed row.

    Returns:
        ParseResult with valid transactions and row errors.
    """
    return TransactionCSVParser(strict=strict).parse(file_path)
