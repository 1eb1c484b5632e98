"""Parsers that turn source files into audit transactions."""

from audit_automation.parsers.base import BaseParser, ParseError, ParseResult, RowError
from audit_automation.parsers.csv_parser import CSV_HEADERS, TransactionCSVParser, parse_csv

__all__ = [
    "BaseParser",
    "ParseError",
    "ParseResult",
    "RowError",
    "CSV_HEADERS",
    "TransactionCSVParser",
    "parse_csv",
]
