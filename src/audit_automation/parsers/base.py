"""Base types shared by transaction file parsers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from audit_automation.models.transaction import Transaction
from audit_automation.utils.logging_config import get_logger

logger = get_logger(__name__)


class ParseError(Exception):
    """Exception raised when a whole file cannot be parsed."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        """Initialize ParseError.

        Args:
            message: Error message.
            file_path: Optional path to the file that failed to parse.
        """
        self.file_path = file_path
        super().__init__(message)


@dataclass(frozen=True)
class RowError:
    """A single malformed row. Reported to the user, never fatal.

    Attributes:
        row: 1-based data row number (header excluded).
        message: What was wrong with the row.
    """

    row: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"


@dataclass
class ParseResult:
    """Valid transactions plus the rows that were skipped."""

    transactions: list[Transaction] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class BaseParser(ABC):
    """Abstract base class for transaction file parsers.

    Subclasses must implement:
    - supported_extensions: File extensions this parser handles
    - parse(): Parse a file into transactions and row errors
    """

    @property
    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """Return list of file extensions this parser supports."""
        pass

    @property
    def name(self) -> str:
        """Return parser name for logging."""
        return self.__class__.__name__

    @abstractmethod
    def parse(self, file_path: Path) -> ParseResult:
        """Parse a file.

        Args:
            file_path: Path to the file to parse.

        Returns:
            ParseResult with valid transactions and row errors.

        Raises:
            ParseError: If the file as a whole cannot be parsed.
            FileNotFoundError: If file doesn't exist.
        """
        pass

    def can_parse(self, file_path: Path) -> bool:
        """Check if file extension matches supported extensions."""
        return file_path.suffix.lower() in self.supported_extensions
