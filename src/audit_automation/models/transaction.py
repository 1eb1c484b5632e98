"""Transaction data models for audit evaluation."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class FindingKind(Enum):
    """Which check produced a risk reason."""

    AMOUNT_THRESHOLD = "amount_threshold"
    MISSING_POLICY_CODE = "missing_policy_code"
    INVALID_POLICY_CODE = "invalid_policy_code"
    DUPLICATE_ID = "duplicate_id"
    STATISTICAL_OUTLIER = "statistical_outlier"


@dataclass(frozen=True)
class Transaction:
    """Immutable input record as delivered by ingestion.

    Attributes:
        transaction_id: Source identifier, expected (but not guaranteed) unique.
        date: Calendar date as a zero-padded ``YYYY-MM-DD`` string.
        amount: Signed amount in currency units.
        account: Account the transaction was booked against.
        category: Spend category.
        vendor: Payee.
        policy_code: Approval code, None when the source left it blank.
    """

    transaction_id: str
    date: str
    amount: Decimal
    account: str
    category: str
    vendor: str
    policy_code: Optional[str] = None

    @property
    def month(self) -> str:
        """Year-month key (``YYYY-MM``) used by the monthly trend."""
        return self.date[:7]

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.transaction_id!r}, date={self.date}, "
            f"amount={self.amount}, category={self.category!r})"
        )


@dataclass(frozen=True)
class Finding:
    """One check that fired for a transaction."""

    kind: FindingKind
    message: str


@dataclass(frozen=True)
class FlaggedTransaction:
    """A transaction together with every finding raised against it.

    Findings are ordered amount threshold, policy code, duplicate, outlier.

    Attributes:
        transaction: The evaluated input record.
        findings: Ordered findings; empty when the transaction is clean.
    """

    transaction: Transaction
    findings: tuple[Finding, ...] = field(default_factory=tuple)

    @property
    def risk_reasons(self) -> tuple[str, ...]:
        """Human-readable reasons in evaluation order."""
        return tuple(finding.message for finding in self.findings)

    @property
    def is_flagged(self) -> bool:
        """True when at least one check fired."""
        return bool(self.findings)

    def has_finding(self, kind: FindingKind) -> bool:
        """Check whether a finding of the given kind is present."""
        return any(finding.kind is kind for finding in self.findings)

    def messages_for(self, kind: FindingKind) -> list[str]:
        """Messages of every finding of the given kind."""
        return [finding.message for finding in self.findings if finding.kind is kind]

    # Shortcuts to the wrapped record
    @property
    def transaction_id(self) -> str:
        return self.transaction.transaction_id

    @property
    def date(self) -> str:
        return self.transaction.date

    @property
    def amount(self) -> Decimal:
        return self.transaction.amount

    @property
    def account(self) -> str:
        return self.transaction.account

    @property
    def category(self) -> str:
        return self.transaction.category

    @property
    def vendor(self) -> str:
        return self.transaction.vendor

    @property
    def policy_code(self) -> Optional[str]:
        return self.transaction.policy_code
