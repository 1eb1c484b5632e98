"""Report data models produced by the audit pipeline."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from audit_automation.models.transaction import FlaggedTransaction


class ViolationKind(Enum):
    """Policy violation categories recorded in the violations list."""

    MISSING_POLICY_CODE = "Missing Policy Code"
    INVALID_POLICY_CODE = "Invalid Policy Code"
    AMOUNT_VIOLATION = "Amount Violation"


class ComplianceBucket(Enum):
    """Mutually exclusive buckets used by the compliance breakdown."""

    COMPLIANT = "Compliant"
    MISSING_POLICY_CODE = "Missing Policy Code"
    INVALID_POLICY_CODE = "Invalid Policy Code"
    AMOUNT_VIOLATION = "Amount Violation"


@dataclass(frozen=True)
class PolicyViolation:
    """One (transaction, violation kind) pair with a representative detail."""

    transaction_id: str
    date: str
    amount: Decimal
    category: str
    vendor: str
    kind: ViolationKind
    details: str

    @property
    def reason(self) -> str:
        """Display name of the violation kind."""
        return self.kind.value


@dataclass(frozen=True)
class AuditSummary:
    """Headline counts for a processed batch.

    Attributes:
        total_transactions: Number of records in the batch.
        total_amount: Sum of all amounts (Decimal("0") for an empty batch).
        flagged_for_audit_count: Records with at least one risk reason.
        policy_violations_count: Distinct (identifier, violation kind) pairs.
    """

    total_transactions: int = 0
    total_amount: Decimal = Decimal("0")
    flagged_for_audit_count: int = 0
    policy_violations_count: int = 0


@dataclass(frozen=True)
class SpendingLeader:
    """Name and summed amount for a category, vendor, or account."""

    name: str
    amount: Decimal


CategorySpending = SpendingLeader


@dataclass(frozen=True)
class TimeSeriesDataPoint:
    """Summed amount for one ``YYYY-MM`` month."""

    date: str
    amount: Decimal


@dataclass(frozen=True)
class PolicyComplianceDataPoint:
    """Transaction count for one compliance bucket."""

    name: str
    value: int


@dataclass(frozen=True)
class ProcessedData:
    """Complete output of one pipeline run.

    Attributes:
        all_transactions_with_flags: Every input record in input order.
        flagged_transactions: The subset with at least one risk reason.
        audit_summary: Headline counts.
        policy_violations: Deduplicated (identifier, kind) violations.
        spend_by_category: Full category ranking, descending by amount.
        spend_by_vendor: Full vendor ranking, descending by amount.
        spend_by_account: Full account ranking, descending by amount.
        highest_spending_categories: Top slice of spend_by_category.
        highest_spending_vendors: Top slice of spend_by_vendor.
        highest_spending_accounts: Top slice of spend_by_account.
        spend_trend: Monthly totals, ascending by month.
        policy_compliance: Non-empty compliance buckets.
    """

    all_transactions_with_flags: list[FlaggedTransaction] = field(default_factory=list)
    flagged_transactions: list[FlaggedTransaction] = field(default_factory=list)
    audit_summary: AuditSummary = field(default_factory=AuditSummary)
    policy_violations: list[PolicyViolation] = field(default_factory=list)
    spend_by_category: list[SpendingLeader] = field(default_factory=list)
    spend_by_vendor: list[SpendingLeader] = field(default_factory=list)
    spend_by_account: list[SpendingLeader] = field(default_factory=list)
    highest_spending_categories: list[SpendingLeader] = field(default_factory=list)
    highest_spending_vendors: list[SpendingLeader] = field(default_factory=list)
    highest_spending_accounts: list[SpendingLeader] = field(default_factory=list)
    spend_trend: list[TimeSeriesDataPoint] = field(default_factory=list)
    policy_compliance: list[PolicyComplianceDataPoint] = field(default_factory=list)

    @property
    def unflagged_transactions(self) -> list[FlaggedTransaction]:
        """Records with no risk reasons, in input order."""
        return [t for t in self.all_transactions_with_flags if not t.is_flagged]

    def violations_by_kind(self) -> dict[ViolationKind, list[PolicyViolation]]:
        """Group the violations list by kind, keeping list order."""
        grouped: dict[ViolationKind, list[PolicyViolation]] = {}
        for violation in self.policy_violations:
            grouped.setdefault(violation.kind, []).append(violation)
        return grouped
