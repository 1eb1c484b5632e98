"""Aggregate views over evaluated transactions.

Every function here takes already-evaluated records and builds one view of
the ProcessedData bundle. Grouping keeps first-seen order; each view then
applies its own ordering.
"""

from decimal import Decimal
from typing import Callable, Iterable

from audit_automation.models.report import (
    AuditSummary,
    ComplianceBucket,
    PolicyComplianceDataPoint,
    PolicyViolation,
    SpendingLeader,
    TimeSeriesDataPoint,
    ViolationKind,
)
from audit_automation.models.transaction import FindingKind, FlaggedTransaction, Transaction

# Findings that count as policy violations, and the kind they map to
VIOLATION_KINDS: dict[FindingKind, ViolationKind] = {
    FindingKind.MISSING_POLICY_CODE: ViolationKind.MISSING_POLICY_CODE,
    FindingKind.INVALID_POLICY_CODE: ViolationKind.INVALID_POLICY_CODE,
    FindingKind.AMOUNT_THRESHOLD: ViolationKind.AMOUNT_VIOLATION,
}

# Violation list order per transaction: policy code first, then amount
_VIOLATION_ORDER = (
    FindingKind.MISSING_POLICY_CODE,
    FindingKind.INVALID_POLICY_CODE,
    FindingKind.AMOUNT_THRESHOLD,
)


def sum_by(
    transactions: Iterable[Transaction],
    key: Callable[[Transaction], str],
) -> dict[str, Decimal]:
    """Sum amounts per key, keys in first-seen order."""
    totals: dict[str, Decimal] = {}
    for txn in transactions:
        name = key(txn)
        totals[name] = totals.get(name, Decimal("0")) + txn.amount
    return totals


def rank_spending(totals: dict[str, Decimal]) -> list[SpendingLeader]:
    """Sort totals descending by amount. Ties keep first-seen order."""
    leaders = [SpendingLeader(name=name, amount=amount) for name, amount in totals.items()]
    return sorted(leaders, key=lambda leader: leader.amount, reverse=True)


def spending_leaders(
    transactions: Iterable[Transaction],
    key: Callable[[Transaction], str],
) -> list[SpendingLeader]:
    """Full descending ranking for one dimension (category, vendor, account)."""
    return rank_spending(sum_by(transactions, key))


def monthly_trend(transactions: Iterable[Transaction]) -> list[TimeSeriesDataPoint]:
    """Monthly totals keyed by the ``YYYY-MM`` prefix of the date, ascending.

    Lexicographic order equals calendar order for zero-padded ISO dates.
    """
    totals = sum_by(transactions, lambda t: t.month)
    return [TimeSeriesDataPoint(date=month, amount=totals[month]) for month in sorted(totals)]


def compliance_bucket(flagged: FlaggedTransaction) -> ComplianceBucket:
    """Place a transaction in exactly one compliance bucket.

    Precedence is missing code, invalid code, amount violation, compliant.
    Duplicate and outlier findings do not affect the bucket.
    """
    if flagged.has_finding(FindingKind.MISSING_POLICY_CODE):
        return ComplianceBucket.MISSING_POLICY_CODE
    if flagged.has_finding(FindingKind.INVALID_POLICY_CODE):
        return ComplianceBucket.INVALID_POLICY_CODE
    if flagged.has_finding(FindingKind.AMOUNT_THRESHOLD):
        return ComplianceBucket.AMOUNT_VIOLATION
    return ComplianceBucket.COMPLIANT


def policy_compliance(flagged_transactions: Iterable[FlaggedTransaction]) -> list[PolicyComplianceDataPoint]:
    """Count transactions per compliance bucket, omitting empty buckets."""
    counts = {bucket: 0 for bucket in ComplianceBucket}
    for flagged in flagged_transactions:
        counts[compliance_bucket(flagged)] += 1

    return [
        PolicyComplianceDataPoint(name=bucket.value, value=count)
        for bucket, count in counts.items()
        if count > 0
    ]


def policy_violations(flagged_transactions: Iterable[FlaggedTransaction]) -> list[PolicyViolation]:
    """Collect deduplicated policy violations.

    One entry per (transaction_id, kind) pair; the first contributing
    finding supplies the details text.
    """
    violations: dict[tuple[str, ViolationKind], PolicyViolation] = {}

    for flagged in flagged_transactions:
        for finding_kind in _VIOLATION_ORDER:
            for message in flagged.messages_for(finding_kind):
                kind = VIOLATION_KINDS[finding_kind]
                key = (flagged.transaction_id, kind)
                if key in violations:
                    continue
                violations[key] = PolicyViolation(
                    transaction_id=flagged.transaction_id,
                    date=flagged.date,
                    amount=flagged.amount,
                    category=flagged.category,
                    vendor=flagged.vendor,
                    kind=kind,
                    details=message,
                )

    return list(violations.values())


def build_summary(
    all_transactions: list[FlaggedTransaction],
    violations: list[PolicyViolation],
) -> AuditSummary:
    """Headline counts. An empty batch yields zeros and Decimal("0")."""
    total_amount = sum((t.amount for t in all_transactions), Decimal("0"))
    flagged_count = sum(1 for t in all_transactions if t.is_flagged)
    violation_pairs = {(v.transaction_id, v.kind) for v in violations}

    return AuditSummary(
        total_transactions=len(all_transactions),
        total_amount=total_amount,
        flagged_for_audit_count=flagged_count,
        policy_violations_count=len(violation_pairs),
    )
