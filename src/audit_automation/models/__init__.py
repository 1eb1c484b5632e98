"""Data models for transactions, findings, and audit reports."""

from audit_automation.models.report import (
    AuditSummary,
    CategorySpending,
    ComplianceBucket,
    PolicyComplianceDataPoint,
    PolicyViolation,
    ProcessedData,
    SpendingLeader,
    TimeSeriesDataPoint,
    ViolationKind,
)
from audit_automation.models.transaction import (
    Finding,
    FindingKind,
    FlaggedTransaction,
    Transaction,
)

__all__ = [
    "Transaction",
    "Finding",
    "FindingKind",
    "FlaggedTransaction",
    "AuditSummary",
    "CategorySpending",
    "ComplianceBucket",
    "PolicyComplianceDataPoint",
    "PolicyViolation",
    "ProcessedData",
    "SpendingLeader",
    "TimeSeriesDataPoint",
    "ViolationKind",
]
