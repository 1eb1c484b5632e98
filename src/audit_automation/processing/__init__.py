"""Transaction audit pipeline components."""

from audit_automation.processing.anomaly_detector import (
    AnomalyDetector,
    CategoryStatistics,
    detect_outliers,
)
from audit_automation.processing.deduplicator import (
    Deduplicator,
    find_duplicates,
)
from audit_automation.processing.pipeline import (
    AuditPipeline,
    process_transactions,
)
from audit_automation.processing.rules import (
    check_amount_threshold,
    check_policy_code,
)

__all__ = [
    "AnomalyDetector",
    "CategoryStatistics",
    "detect_outliers",
    "Deduplicator",
    "find_duplicates",
    "AuditPipeline",
    "process_transactions",
    "check_amount_threshold",
    "check_policy_code",
]
