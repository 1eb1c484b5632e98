"""Audit pipeline: evaluate a batch once and build every report view."""

from typing import Optional, Sequence

from audit_automation.config import AuditConfig
from audit_automation.models.report import ProcessedData
from audit_automation.models.transaction import Finding, FlaggedTransaction, Transaction
from audit_automation.processing.aggregator import (
    build_summary,
    monthly_trend,
    policy_compliance,
    policy_violations,
    spending_leaders,
)
from audit_automation.processing.anomaly_detector import AnomalyDetector
from audit_automation.processing.deduplicator import Deduplicator
from audit_automation.processing.rules import check_amount_threshold, check_policy_code
from audit_automation.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)


class AuditPipeline:
    """Runs every check over a batch and folds the results into reports.

    The pipeline holds only its (immutable) settings, so one instance can
    serve concurrent callers as long as each passes its own batch.
    """

    def __init__(self, config: Optional[AuditConfig] = None):
        """Initialize the pipeline.

        Args:
            config: Audit settings. Defaults to the built-in thresholds.
        """
        self.config = config or AuditConfig()
        self.deduplicator = Deduplicator(self.config)
        self.anomaly_detector = AnomalyDetector(self.config)

    def evaluate(self, transactions: Sequence[Transaction]) -> list[FlaggedTransaction]:
        """Evaluate every transaction exactly once.

        Findings are ordered amount threshold, policy code, duplicate ID,
        statistical outlier.

        Args:
            transactions: The batch, in input order.

        Returns:
            One FlaggedTransaction per input record, same order.
        """
        batch = list(transactions)
        duplicate_findings = self.deduplicator.find_duplicates(batch)
        outlier_findings = self.anomaly_detector.detect_outliers(batch)

        evaluated: list[FlaggedTransaction] = []
        for index, txn in enumerate(batch):
            findings: list[Finding] = []
            findings.extend(check_amount_threshold(txn, self.config))
            findings.extend(check_policy_code(txn, self.config))
            findings.extend(duplicate_findings.get(index, []))
            findings.extend(outlier_findings.get(index, []))
            evaluated.append(FlaggedTransaction(transaction=txn, findings=tuple(findings)))

        return evaluated

    def process(self, transactions: Sequence[Transaction]) -> ProcessedData:
        """Evaluate a batch and build the full report bundle.

        Args:
            transactions: The batch, in input order. May be empty.

        Returns:
            ProcessedData owned by the caller.
        """
        with LogContext(logger, "audit pipeline", transactions=len(transactions)) as timing:
            all_flags = self.evaluate(transactions)
            flagged = [t for t in all_flags if t.is_flagged]
            violations = policy_violations(all_flags)
            raw = [t.transaction for t in all_flags]

            by_category = spending_leaders(raw, lambda t: t.category)
            by_vendor = spending_leaders(raw, lambda t: t.vendor)
            by_account = spending_leaders(raw, lambda t: t.account)
            top = self.config.top_spending_count

            data = ProcessedData(
                all_transactions_with_flags=all_flags,
                flagged_transactions=flagged,
                audit_summary=build_summary(all_flags, violations),
                policy_violations=violations,
                spend_by_category=by_category,
                spend_by_vendor=by_vendor,
                spend_by_account=by_account,
                highest_spending_categories=by_category[:top],
                highest_spending_vendors=by_vendor[:top],
                highest_spending_accounts=by_account[:top],
                spend_trend=monthly_trend(raw),
                policy_compliance=policy_compliance(all_flags),
            )

        logger.info(
            f"Processed {data.audit_summary.total_transactions} transactions: "
            f"{data.audit_summary.flagged_for_audit_count} flagged, "
            f"{data.audit_summary.policy_violations_count} policy violations "
            f"in {timing.elapsed:.3f}s"
        )
        return data


def process_transactions(
    transactions: Sequence[Transaction],
    config: Optional[AuditConfig] = None,
) -> ProcessedData:
    """Convenience function to run the audit pipeline.

    Args:
        transactions: The batch to audit.
        config: Audit settings (per-call override). Defaults to built-ins.

    Returns:
        ProcessedData for the batch.
    """
    return AuditPipeline(config).process(transactions)
