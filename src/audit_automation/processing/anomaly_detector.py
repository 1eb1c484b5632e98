"""Statistical outlier detection over transaction categories."""

from dataclasses import dataclass
from decimal import Decimal

from audit_automation.config import AuditConfig
from audit_automation.models.transaction import Finding, FindingKind, Transaction
from audit_automation.utils.decimal_utils import format_money
from audit_automation.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CategoryStatistics:
    """Amount statistics for one category.

    Attributes:
        category: Category name.
        count: Number of transactions in the category.
        mean: Population mean of amounts.
        std_dev: Population standard deviation of amounts.
        threshold: mean + factor * std_dev, None when the category is
            not outlier-checked (too few samples or zero spread).
    """

    category: str
    count: int
    mean: Decimal
    std_dev: Decimal
    threshold: Decimal | None


def group_by_category(transactions: list[Transaction]) -> dict[str, list[int]]:
    """Batch positions per category, categories in first-seen order."""
    by_category: dict[str, list[int]] = {}
    for index, txn in enumerate(transactions):
        by_category.setdefault(txn.category, []).append(index)
    return by_category


class AnomalyDetector:
    """Flags amounts far above their category's average.

    A transaction is an outlier when its amount is strictly greater than
    ``mean + factor * std_dev`` of its category. Statistics are population
    statistics (divide by N). Categories with fewer than
    ``min_samples_for_outlier_detection`` transactions, or whose amounts are
    all identical, are skipped.

    Results depend on the whole batch: the same transaction can be an outlier
    in one batch and not in another.
    """

    def __init__(self, config: AuditConfig):
        """Initialize anomaly detector.

        Args:
            config: Audit settings with the outlier factor and sample minimum.
        """
        self.config = config

    def category_statistics(self, transactions: list[Transaction]) -> list[CategoryStatistics]:
        """Compute per-category statistics.

        Args:
            transactions: The full batch.

        Returns:
            One entry per category, in first-seen order.
        """
        stats: list[CategoryStatistics] = []
        for category, positions in group_by_category(transactions).items():
            amounts = [transactions[i].amount for i in positions]
            stats.append(self._statistics(category, amounts))
        return stats

    def detect_outliers(self, transactions: list[Transaction]) -> dict[int, list[Finding]]:
        """Find statistical outliers.

        Args:
            transactions: The full batch.

        Returns:
            Mapping of batch position to its outlier findings.
        """
        findings: dict[int, list[Finding]] = {}

        for category, positions in group_by_category(transactions).items():
            amounts = [transactions[i].amount for i in positions]
            stats = self._statistics(category, amounts)
            if stats.threshold is None:
                continue

            for index in positions:
                amount = transactions[index].amount
                if amount > stats.threshold:
                    findings[index] = [
                        Finding(
                            FindingKind.STATISTICAL_OUTLIER,
                            f"Outlier: Amount {format_money(amount)} is significantly "
                            f"higher than category '{category}' average "
                            f"({format_money(stats.mean)}, threshold {format_money(stats.threshold)}).",
                        )
                    ]

            logger.debug(
                f"Category '{category}': n={stats.count}, mean={stats.mean:.2f}, "
                f"std_dev={stats.std_dev:.2f}, threshold={stats.threshold:.2f}"
            )

        logger.info(f"Detected {len(findings)} statistical outliers")
        return findings

    def _statistics(self, category: str, amounts: list[Decimal]) -> CategoryStatistics:
        """Population mean and standard deviation for one category.

        Args:
            category: Category name.
            amounts: Amounts of every transaction in the category.

        Returns:
            Statistics with threshold set only when the category qualifies.
        """
        count = len(amounts)
        if count == 0:
            return CategoryStatistics(category, 0, Decimal("0"), Decimal("0"), None)

        mean = sum(amounts, Decimal("0")) / count
        variance = sum(((a - mean) ** 2 for a in amounts), Decimal("0")) / count
        std_dev = variance.sqrt()

        threshold: Decimal | None = None
        if count >= self.config.min_samples_for_outlier_detection and std_dev != 0:
            threshold = mean + self.config.outlier_std_dev_factor * std_dev

        return CategoryStatistics(category, count, mean, std_dev, threshold)


def detect_outliers(
    transactions: list[Transaction],
    config: AuditConfig,
) -> dict[int, list[Finding]]:
    """Convenience function to detect statistical outliers.

    Args:
        transactions: The full batch.
        config: Audit settings.

    Returns:
        Mapping of batch position to its outlier findings.
    """
    return AnomalyDetector(config).detect_outliers(transactions)
