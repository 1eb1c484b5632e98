"""Duplicate transaction ID detection."""

from collections import Counter

from audit_automation.config import AuditConfig
from audit_automation.models.transaction import Finding, FindingKind, Transaction
from audit_automation.utils.logging_config import get_logger

logger = get_logger(__name__)


def duplicate_message(transaction_id: str) -> str:
    """Risk reason text for a repeated identifier."""
    return f"Duplicate transaction ID: {transaction_id}."


class Deduplicator:
    """Flags transactions whose identifier occurs more than once in a batch.

    With ``flag_first_duplicate`` enabled every occurrence of a repeated
    identifier gets one finding. Otherwise the first occurrence stays clean
    and each later occurrence gets one finding.

    Duplicates are flagged, never removed.
    """

    def __init__(self, config: AuditConfig):
        """Initialize deduplicator.

        Args:
            config: Audit settings.
        """
        self.config = config

    def find_duplicates(self, transactions: list[Transaction]) -> dict[int, list[Finding]]:
        """Find repeated identifiers.

        Args:
            transactions: The full batch.

        Returns:
            Mapping of batch position to its duplicate findings. Positions
            without findings are absent.
        """
        if not transactions:
            return {}

        counts = Counter(txn.transaction_id for txn in transactions)
        seen: set[str] = set()
        findings: dict[int, list[Finding]] = {}

        for index, txn in enumerate(transactions):
            txn_id = txn.transaction_id
            is_repeat = txn_id in seen
            seen.add(txn_id)

            if counts[txn_id] < 2:
                continue
            if not is_repeat and not self.config.flag_first_duplicate:
                continue

            findings[index] = [Finding(FindingKind.DUPLICATE_ID, duplicate_message(txn_id))]

        duplicated_ids = sum(1 for count in counts.values() if count > 1)
        logger.info(
            f"Found {duplicated_ids} duplicated transaction IDs "
            f"({len(findings)} transactions flagged)"
        )
        return findings

    def get_duplicate_groups(self, transactions: list[Transaction]) -> dict[str, list[Transaction]]:
        """Group every occurrence of each repeated identifier.

        Args:
            transactions: The full batch.

        Returns:
            Identifier to its occurrences in batch order, first-seen order of
            identifiers.
        """
        groups: dict[str, list[Transaction]] = {}
        for txn in transactions:
            groups.setdefault(txn.transaction_id, []).append(txn)
        return {txn_id: group for txn_id, group in groups.items() if len(group) > 1}


def find_duplicates(
    transactions: list[Transaction],
    config: AuditConfig,
) -> dict[int, list[Finding]]:
    """Convenience function to find duplicate identifiers.

    Args:
        transactions: The full batch.
        config: Audit settings.

    Returns:
        Mapping of batch position to its duplicate findings.
    """
    return Deduplicator(config).find_duplicates(transactions)
