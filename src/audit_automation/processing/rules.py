"""Per-transaction rule checks.

Each check is a pure function of one transaction and the audit settings and
returns at most one finding.
"""

from audit_automation.config import AuditConfig
from audit_automation.models.transaction import Finding, FindingKind, Transaction
from audit_automation.utils.decimal_utils import format_money

MISSING_POLICY_CODE_MESSAGE = "Missing policy code."


def check_amount_threshold(txn: Transaction, config: AuditConfig) -> list[Finding]:
    """Check a transaction against its category or the general threshold.

    A configured category threshold takes precedence. The general threshold
    only applies to categories that have no threshold of their own.

    Args:
        txn: Transaction to check.
        config: Audit settings with the threshold table.

    Returns:
        Zero or one AMOUNT_THRESHOLD finding.
    """
    category_threshold = config.category_thresholds.get(txn.category)

    if category_threshold is not None:
        if txn.amount > category_threshold:
            return [
                Finding(
                    FindingKind.AMOUNT_THRESHOLD,
                    f"Amount exceeds category threshold "
                    f"({format_money(category_threshold, decimal_places=None)}) "
                    f"for {txn.category}.",
                )
            ]
        return []

    if txn.amount > config.general_threshold:
        return [
            Finding(
                FindingKind.AMOUNT_THRESHOLD,
                f"Amount exceeds general high value threshold "
                f"({format_money(config.general_threshold, decimal_places=None)}).",
            )
        ]
    return []


def check_policy_code(txn: Transaction, config: AuditConfig) -> list[Finding]:
    """Check that a transaction carries a known policy code.

    Args:
        txn: Transaction to check.
        config: Audit settings with the valid code set.

    Returns:
        Zero or one MISSING_POLICY_CODE / INVALID_POLICY_CODE finding.
    """
    code = (txn.policy_code or "").strip()

    if not code:
        return [Finding(FindingKind.MISSING_POLICY_CODE, MISSING_POLICY_CODE_MESSAGE)]

    if code not in config.valid_policy_codes:
        return [Finding(FindingKind.INVALID_POLICY_CODE, f"Invalid policy code: {code}.")]

    return []
