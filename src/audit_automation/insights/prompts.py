"""Prompt templates for narrative audit insights."""

from typing import Sequence

from audit_automation.models.transaction import FlaggedTransaction
from audit_automation.utils.decimal_utils import format_money

INSIGHTS_SYSTEM_PROMPT = """You are an expert audit assistant. You review \
financial transactions that an automated rule engine has flagged for \
potential audit and explain the risk they represent to a human auditor.

Guidelines:
1. Be concise, factual, and actionable
2. Only refer to the transactions and reasons you are given
3. Prioritize the most severe or unusual flags"""


def format_transaction_line(txn: FlaggedTransaction) -> str:
    """One bullet line describing a flagged transaction."""
    return (
        f"- ID: {txn.transaction_id}, Date: {txn.date}, "
        f"Amount: {format_money(txn.amount)}, Category: {txn.category}, "
        f"Vendor: {txn.vendor}, Reasons: {', '.join(txn.risk_reasons)}"
    )


def build_insights_prompt(flagged: Sequence[FlaggedTransaction]) -> str:
    """Build the user prompt for a set of flagged transactions.

    Args:
        flagged: Flagged transactions to analyze.

    Returns:
        Formatted prompt string.
    """
    transaction_lines = "\n".join(format_transaction_line(txn) for txn in flagged)

    return f"""Analyze the following financial transactions that have been flagged for potential audit.
Provide a concise summary of the overall risk profile indicated by these flagged transactions.
Then, for each transaction, briefly highlight the most critical risk factors.

Flagged Transactions:
{transaction_lines}

Overall Summary and Key Concerns:
[Your summary here]

Detailed Breakdown (Highlight critical risks per transaction):
[Your breakdown here, focusing on the most severe/unusual flags for each]"""
