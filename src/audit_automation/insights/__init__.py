"""Narrative insights for flagged transactions.

Example usage:
    from audit_automation.insights import AnthropicInsightGenerator

    generator = AnthropicInsightGenerator(config.insights)
    if generator.is_available:
        print(generator.summarize(processed.flagged_transactions))
"""

from audit_automation.insights.client import (
    NO_FLAGGED_MESSAGE,
    AnthropicInsightGenerator,
    APIKeyNotFoundError,
    EmptyResponseError,
    InsightError,
    InsightGenerator,
    InsightRequestError,
    InvalidAPIKeyError,
)

__all__ = [
    "NO_FLAGGED_MESSAGE",
    "AnthropicInsightGenerator",
    "InsightGenerator",
    "InsightError",
    "APIKeyNotFoundError",
    "InvalidAPIKeyError",
    "EmptyResponseError",
    "InsightRequestError",
]
