"""Narrative insight generation for flagged transactions."""

import os
from typing import Any, Optional, Protocol, Sequence

import anthropic

from audit_automation.config import InsightsConfig
from audit_automation.insights.prompts import INSIGHTS_SYSTEM_PROMPT, build_insights_prompt
from audit_automation.models.transaction import FlaggedTransaction
from audit_automation.utils.logging_config import get_logger

logger = get_logger(__name__)

NO_FLAGGED_MESSAGE = "No transactions were flagged for audit, so there are no AI insights to generate."


class InsightError(Exception):
    """Base exception for insight generation errors."""

    pass


class APIKeyNotFoundError(InsightError):
    """Raised when no API key is configured."""

    pass


class InvalidAPIKeyError(InsightError):
    """Raised when the API rejects the configured key."""

    pass


class EmptyResponseError(InsightError):
    """Raised when the API returns no text."""

    pass


class InsightRequestError(InsightError):
    """Raised when the request fails for any other reason."""

    pass


class InsightGenerator(Protocol):
    """Anything that can turn flagged transactions into prose."""

    def summarize(self, flagged: Sequence[FlaggedTransaction]) -> str:
        """Return a narrative summary or raise InsightError."""
        ...


class AnthropicInsightGenerator:
    """Summarizes flagged transactions with the Anthropic Messages API.

    The client is created lazily on first use. Requests are never retried:
    each failure surfaces as a distinct InsightError subclass.
    """

    def __init__(self, config: Optional[InsightsConfig] = None, client: Any = None):
        """Initialize the generator.

        Args:
            config: Insight settings (model, key variable, limits).
            client: Pre-built API client. When given, no key lookup happens.
        """
        self.config = config or InsightsConfig()
        self._client = client

    @property
    def is_available(self) -> bool:
        """Check if a client exists or the API key is set."""
        if self._client is not None:
            return True
        return bool(os.environ.get(self.config.api_key_env, "").strip())

    def _ensure_client(self) -> Any:
        """Lazily create the Anthropic client."""
        if self._client is not None:
            return self._client

        api_key = os.environ.get(self.config.api_key_env, "").strip()
        if not api_key:
            raise APIKeyNotFoundError(
                f"API key not found in environment variable: {self.config.api_key_env}"
            )

        self._client = anthropic.Anthropic(api_key=api_key)
        logger.info(f"Insight client initialized with model: {self.config.model}")
        return self._client

    def summarize(self, flagged: Sequence[FlaggedTransaction]) -> str:
        """Generate a narrative summary of flagged transactions.

        Only the first ``max_transactions`` transactions are sent.

        Args:
            flagged: Flagged transactions, most relevant first.

        Returns:
            The model's summary text.

        Raises:
            APIKeyNotFoundError: No API key configured.
            InvalidAPIKeyError: The API rejected the key.
            EmptyResponseError: The API returned no text.
            InsightRequestError: Any other API or transport failure.
        """
        client = self._ensure_client()

        if not flagged:
            return NO_FLAGGED_MESSAGE

        batch = list(flagged)[: self.config.max_transactions]
        prompt = build_insights_prompt(batch)
        logger.info(f"Requesting insights for {len(batch)} flagged transactions")

        try:
            response = client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                system=INSIGHTS_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
                timeout=self.config.timeout,
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            raise InvalidAPIKeyError(
                f"API key is not valid. Check the {self.config.api_key_env} environment variable."
            ) from e
        except anthropic.APIError as e:
            raise InsightRequestError(f"Insight request failed: {e}") from e

        text = "".join(
            getattr(block, "text", "") for block in (response.content or [])
        ).strip()
        if not text:
            logger.warning("Insight API returned an empty response")
            raise EmptyResponseError("Received an empty response from the insight API.")

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(
                f"Insight request completed: {usage.input_tokens} in, {usage.output_tokens} out"
            )
        return text
