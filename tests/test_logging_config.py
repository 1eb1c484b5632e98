"""Tests for logging helpers."""

import logging

import pytest

from audit_automation.utils.logging_config import LogContext, get_logger, mask_sensitive

LOGGER_NAME = "audit_automation.tests.timing"


class TestLogContext:
    """Tests for LogContext."""

    def test_records_elapsed(self, caplog: pytest.LogCaptureFixture) -> None:
        """Elapsed seconds are set and logged on success."""
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        logger = logging.getLogger(LOGGER_NAME)

        with LogContext(logger, "batch audit", transactions=3) as timing:
            assert timing.elapsed is None

        assert timing.elapsed is not None and timing.elapsed >= 0
        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "Starting batch audit (transactions=3)"
        assert messages[1].startswith("Finished batch audit in ")

    def test_masks_sensitive_context(self, caplog: pytest.LogCaptureFixture) -> None:
        """Secrets never reach the log."""
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        with LogContext(logging.getLogger(LOGGER_NAME), "insights", api_key="sk-live-123"):
            pass

        assert "sk-live-123" not in caplog.text
        assert "api_key=***" in caplog.text

    def test_failure_logged_and_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        """Errors are logged with timing and still propagate."""
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

        with pytest.raises(ValueError):
            with LogContext(logging.getLogger(LOGGER_NAME), "parse") as timing:
                raise ValueError("bad row")

        assert timing.elapsed is not None
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "parse failed after" in errors[0].getMessage()
        assert "ValueError: bad row" in errors[0].getMessage()


class TestHelpers:
    """Tests for get_logger and mask_sensitive."""

    def test_namespaced(self) -> None:
        """Module names are placed under the package namespace once."""
        assert get_logger("audit_automation.cli").name == "audit_automation.cli"
        assert get_logger("scripts.import").name == "audit_automation.scripts.import"

    def test_mask_sensitive(self) -> None:
        """Key matching ignores case."""
        assert mask_sensitive({"Token": "abc", "rows": 4}) == {"Token": "***", "rows": 4}
