"""Logging setup for audit automation.

All modules log under the ``audit_automation`` namespace so one call to
``setup_logging`` controls the whole package.
"""

import logging
import sys
import time
from pathlib import Path

DEFAULT_LOG_FILE = "audit_automation.log"

# Context keys whose values never reach a log record
SENSITIVE_FIELDS = {"api_key", "token", "secret", "password", "account_number"}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def mask_sensitive(context: dict[str, object]) -> dict[str, object]:
    """Replace values of sensitive keys with ``***``."""
    return {k: "***" if k.lower() in SENSITIVE_FIELDS else v for k, v in context.items()}


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
) -> logging.Logger:
    """Configure the package logger, replacing any earlier handlers.

    Args:
        level: Level name. Unknown names fall back to INFO.
        log_file: Log file path. None means DEFAULT_LOG_FILE and an empty
            string turns file logging off.
        console_output: Also log to stderr.

    Returns:
        The ``audit_automation`` logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger("audit_automation")
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = []
    if log_file is None:
        log_file = DEFAULT_LOG_FILE
    if log_file:
        handlers.append(logging.FileHandler(Path(log_file), encoding="utf-8"))
    if console_output:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a module logger inside the ``audit_automation`` namespace."""
    if name == "audit_automation" or name.startswith("audit_automation."):
        return logging.getLogger(name)
    return logging.getLogger(f"audit_automation.{name}")


class LogContext:
    """Times an operation and logs its start and outcome.

    Keyword context is attached to the start message with sensitive keys
    masked. ``elapsed`` holds the duration in seconds once the block exits.

    Example:
        with LogContext(logger, "audit pipeline", transactions=120) as ctx:
            ...
        logger.info(f"took {ctx.elapsed:.3f}s")
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: object):
        self.logger = logger
        self.operation = operation
        self.context = mask_sensitive(context)
        self.elapsed: float | None = None
        self._started = 0.0

    def __enter__(self) -> "LogContext":
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        self.logger.debug(f"Starting {self.operation}" + (f" ({details})" if details else ""))
        self._started = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> bool:
        self.elapsed = time.perf_counter() - self._started
        if exc_type is not None:
            self.logger.error(
                f"{self.operation} failed after {self.elapsed:.3f}s: "
                f"{exc_type.__name__}: {exc_val}",
                exc_info=True,
            )
        else:
            self.logger.debug(f"Finished {self.operation} in {self.elapsed:.3f}s")
        return False
