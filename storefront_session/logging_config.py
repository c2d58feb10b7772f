r"""
Logging configuration module for the storefront session layer.

Provides a configurable logging setup using the colorlog library with
structured error logging and aggregation capabilities.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import defaultdict
from typing import Any

import colorlog


# Categories produced by errors.handling.log_error, in report order.
ERROR_CATEGORIES = {
    "network": "transport failures",
    "business": "refused by the backend",
    "renewal": "token renewal failures",
    "session": "sessions ended",
    "internal": "session layer errors",
}


class ErrorAggregator:
    """Counts session-layer errors per category.

    Answers the question a support engineer asks after a bad session: did the
    user get logged out because renewal failed, or was the network flaky?
    Only the most recent entries per category are kept.
    """

    max_entries = 200

    def __init__(self):
        self.errors: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.lock = threading.Lock()

    def record_error(self, error_type: str, message: str, context: dict[str, Any] = None) -> None:
        """Record an error occurrence with context."""
        with self.lock:
            entries = self.errors[error_type]
            entries.append({"timestamp": time.time(), "message": message, "context": context or {}})
            if len(entries) > self.max_entries:
                del entries[: len(entries) - self.max_entries]

    def get_error_summary(self) -> dict[str, Any]:
        """Per-category counts with the last recorded occurrence."""
        with self.lock:
            return {
                error_type: {
                    "total_count": len(entries),
                    "label": ERROR_CATEGORIES.get(error_type, "uncategorized"),
                    "last_occurrence": entries[-1] if entries else None,
                }
                for error_type, entries in self.errors.items()
            }

    def session_ended_by_renewal(self) -> bool:
        """True when a renewal failure preceded the last session end."""
        with self.lock:
            renewals = self.errors.get("renewal")
            endings = self.errors.get("session")
            if not renewals or not endings:
                return False
            return renewals[-1]["timestamp"] <= endings[-1]["timestamp"]

    def clear(self) -> None:
        with self.lock:
            self.errors.clear()

    def log_summary_report(self) -> None:
        """Log one line per category, known categories first."""
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in current session")
            return

        logging.warning("🚨 Session error summary")
        ordered = [c for c in ERROR_CATEGORIES if c in summary]
        ordered += sorted(c for c in summary if c not in ERROR_CATEGORIES)
        for error_type in ordered:
            stats = summary[error_type]
            line = f"  {error_type} ({stats['label']}): {stats['total_count']}"
            if stats["last_occurrence"]:
                line += f" last={stats['last_occurrence']['message']}"
            logging.warning(line)
        if self.session_ended_by_renewal():
            logging.warning("  Last logout followed a failed token renewal")


# Global error aggregator instance
error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception = None,
    context: dict[str, Any] = None,
    level: int = logging.ERROR
) -> None:
    """Log an error with structured context and aggregation.

    Args:
        error_type: Category of the error (e.g., 'network', 'business', 'session')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    structured_message = f"[{error_type.upper()}] {message}"

    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {str(exception)}"

    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    logging.log(level, structured_message)

    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Handles logging configuration using colorlog.

    Supports environment variable configuration for log levels.
    """

    def __init__(self, config=None):
        """Initialize the configurator.

        Args:
            config: Optional config dict; ``quiet_libraries`` lists loggers
                raised to WARNING.
        """
        self.config = config or {}
        self._summary_registered = False

    def configure(self):
        """Configure logging with colored output using colorlog.

        Uses environment variables:
        - DEBUG: Set to 'true', '1', or 'yes' for DEBUG level, otherwise INFO
        """
        debug_env = os.environ.get("DEBUG", "").lower()
        log_level = logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={
                "message": {
                    "ERROR": "red",
                    "CRITICAL": "magenta",
                }
            },
            reset=True,
        )

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)

        logging.basicConfig(
            level=log_level,
            handlers=[handler],
            format="%(message)s",
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        for name in self.config.get("quiet_libraries", ("aiohttp", "asyncio")):
            logging.getLogger(name).setLevel(logging.WARNING)

        for h in root_logger.handlers:
            h.setFormatter(formatter)

        if not self._summary_registered:
            atexit.register(self._log_final_error_summary)
            self._summary_registered = True

    def _log_final_error_summary(self):
        """Log final error summary on application exit."""
        try:
            logging.debug("📊 Final error summary before shutdown:")
            error_aggregator.log_summary_report()
        except Exception as e:
            logging.error(f"Failed to log final error summary: {e}")
