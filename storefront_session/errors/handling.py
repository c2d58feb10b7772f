from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ..constants import GENERIC_FAILURE_MESSAGE
from ..logging_config import log_structured_error
from .internal import (
    BusinessError,
    RenewalFailure,
    SessionExpired,
    SessionLayerError,
    TransportError,
)


def log_error(
    message: str,
    error: Exception,
    context: dict = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error message with the associated exception details.

    The exception is mapped to a category so the aggregator can group
    network, business and session failures separately.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level passed through to the structured logger.
    """
    error_type = "unknown"
    if isinstance(error, TransportError | aiohttp.ClientError | OSError | TimeoutError):
        error_type = "network"
    elif isinstance(error, BusinessError):
        error_type = "business"
    elif isinstance(error, RenewalFailure):
        error_type = "renewal"
    elif isinstance(error, SessionExpired):
        error_type = "session"
    elif isinstance(error, SessionLayerError):
        error_type = "internal"

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
        level=level,
    )


def server_error_message(body: Any) -> str | None:
    """Extract the server-provided error text from a decoded response body.

    Prefers the ``error`` field, then the envelope ``msg``.
    """
    if not isinstance(body, Mapping):
        return None
    for key in ("error", "msg", "message"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def best_failure_message(
    body: Any = None, error: BaseException | None = None
) -> str:
    """Pick the most useful message: server text, transport text, fallback."""
    server_text = server_error_message(body)
    if server_text:
        return server_text
    if error is not None:
        transport_text = str(error).strip()
        if transport_text:
            return transport_text
    return GENERIC_FAILURE_MESSAGE


def classify_transport_failure(error: BaseException, context: str) -> TransportError:
    """Convert a raw transport exception into a ``TransportError``.

    Args:
        error: The aiohttp / timeout / OS level exception.
        context: Descriptive context for the operation (e.g. "GET /profile").

    Returns:
        TransportError carrying the best available message and HTTP status.
    """
    status = getattr(error, "status", None)
    if isinstance(error, TimeoutError):
        message = f"Request timed out ({context})"
    else:
        message = best_failure_message(None, error)
    return TransportError(
        message,
        status=status if isinstance(status, int) else None,
        data={"operation": context, "exception": type(error).__name__},
    )
