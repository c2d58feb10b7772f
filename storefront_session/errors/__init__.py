"""Error hierarchy and handling helpers."""

from .handling import (  # noqa: F401
    best_failure_message,
    classify_transport_failure,
    log_error,
    server_error_message,
)
from .internal import (  # noqa: F401
    BusinessError,
    CredentialRejected,
    RenewalFailure,
    SessionExpired,
    SessionLayerError,
    TransportError,
)

__all__ = [
    "BusinessError",
    "CredentialRejected",
    "RenewalFailure",
    "SessionExpired",
    "SessionLayerError",
    "TransportError",
    "best_failure_message",
    "classify_transport_failure",
    "log_error",
    "server_error_message",
]
