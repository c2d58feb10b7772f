"""Client-side session layer for the storefront API.

Authenticated requests with single-flight credential renewal and replay.
"""

from .account import AccountService
from .application_context import SessionContext
from .auth import RefreshCoordinator, RefreshState, SessionLifecycle, create_refresh_coordinator
from .config import SessionConfig
from .credentials import CredentialPair, CredentialStore, JsonFileStorage, MemoryStorage, SessionView
from .errors import BusinessError, SessionExpired, SessionLayerError, TransportError
from .http import RequestPipeline, RequestSpec

__version__ = "0.1.0"

__all__ = [
    "AccountService",
    "BusinessError",
    "CredentialPair",
    "CredentialStore",
    "JsonFileStorage",
    "MemoryStorage",
    "RefreshCoordinator",
    "RefreshState",
    "RequestPipeline",
    "RequestSpec",
    "SessionConfig",
    "SessionContext",
    "SessionExpired",
    "SessionLayerError",
    "SessionLifecycle",
    "SessionView",
    "TransportError",
    "create_refresh_coordinator",
]
