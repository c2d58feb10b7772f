"""Credential renewal coordination and session lifecycle."""

from .coordinator import RefreshCoordinator, create_refresh_coordinator
from .hook_manager import HookManager
from .lifecycle import ProfileCache, SessionLifecycle
from .renewal import RenewalClient
from .types import RefreshState, Waiter

__all__ = [
    "HookManager",
    "ProfileCache",
    "RefreshCoordinator",
    "RefreshState",
    "RenewalClient",
    "SessionLifecycle",
    "Waiter",
    "create_refresh_coordinator",
]
