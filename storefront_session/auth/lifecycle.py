"""Session lifecycle policy: what logging out means."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from ..constants import STOREFRONT_LOGIN_ROUTE
from ..credentials.store import CredentialPair, CredentialStore
from ..logging_config import log_structured_error
from ..models import User
from .hook_manager import HookManager

Navigator = Callable[[str], Awaitable[None] | None]

LOGOUT_EVENT = "logout"
NAVIGATE_EVENT = "navigate"


class ProfileCache:
    """Holds the cached profile of the signed-in user."""

    def __init__(self) -> None:
        self.profile: User | None = None

    def set(self, profile: User | None) -> None:
        self.profile = profile

    def clear(self) -> None:
        self.profile = None


def _log_navigation(route: str) -> None:
    logging.info(f"➡️ Redirecting to {route}")


class SessionLifecycle:
    """Decides what "logged out" means and performs it.

    Invoked by the refresh coordinator on unrecoverable auth failures and by
    explicit user action.
    """

    def __init__(
        self,
        store: CredentialStore,
        *,
        profile_cache: ProfileCache | None = None,
        navigator: Navigator | None = None,
        login_route: str = STOREFRONT_LOGIN_ROUTE,
        hooks: HookManager | None = None,
    ) -> None:
        self.store = store
        self.profile_cache = profile_cache or ProfileCache()
        self.login_route = login_route
        self.hooks = hooks or HookManager()
        self.hooks.register(NAVIGATE_EVENT, navigator or _log_navigation)

    def logout(self) -> None:
        """Clear credentials and the cached profile.

        Idempotent: when nothing is left to clear, the call has no effect and
        logout hooks do not fire again.
        """
        if self.store.get() == CredentialPair() and self.profile_cache.profile is None:
            logging.debug("🚪 Logout skipped (already logged out)")
            return
        self.store.clear()
        self.profile_cache.clear()
        logging.info("🚪 Logged out")
        self.hooks.fire(LOGOUT_EVENT)

    def on_unrecoverable_auth_failure(self) -> None:
        """Log out and send the user to the login entry point.

        Fire-and-forget: callers that triggered this have already been
        rejected independently.
        """
        log_structured_error(
            "session",
            "Session ended, redirecting to login",
            context={"route": self.login_route},
            level=logging.WARNING,
        )
        self.logout()
        self.hooks.fire(NAVIGATE_EVENT, self.login_route)

    def register_logout_hook(self, hook: Callable[[], Awaitable[None] | None]) -> Callable[[], None]:
        return self.hooks.register(LOGOUT_EVENT, hook)
