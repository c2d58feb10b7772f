"""Central session context for shared async resources."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from .account import AccountService
from .auth.coordinator import RefreshCoordinator, create_refresh_coordinator
from .auth.hook_manager import HookManager
from .auth.lifecycle import Navigator, SessionLifecycle
from .auth.renewal import RenewalClient
from .config import SessionConfig
from .credentials.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from .credentials.store import CredentialStore, SessionView
from .http.notifier import LoggingNotifier, Notifier
from .http.pipeline import RequestPipeline

# Process-wide context, set by create() and cleared by shutdown().
GLOBAL_CONTEXT: SessionContext | None = None


class SessionContext:
    """Holds the HTTP session and the wired session-layer components."""

    session: aiohttp.ClientSession | None
    store: CredentialStore
    lifecycle: SessionLifecycle
    coordinator: RefreshCoordinator
    pipeline: RequestPipeline
    account: AccountService
    view: SessionView

    def __init__(self, config: SessionConfig) -> None:
        self.config = config
        self.session = None
        self._owns_session = True
        self._lock = asyncio.Lock()

    # ------------------------- Construction ------------------------- #
    @classmethod
    async def create(
        cls,
        config: SessionConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        storage: KeyValueStorage | None = None,
        notifier: Notifier | None = None,
        navigator: Navigator | None = None,
    ) -> SessionContext:
        """Create and wire a new SessionContext.

        Args:
            config: Session settings; defaults come from the environment.
            session: Existing aiohttp session to reuse (the context then does
                not close it on shutdown).
            storage: Credential storage backend; defaults to a JSON file when
                ``config.credentials_file`` is set, memory otherwise.
            notifier: Sink for transient notifications.
            navigator: Called with the login route after an unrecoverable
                auth failure.

        Returns:
            A fully wired SessionContext, registered as ``GLOBAL_CONTEXT``.
        """
        config = config or SessionConfig()
        ctx = cls(config)
        logging.debug("🧪 Creating session context")
        ctx._owns_session = session is None
        ctx.session = session or aiohttp.ClientSession()
        if storage is None:
            storage = (
                JsonFileStorage(config.credentials_file)
                if config.credentials_file
                else MemoryStorage()
            )
        notifier = notifier or LoggingNotifier()
        ctx.store = CredentialStore(storage)
        ctx.view = SessionView(ctx.store)
        ctx.lifecycle = SessionLifecycle(
            ctx.store,
            navigator=navigator,
            login_route=config.login_route,
            hooks=HookManager(),
        )
        ctx.coordinator = create_refresh_coordinator(
            ctx.store, RenewalClient(ctx.session, config), ctx.lifecycle
        )
        ctx.pipeline = RequestPipeline(
            ctx.session,
            ctx.store,
            ctx.coordinator,
            ctx.lifecycle,
            config=config,
            notifier=notifier,
        )
        ctx.account = AccountService(
            ctx.pipeline, ctx.coordinator, ctx.lifecycle, notifier=notifier
        )
        global GLOBAL_CONTEXT  # noqa: PLW0603
        GLOBAL_CONTEXT = ctx
        logging.debug(f"🔗 Session context ready base_url={config.base_url}")
        return ctx

    # --------------------------- Lifecycle -------------------------- #
    async def shutdown(self) -> None:
        """Release resources owned by the context.

        Waits for scheduled lifecycle hooks, closes the HTTP session if the
        context created it, and clears the global reference.
        """
        async with self._lock:
            await self.lifecycle.hooks.wait_idle()
            self.coordinator.reset()
            await self._close_http_session()
            global GLOBAL_CONTEXT  # noqa: PLW0603
            if GLOBAL_CONTEXT is self:
                GLOBAL_CONTEXT = None
            logging.debug("✅ Session context shutdown complete")

    async def _close_http_session(self) -> None:
        if not self.session:
            return
        try:
            if self._owns_session:
                await self.session.close()
        except (aiohttp.ClientError, OSError, ValueError) as e:
            logging.error(f"💥 Error closing HTTP session: {str(e)}")
        finally:
            self.session = None

    async def __aenter__(self) -> SessionContext:
        return self

    async def __aexit__(self, _exc_type, _exc, _tb) -> None:
        await self.shutdown()
