"""Single-flight credential renewal.

The coordinator is a two-state machine (IDLE / REFRESHING) plus a FIFO wait
queue. The first caller to report an expiry while IDLE drives the renewal
call itself; every later caller is parked in the queue until that call
resolves. The queue is drained to empty exactly once per renewal attempt.

All state changes between a check and the matching action happen without an
intervening ``await``, so the event loop can never interleave two of them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..credentials.store import CredentialStore
from ..errors.handling import log_error
from ..errors.internal import RenewalFailure, SessionExpired
from .renewal import RenewalClient
from .types import RefreshState, Waiter

if TYPE_CHECKING:
    from .lifecycle import SessionLifecycle


class RefreshCoordinator:
    """Ensures at most one renewal call is in flight at a time.

    Attributes:
        renewal_count: Number of renewal calls started since creation or reset.
    """

    def __init__(
        self,
        store: CredentialStore,
        renewal: RenewalClient,
        lifecycle: SessionLifecycle,
    ) -> None:
        self._store = store
        self._renewal = renewal
        self._lifecycle = lifecycle
        self._state = RefreshState.IDLE
        self._queue: list[Waiter] = []
        self.renewal_count = 0

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def pending(self) -> int:
        """Number of callers currently parked behind the in-flight renewal."""
        return len(self._queue)

    async def acquire_fresh_token(self) -> str:
        """Obtain a renewed access credential after an expiry signal.

        Returns:
            The new access credential.

        Raises:
            SessionExpired: If no refresh credential is stored, the renewal
                failed, or the session was logged out while the renewal was in
                flight. Credentials are cleared before this is raised.
            asyncio.CancelledError: If this caller drove the renewal and was
                cancelled. Queued callers are rejected but the credentials are
                left untouched.
        """
        if self._state is RefreshState.REFRESHING:
            waiter = Waiter(asyncio.get_running_loop().create_future())
            self._queue.append(waiter)
            logging.debug(f"⏳ Waiting for in-flight renewal position={len(self._queue)}")
            return await waiter.future

        refresh = self._store.get().refresh
        if not refresh:
            logging.warning("🚪 Credential expired and no refresh credential stored")
            self._lifecycle.on_unrecoverable_auth_failure()
            raise SessionExpired("No refresh credential available")

        self._state = RefreshState.REFRESHING
        self.renewal_count += 1
        generation = self._store.generation
        logging.debug(f"🔄 Renewal started cycle={self.renewal_count}")
        try:
            result = await self._renewal.renew(refresh)
        except RenewalFailure as e:
            log_error("Token renewal failed", e, context={"cycle": self.renewal_count})
            self._fail_cycle()
            raise SessionExpired(data={"reason": str(e)}) from e
        except BaseException as e:
            # The refresh credential was never rejected, so the session stays.
            rejected = self._abandon_cycle("Token renewal interrupted")
            logging.warning(
                f"⚠️ Renewal interrupted type={type(e).__name__} rejected={rejected}"
            )
            raise

        if self._store.generation != generation:
            rejected = self._abandon_cycle("Session ended during token renewal")
            logging.info(f"🚪 Renewal result discarded after logout rejected={rejected}")
            raise SessionExpired("Session ended during token renewal")

        self._store.set(result.access_token, result.refresh_token)
        self._complete_cycle(result.access_token)
        return result.access_token

    def reset(self) -> None:
        """Return to IDLE, rejecting anyone still queued. Intended for tests."""
        self._abandon_cycle("Refresh coordinator reset")
        self.renewal_count = 0

    def _drain(self) -> list[Waiter]:
        waiters, self._queue = self._queue, []
        self._state = RefreshState.IDLE
        return waiters

    def _complete_cycle(self, access_token: str) -> None:
        waiters = self._drain()
        resumed = sum(1 for waiter in waiters if waiter.resolve(access_token))
        logging.info(f"✅ Renewal complete resumed={resumed} queued={len(waiters)}")

    def _abandon_cycle(self, reason: str) -> int:
        """Reject every waiter without touching the session."""
        waiters = self._drain()
        for waiter in waiters:
            waiter.reject(SessionExpired(reason))
        return len(waiters)

    def _fail_cycle(self) -> None:
        waiters = self._drain()
        self._lifecycle.on_unrecoverable_auth_failure()
        for waiter in waiters:
            waiter.reject(SessionExpired())
        logging.info(f"🚪 Renewal failed rejected={len(waiters)}")


def create_refresh_coordinator(
    store: CredentialStore,
    renewal: RenewalClient,
    lifecycle: SessionLifecycle,
) -> RefreshCoordinator:
    """Build an independent coordinator with its own state and queue."""
    return RefreshCoordinator(store, renewal, lifecycle)
