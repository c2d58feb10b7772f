"""Credential store: the single owner of the access/refresh pair."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..constants import (
    ACCESS_TOKEN_KEY,
    LEGACY_ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
)
from ..utils import mask_token
from .storage import KeyValueStorage, MemoryStorage

SessionListener = Callable[[bool], None]


@dataclass(frozen=True)
class CredentialPair:
    """Immutable snapshot of the current credentials.

    Attributes:
        access: Bearer token for individual requests; empty when absent.
        refresh: Token exchanged for a new access token; empty when absent.
    """

    access: str = ""
    refresh: str = ""

    def __repr__(self) -> str:
        return (
            f"CredentialPair(access={mask_token(self.access)!r}, "
            f"refresh={mask_token(self.refresh)!r})"
        )


class CredentialStore:
    """Owns the credential pair and its persisted backing.

    Pure get/set/clear with no coordination logic and no network calls.
    Each read and write completes synchronously, so from the pipeline's point
    of view every operation is atomic.
    """

    def __init__(self, storage: KeyValueStorage | None = None) -> None:
        self._storage: KeyValueStorage = storage if storage is not None else MemoryStorage()
        self._access = (
            self._storage.get_item(ACCESS_TOKEN_KEY)
            or self._storage.get_item(LEGACY_ACCESS_TOKEN_KEY)
            or ""
        )
        self._refresh = self._storage.get_item(REFRESH_TOKEN_KEY) or ""
        self._listeners: list[SessionListener] = []
        self._generation = 0

    def get(self) -> CredentialPair:
        return CredentialPair(self._access, self._refresh)

    @property
    def is_active(self) -> bool:
        """True while an access credential is present."""
        return bool(self._access)

    @property
    def generation(self) -> int:
        """Counter bumped every time the access credential is cleared.

        A renewal started under one generation must not write its result into
        a later one.
        """
        return self._generation

    def set(self, access: str, refresh: str | None = None) -> None:
        """Replace the access credential and optionally rotate the refresh one.

        An empty ``access`` removes the persisted access entry. The refresh
        entry is only removed when access is cleared as well; a refresh token
        never outlives its access token unless explicitly rotated.

        Args:
            access: New access credential, or "" to clear it.
            refresh: New refresh credential; ``None`` or "" keeps the current one
                unless access is being cleared.
        """
        was_active = self.is_active
        self._access = access or ""
        if not access:
            self._generation += 1
        if refresh:
            self._refresh = refresh
        elif not access:
            self._refresh = ""

        try:
            self._persist(access, refresh)
        except OSError as e:
            # In-memory credentials stay authoritative for this process.
            logging.error(f"💥 Credential persistence failed: {type(e).__name__}: {str(e)}")

        logging.debug(
            f"🔑 Credentials updated access={mask_token(self._access)} "
            f"refresh={mask_token(self._refresh)}"
        )
        if was_active != self.is_active:
            self._notify(self.is_active)

    def clear(self) -> None:
        self.set("", "")

    def _persist(self, access: str, refresh: str | None) -> None:
        if access:
            self._storage.set_item(ACCESS_TOKEN_KEY, access)
        else:
            self._storage.remove_item(ACCESS_TOKEN_KEY)
            self._storage.remove_item(LEGACY_ACCESS_TOKEN_KEY)
        if refresh:
            self._storage.set_item(REFRESH_TOKEN_KEY, refresh)
        elif not access:
            self._storage.remove_item(REFRESH_TOKEN_KEY)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener called with the new ``is_active`` value on change.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, active: bool) -> None:
        for listener in list(self._listeners):
            try:
                listener(active)
            except Exception as e:  # noqa: BLE001
                logging.warning(
                    f"⚠️ Session listener error type={type(e).__name__} error={str(e)}"
                )


class SessionView:
    """Read-only view of session state for route guards and UI code."""

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    @property
    def is_active(self) -> bool:
        return self._store.is_active

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        return self._store.subscribe(listener)
