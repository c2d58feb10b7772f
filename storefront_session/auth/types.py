"""Shared types for the auth module."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum


class RefreshState(Enum):
    """Enumeration of refresh coordinator states.

    Attributes:
        IDLE: No renewal in flight; the next expiry starts one.
        REFRESHING: A renewal call is in flight; expiries queue behind it.
    """

    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass(eq=False)
class Waiter:
    """Single-shot completion handler for a request suspended on renewal.

    ``resolve`` and ``reject`` settle the underlying future at most once; a
    waiter whose caller was cancelled is skipped silently.
    """

    future: asyncio.Future[str]

    def resolve(self, access_token: str) -> bool:
        if self.future.done():
            return False
        self.future.set_result(access_token)
        return True

    def reject(self, error: BaseException) -> bool:
        if self.future.done():
            return False
        self.future.set_exception(error)
        return True
