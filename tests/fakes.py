"""Fake aiohttp session and wiring helpers shared by the tests."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any
from urllib.parse import urlsplit

from storefront_session.auth.coordinator import create_refresh_coordinator
from storefront_session.auth.lifecycle import SessionLifecycle
from storefront_session.auth.renewal import RenewalClient
from storefront_session.config import SessionConfig
from storefront_session.credentials.storage import MemoryStorage
from storefront_session.credentials.store import CredentialStore
from storefront_session.http.notifier import RecordingNotifier
from storefront_session.http.pipeline import RequestPipeline

BASE_URL = "http://api.test/api/v1"
PROFILE = {"ID": 7, "username": "alice", "balance": 12.5, "avatar": "", "total_spent_cents": 0, "growth_level": 2}


@dataclass
class Call:
    method: str
    path: str
    headers: dict[str, str]
    json: Any = None
    params: Any = None

    @property
    def bearer(self) -> str | None:
        auth = self.headers.get("Authorization")
        if auth and auth.startswith("Bearer "):
            return auth[len("Bearer "):]
        return None


class FakeResp:
    def __init__(self, status: int, payload: Any = None, reason: str | None = None):
        self.status = status
        self._payload = payload
        self.reason = reason

    async def text(self) -> str:
        await asyncio.sleep(0)
        if self._payload is None:
            return ""
        if isinstance(self._payload, str):
            return self._payload
        return json.dumps(self._payload)


Handler = Callable[[Call], Awaitable[Any] | Any]


class _RespContext:
    def __init__(self, session: FakeSession, call: Call):
        self._session = session
        self._call = call

    async def __aenter__(self) -> FakeResp:
        return await self._session._dispatch(self._call)

    async def __aexit__(self, _exc_type, _exc, _tb) -> bool:
        return False


@dataclass
class FakeSession:
    """Scripted stand-in for aiohttp.ClientSession.

    Handlers are keyed by (METHOD, path relative to the API root) and return
    a FakeResp, a ``(status, body)`` tuple, or raise to simulate transport
    errors. A path can be gated so its handler waits until released.
    """

    handlers: dict[tuple[str, str], Handler] = field(default_factory=dict)
    calls: list[Call] = field(default_factory=list)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    closed: bool = False

    def on(self, method: str, path: str, handler: Handler | tuple[int, Any]) -> None:
        if isinstance(handler, tuple):
            status, body = handler

            def handler(_call: Call, _s=status, _b=body) -> tuple[int, Any]:
                return _s, _b

        self.handlers[(method.upper(), path)] = handler

    def gate(self, path: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[path] = event
        return event

    def calls_to(self, method: str, path: str) -> list[Call]:
        return [c for c in self.calls if c.method == method.upper() and c.path == path]

    def request(self, method, url, headers=None, params=None, json=None, timeout=None):
        return _RespContext(self, self._record(method, url, headers, json, params))

    def post(self, url, json=None, timeout=None, headers=None):
        return _RespContext(self, self._record("POST", url, headers, json, None))

    async def close(self) -> None:
        self.closed = True

    def _record(self, method, url, headers, body, params) -> Call:
        path = urlsplit(url).path
        if path.startswith("/api/v1"):
            path = path[len("/api/v1"):]
        call = Call(method.upper(), path, dict(headers or {}), body, params)
        self.calls.append(call)
        return call

    async def _dispatch(self, call: Call) -> FakeResp:
        await asyncio.sleep(0)
        gate = self.gates.get(call.path)
        if gate is not None:
            await gate.wait()
        handler = self.handlers.get((call.method, call.path))
        if handler is None:
            return FakeResp(404, {"error": "not found"}, "Not Found")
        result = handler(call)
        if asyncio.iscoroutine(result):
            result = await result
        if isinstance(result, FakeResp):
            return result
        status, body = result
        return FakeResp(status, body)


def bearer_gate(token: str, body: Any = None) -> Handler:
    """Handler answering 200 for ``Bearer <token>`` and 401 otherwise."""

    def handler(call: Call) -> tuple[int, Any]:
        if call.bearer == token:
            return 200, {"code": 200, "msg": "ok", "data": body if body is not None else PROFILE}
        return 401, {"code": 401, "msg": "token expired"}

    return handler


async def wait_until(predicate: Callable[[], bool], turns: int = 200) -> None:
    for _ in range(turns):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def build_stack(
    session: FakeSession,
    *,
    access: str = "",
    refresh: str = "",
    navigator=None,
) -> SimpleNamespace:
    """Wire the session-layer components around a fake HTTP session."""
    initial: dict[str, str] = {}
    if access:
        initial["access_token"] = access
    if refresh:
        initial["refresh_token"] = refresh
    storage = MemoryStorage(initial)
    config = SessionConfig(base_url=BASE_URL, request_timeout=10, refresh_timeout=5)
    store = CredentialStore(storage)
    navigations: list[str] = []
    lifecycle = SessionLifecycle(store, navigator=navigator or navigations.append)
    coordinator = create_refresh_coordinator(store, RenewalClient(session, config), lifecycle)
    notifier = RecordingNotifier()
    pipeline = RequestPipeline(session, store, coordinator, lifecycle, config=config, notifier=notifier)
    return SimpleNamespace(
        session=session,
        storage=storage,
        config=config,
        store=store,
        lifecycle=lifecycle,
        coordinator=coordinator,
        notifier=notifier,
        pipeline=pipeline,
        navigations=navigations,
    )


