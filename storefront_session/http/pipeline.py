"""Authenticated request pipeline.

Every outbound call goes through ``RequestPipeline.send``: the current access
credential is attached, the response envelope is unwrapped, and failures are
classified. A 401 hands control to the refresh coordinator and the request is
replayed exactly once with the renewed credential.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiohttp

from ..config import SessionConfig
from ..constants import GENERIC_FAILURE_MESSAGE
from ..credentials.store import CredentialStore
from ..errors.handling import classify_transport_failure, log_error, server_error_message
from ..errors.internal import (
    BusinessError,
    CredentialRejected,
    SessionExpired,
    TransportError,
)
from ..utils import mask_token
from .envelope import parse_body, read_body, unwrap
from .notifier import LoggingNotifier, Notifier
from .request import RequestSpec

if TYPE_CHECKING:
    from ..auth.coordinator import RefreshCoordinator
    from ..auth.lifecycle import SessionLifecycle


class RequestPipeline:
    """Wraps every outbound request of the session.

    Attributes:
        config: Session configuration (base URL, timeouts).
        store: Credential store read before each dispatch.
        coordinator: Refresh coordinator consulted on credential expiry.
        lifecycle: Logout policy invoked when a replayed request is rejected.
        notifier: Sink for transient transport error notifications.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        store: CredentialStore,
        coordinator: RefreshCoordinator,
        lifecycle: SessionLifecycle,
        config: SessionConfig | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        if session is None:
            raise TypeError("session cannot be None")
        self._session = session
        self.store = store
        self.coordinator = coordinator
        self.lifecycle = lifecycle
        self.config = config or SessionConfig()
        self.notifier: Notifier = notifier or LoggingNotifier()

    async def send(self, spec: RequestSpec) -> Any:
        """Send a request and return the unwrapped payload.

        Args:
            spec: Replayable description of the call.

        Returns:
            The envelope ``data`` for enveloped responses, the raw body otherwise.

        Raises:
            TransportError: Network failure or HTTP error other than a
                renewable 401.
            BusinessError: HTTP success with a non-success envelope code.
            SessionExpired: Credentials could not be renewed, or the replayed
                request was rejected again.
        """
        access = self.store.get().access
        try:
            return await self._dispatch(spec, access)
        except CredentialRejected:
            logging.info(
                f"🔒 Credential rejected request={spec.label} "
                f"token={mask_token(access)}; awaiting renewal"
            )

        new_access = await self.coordinator.acquire_fresh_token()
        try:
            return await self._dispatch(spec, new_access)
        except CredentialRejected as e:
            expired = SessionExpired(
                "Credential rejected after renewal", data={"request": spec.label}
            )
            log_error("Replayed request rejected", expired, level=logging.WARNING)
            self.lifecycle.on_unrecoverable_auth_failure()
            raise expired from e

    async def get(self, path: str, *, params: dict[str, Any] | None = None, **kwargs: Any) -> Any:
        return await self.send(RequestSpec("GET", path, params=params, **kwargs))

    async def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.send(RequestSpec("POST", path, json=json, **kwargs))

    async def put(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.send(RequestSpec("PUT", path, json=json, **kwargs))

    async def delete(self, path: str, *, params: dict[str, Any] | None = None, **kwargs: Any) -> Any:
        return await self.send(RequestSpec("DELETE", path, params=params, **kwargs))

    async def _dispatch(self, spec: RequestSpec, access_token: str) -> Any:
        """Perform one HTTP exchange without any renewal handling.

        Raises:
            CredentialRejected: On HTTP 401 when the request allows renewal.
            TransportError: On network failure or any other HTTP error.
            BusinessError: On a non-success envelope code.
        """
        try:
            return await self._exchange(spec, access_token)
        except TransportError as e:
            log_error(
                f"Request failed {spec.label}",
                e,
                context={"status": e.status},
                level=logging.WARNING,
            )
            self._notify_error(e.message)
            raise
        except BusinessError as e:
            log_error(f"Request refused {spec.label}", e, level=logging.INFO)
            raise

    async def _exchange(self, spec: RequestSpec, access_token: str) -> Any:
        url = self.config.url_for(spec.path)
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        try:
            async with self._session.request(
                spec.method,
                url,
                headers=spec.build_headers(access_token),
                params=spec.params,
                json=spec.json,
                timeout=timeout,
            ) as resp:
                status = resp.status
                reason = getattr(resp, "reason", None)
                body = await read_body(resp)
        except (aiohttp.ClientError, TimeoutError, OSError) as e:
            raise classify_transport_failure(e, spec.label) from e

        logging.debug(f"🌐 Response status={status} request={spec.label}")

        if status == 401 and spec.allow_refresh:
            raise CredentialRejected(
                server_error_message(body) or "Unauthorized",
                data={"request": spec.label},
            )
        if status >= 400:
            raise TransportError(
                server_error_message(body) or reason or GENERIC_FAILURE_MESSAGE,
                status=status,
                data={"request": spec.label},
            )
        return unwrap(parse_body(body))

    def _notify_error(self, message: str) -> None:
        try:
            self.notifier.error(message)
        except Exception as e:  # noqa: BLE001
            logging.debug(f"⚠️ Notifier error type={type(e).__name__} error={str(e)}")
