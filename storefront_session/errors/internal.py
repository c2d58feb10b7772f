"""Centralized session-layer error hierarchy.

These exceptions give callers semantic categories instead of raw aiohttp /
JSON errors. Wrap transport level failures at the network boundary; never let
``aiohttp.ClientError`` escape the request pipeline.

Classes:
  SessionLayerError    – Base for all errors raised by this package.
  TransportError       – Network failure or non-401 HTTP error.
  BusinessError        – HTTP success with a non-success envelope code.
  SessionExpired       – Credentials could not be renewed; user is logged out.
  RenewalFailure       – The renewal call itself failed (internal).
  CredentialRejected   – A 401 was received (internal expiry signal).
"""

from __future__ import annotations

from collections.abc import Mapping


class SessionLayerError(Exception):
    """Base class for all session layer errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}

    @property
    def message(self) -> str:
        return str(self)


class TransportError(SessionLayerError):
    """Network failure or an HTTP error status other than 401.

    Only recovered by notifying the user; never retried automatically.

    Attributes:
        status: HTTP status when the server answered, ``None`` for network errors.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, data=data)
        self.status = status


class BusinessError(SessionLayerError):
    """HTTP success whose envelope carries a non-success ``code``.

    Surfaced to the immediate caller only; never triggers refresh or logout.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, data=data)
        self.code = code


class SessionExpired(SessionLayerError):
    """Terminal outcome of a failed or impossible credential renewal.

    Always accompanied by cleared credentials and a redirect to the login
    entry point. Callers must treat it as "not logged in", not as retryable.
    """

    def __init__(
        self,
        message: str = "Session expired, please log in again",
        *,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, data=data)


class RenewalFailure(SessionLayerError):
    """The renewal call failed or returned an incomplete payload.

    Internal: always escalated to ``SessionExpired`` for every waiting caller.
    """


class CredentialRejected(SessionLayerError):
    """HTTP 401 received for a request (credential expiry signal).

    Internal: the pipeline converts it into a renewal attempt or into
    ``SessionExpired`` and never lets it reach callers.
    """


__all__ = [
    "SessionLayerError",
    "TransportError",
    "BusinessError",
    "SessionExpired",
    "RenewalFailure",
    "CredentialRejected",
]
