"""Replayable request descriptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RequestSpec:
    """Immutable description of an outbound call, safe to replay.

    Attributes:
        method: HTTP method (e.g. 'GET', 'POST').
        path: Endpoint path relative to the API base URL, or an absolute URL.
        params: Query parameters.
        json: JSON body, sent as-is.
        headers: Extra headers; ``Authorization`` is always set by the pipeline.
        allow_refresh: Whether a 401 on this call means the access credential
            expired. Login and register answer 401 for bad passwords, so they
            turn it off.
    """

    method: str
    path: str
    params: dict[str, Any] | None = None
    json: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    allow_refresh: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())

    @property
    def label(self) -> str:
        return f"{self.method} {self.path}"

    def build_headers(self, access_token: str) -> dict[str, str]:
        """Headers for one dispatch, with the bearer credential when present."""
        headers = {k: v for k, v in self.headers.items() if k.lower() != "authorization"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers
