"""Credential renewal HTTP client."""

from __future__ import annotations

import logging

import aiohttp
from pydantic import ValidationError

from ..config import SessionConfig
from ..constants import REFRESH_PATH
from ..errors.handling import server_error_message
from ..errors.internal import BusinessError, RenewalFailure
from ..http.envelope import parse_body, read_body, unwrap
from ..models import RefreshResult
from ..utils import format_duration


class RenewalClient:
    """Exchanges a refresh credential for a new access credential.

    The call bypasses the request pipeline: it is never itself subject to
    renewal, and it uses its own, shorter timeout because every queued
    request waits on it.
    """

    def __init__(
        self, http_session: aiohttp.ClientSession, config: SessionConfig | None = None
    ):
        self.session = http_session
        self.config = config or SessionConfig()

    async def renew(self, refresh_token: str) -> RefreshResult:
        """Call ``POST /refresh`` and return the renewed credentials.

        Args:
            refresh_token: The refresh credential to exchange.

        Returns:
            RefreshResult with a non-empty ``access_token``.

        Raises:
            RenewalFailure: On network error, timeout, HTTP error status,
                non-success envelope, or a payload without ``access_token``.
        """
        url = self.config.url_for(REFRESH_PATH)
        timeout = aiohttp.ClientTimeout(total=self.config.refresh_timeout)
        try:
            async with self.session.post(
                url, json={"refresh_token": refresh_token}, timeout=timeout
            ) as resp:
                status = resp.status
                body = await read_body(resp)
        except TimeoutError as e:
            raise RenewalFailure("Token renewal timeout") from e
        except (aiohttp.ClientError, OSError) as e:
            raise RenewalFailure(f"Network error during token renewal: {e}") from e

        if status >= 400:
            raise RenewalFailure(
                f"HTTP {status} during token renewal: "
                f"{server_error_message(body) or 'no detail'}",
                data={"status": status},
            )
        try:
            payload = unwrap(parse_body(body))
        except BusinessError as e:
            raise RenewalFailure(f"Renewal refused: {e}", data={"code": e.code}) from e
        if not isinstance(payload, dict):
            raise RenewalFailure("Unexpected renewal payload")
        try:
            result = RefreshResult.model_validate(payload)
        except ValidationError as e:
            raise RenewalFailure("Malformed renewal payload") from e
        if not result.access_token:
            raise RenewalFailure("Missing access_token in renewal response")

        logging.info(
            f"🔄 Token renewed (lifetime {format_duration(result.expires_in)}) "
            f"rotated_refresh={bool(result.refresh_token)}"
        )
        return result
