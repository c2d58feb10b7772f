"""Response envelope parsing.

Business endpoints answer ``{"code": int, "msg": str, "data": ...}``; legacy
endpoints return a bare body. Each response is resolved exactly once into
either ``Enveloped`` or ``Raw`` so call sites never sniff fields themselves.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import aiohttp

from ..constants import ENVELOPE_SUCCESS_CODES
from ..errors.internal import BusinessError


@dataclass(frozen=True)
class Enveloped:
    code: int
    msg: str
    data: Any

    @property
    def ok(self) -> bool:
        return self.code in ENVELOPE_SUCCESS_CODES


@dataclass(frozen=True)
class Raw:
    data: Any


ResponseBody = Enveloped | Raw


def parse_body(body: Any) -> ResponseBody:
    """Classify a decoded body as an envelope or a raw payload.

    A mapping with an integer-like ``code`` is an envelope; anything else,
    including ``None`` and plain text, is raw.
    """
    if isinstance(body, Mapping) and "code" in body:
        code = body.get("code")
        if isinstance(code, bool):
            return Raw(body)
        try:
            code_int = int(code)
        except (TypeError, ValueError):
            return Raw(body)
        msg = body.get("msg")
        return Enveloped(code_int, msg if isinstance(msg, str) else "", body.get("data"))
    return Raw(body)


def unwrap(parsed: ResponseBody) -> Any:
    """Return the payload callers see, or raise ``BusinessError``.

    Raises:
        BusinessError: If the envelope code is not a success code.
    """
    if isinstance(parsed, Raw):
        return parsed.data
    if isinstance(parsed, Enveloped):
        if parsed.ok:
            return parsed.data
        raise BusinessError(
            parsed.msg or f"Request failed (code {parsed.code})",
            code=parsed.code,
            data={"code": parsed.code},
        )
    raise TypeError(f"Unexpected response body type: {type(parsed).__name__}")


async def read_body(resp: aiohttp.ClientResponse) -> Any:
    """Read and decode a response body.

    Returns the decoded JSON when it parses, the text otherwise, and ``None``
    for an empty body.
    """
    text = await resp.text()
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text
