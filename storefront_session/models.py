"""Wire payload models for the storefront backend."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoginPayload(BaseModel):
    """Credentials submitted to ``/login`` and ``/register``."""

    user_name: str = Field(min_length=1)
    user_password: str = Field(min_length=1)

    @field_validator("user_name")
    @classmethod
    def strip_user_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_name must not be blank")
        return stripped


class LoginResult(BaseModel):
    """Token pair issued by ``/login``.

    Attributes:
        access_token: Short-lived bearer token.
        refresh_token: Longer-lived token exchanged at ``/refresh``.
        expires_in: Access token lifetime in seconds, when reported.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str = ""
    refresh_token: str = ""
    expires_in: int | None = None


class RefreshResult(BaseModel):
    """Payload returned by ``/refresh``.

    ``refresh_token`` is only present when the backend rotates it.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str = ""
    refresh_token: str | None = None
    expires_in: int | None = None


class ProfileUpdate(BaseModel):
    """Fields accepted by ``PUT /profile``; unset fields are not sent."""

    user_name: str | None = None
    avatar: str | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class User(BaseModel):
    """Profile returned by ``GET /profile``.

    The backend serializes its ORM row directly, so the primary key arrives
    as ``ID`` and timestamps as ``CreatedAt`` / ``UpdatedAt``.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int | None = Field(default=None, alias="ID")
    username: str = ""
    balance: float = 0.0
    avatar: str = ""
    total_spent_cents: int = 0
    growth_level: int = 1
