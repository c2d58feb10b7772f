"""Session layer configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    STOREFRONT_API_BASE_URL,
    STOREFRONT_CREDENTIALS_FILE,
    STOREFRONT_LOGIN_ROUTE,
    STOREFRONT_REFRESH_TIMEOUT_SECONDS,
    STOREFRONT_REQUEST_TIMEOUT_SECONDS,
)


class SessionConfig(BaseModel):
    """Runtime settings for a storefront session.

    Attributes:
        base_url: Backend API root, without a trailing slash.
        request_timeout: Total timeout in seconds for ordinary requests.
        refresh_timeout: Total timeout in seconds for the renewal call.
        credentials_file: JSON file holding persisted credentials, or None
            to keep them in memory only.
        login_route: Navigation target after an unrecoverable auth failure.
    """

    base_url: str = STOREFRONT_API_BASE_URL
    request_timeout: float = Field(default=STOREFRONT_REQUEST_TIMEOUT_SECONDS, gt=0)
    refresh_timeout: float = Field(default=STOREFRONT_REFRESH_TIMEOUT_SECONDS, gt=0)
    credentials_file: str | None = STOREFRONT_CREDENTIALS_FILE or None
    login_route: str = STOREFRONT_LOGIN_ROUTE

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v

    @field_validator("credentials_file", mode="before")
    @classmethod
    def empty_file_means_memory(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_timeouts(self) -> SessionConfig:
        if self.refresh_timeout >= self.request_timeout:
            raise ValueError(
                "refresh_timeout must be shorter than request_timeout"
            )
        return self

    def url_for(self, path: str) -> str:
        """Join an endpoint path onto the base URL."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"
