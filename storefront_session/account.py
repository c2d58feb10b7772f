"""Account operations built on the request pipeline."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .auth.coordinator import RefreshCoordinator
from .auth.lifecycle import SessionLifecycle
from .constants import LOGIN_PATH, PROFILE_PATH, REGISTER_PATH
from .errors.handling import log_error
from .errors.internal import SessionLayerError, TransportError
from .http.notifier import LoggingNotifier, Notifier
from .http.pipeline import RequestPipeline
from .http.request import RequestSpec
from .models import LoginPayload, LoginResult, ProfileUpdate, User

ModelT = TypeVar("ModelT", bound=BaseModel)


class AccountService:
    """Login, registration and profile management for the current user.

    Attributes:
        pipeline: Request pipeline used for every call.
        coordinator: Refresh coordinator, shared with the pipeline.
        lifecycle: Logout policy; also owns the profile cache.
        notifier: Sink for success notifications.
    """

    def __init__(
        self,
        pipeline: RequestPipeline,
        coordinator: RefreshCoordinator,
        lifecycle: SessionLifecycle,
        notifier: Notifier | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.coordinator = coordinator
        self.lifecycle = lifecycle
        self.notifier: Notifier = notifier or LoggingNotifier()

    @property
    def profile(self) -> User | None:
        return self.lifecycle.profile_cache.profile

    async def login(self, user_name: str, user_password: str) -> LoginResult:
        """Exchange a username/password for a credential pair.

        On success the pair is stored and the profile fetched.

        Raises:
            TransportError: Wrong credentials (the backend answers 401) or
                network failure.
            BusinessError: The backend refused the login.
        """
        payload = LoginPayload(user_name=user_name, user_password=user_password)
        data = await self.pipeline.send(
            RequestSpec("POST", LOGIN_PATH, json=payload.model_dump(), allow_refresh=False)
        )
        result = self._parse(LoginResult, data, "login")
        if result.access_token:
            self.pipeline.store.set(result.access_token, result.refresh_token)
            await self.fetch_profile()
            self.notifier.success("Logged in")
            logging.info(f"🔓 Logged in user={payload.user_name}")
        return result

    async def register(self, user_name: str, user_password: str) -> Any:
        payload = LoginPayload(user_name=user_name, user_password=user_password)
        ack = await self.pipeline.send(
            RequestSpec("POST", REGISTER_PATH, json=payload.model_dump(), allow_refresh=False)
        )
        self.notifier.success("Registered")
        logging.info(f"🆕 Registered user={payload.user_name}")
        return ack

    async def fetch_profile(self) -> User | None:
        """Load the profile of the signed-in user.

        Returns None without a request when no session is active. Any failure
        drops the access credential and the cached profile.
        """
        if not self.pipeline.store.is_active:
            return None
        try:
            data = await self.pipeline.get(PROFILE_PATH)
            profile = self._parse(User, data, "profile")
        except SessionLayerError as e:
            log_error("Profile fetch failed", e, level=logging.WARNING)
            self.pipeline.store.set("")
            self.lifecycle.profile_cache.clear()
            return None
        self.lifecycle.profile_cache.set(profile)
        return profile

    async def update_profile(
        self, *, user_name: str | None = None, avatar: str | None = None
    ) -> User:
        body = ProfileUpdate(user_name=user_name, avatar=avatar).to_body()
        data = await self.pipeline.put(PROFILE_PATH, json=body)
        profile = self._parse(User, data, "profile update")
        self.lifecycle.profile_cache.set(profile)
        self.notifier.success("Profile updated")
        return profile

    async def refresh_token_if_needed(self) -> str | None:
        """Renew the access credential proactively.

        Shares the coordinator with the pipeline, so it joins an in-flight
        renewal instead of starting a second one.

        Returns:
            The new access credential, or None when no refresh credential is stored.
        """
        if not self.pipeline.store.get().refresh:
            return None
        return await self.coordinator.acquire_fresh_token()

    def logout(self) -> None:
        self.lifecycle.logout()

    @staticmethod
    def _parse(model: type[ModelT], data: Any, what: str) -> ModelT:
        try:
            return model.model_validate(data if data is not None else {})
        except ValidationError as e:
            raise TransportError(f"Malformed {what} response") from e
