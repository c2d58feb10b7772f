"""
Tests for AccountService login, registration and profile flows.
"""

import asyncio

import pytest
from pydantic import ValidationError

from storefront_session.account import AccountService
from storefront_session.credentials.store import CredentialPair
from storefront_session.errors.internal import BusinessError, TransportError
from storefront_session.models import LoginResult, User
from tests.fakes import PROFILE, bearer_gate, build_stack, wait_until

LOGIN_OK = (200, {"code": 200, "msg": "ok", "data": {"access_token": "a1", "refresh_token": "r1", "expires_in": 900}})


def _account(session, **kwargs):
    stack = build_stack(session, **kwargs)
    account = AccountService(stack.pipeline, stack.coordinator, stack.lifecycle, notifier=stack.notifier)
    return stack, account


@pytest.mark.asyncio
async def test_login_stores_pair_and_fetches_profile(session):
    stack, account = _account(session)
    session.on("POST", "/login", LOGIN_OK)
    session.on("GET", "/profile", bearer_gate("a1"))

    result = await account.login("  alice ", "secret")

    assert result.access_token == "a1"
    assert stack.store.get() == CredentialPair("a1", "r1")
    assert stack.storage.snapshot() == {"access_token": "a1", "refresh_token": "r1"}
    assert session.calls_to("POST", "/login")[0].json == {"user_name": "alice", "user_password": "secret"}
    assert session.calls_to("POST", "/login")[0].bearer is None
    assert account.profile.id == 7
    assert account.profile.username == "alice"
    assert stack.notifier.successes == ["Logged in"]


@pytest.mark.asyncio
async def test_login_wrong_password_does_not_trigger_renewal(session):
    stack, account = _account(session, access="old", refresh="r0")
    session.on("POST", "/login", (401, {"code": 10003, "msg": "wrong username or password"}))

    with pytest.raises(TransportError, match="wrong username or password"):
        await account.login("alice", "bad")

    assert session.calls_to("POST", "/refresh") == []
    assert stack.navigations == []
    assert stack.notifier.errors == ["wrong username or password"]


@pytest.mark.asyncio
async def test_login_without_token_leaves_store_untouched(session):
    stack, account = _account(session)
    session.on("POST", "/login", (200, {"code": 200, "msg": "ok", "data": {}}))

    result = await account.login("alice", "secret")

    assert result.access_token == ""
    assert not stack.store.is_active
    assert session.calls_to("GET", "/profile") == []
    assert stack.notifier.successes == []


@pytest.mark.asyncio
async def test_login_rejects_blank_user_name_before_request(session):
    _stack, account = _account(session)

    with pytest.raises(ValidationError):
        await account.login("   ", "secret")

    assert session.calls == []


@pytest.mark.asyncio
async def test_register_returns_acknowledgement(session):
    stack, account = _account(session)
    session.on("POST", "/register", (200, {"code": 200, "msg": "ok", "data": {"id": 9}}))

    assert await account.register("bob", "pw") == {"id": 9}
    assert not stack.store.is_active
    assert stack.notifier.successes == ["Registered"]


@pytest.mark.asyncio
async def test_register_business_error_propagates(session):
    _stack, account = _account(session)
    session.on("POST", "/register", (200, {"code": 10001, "msg": "user exists"}))

    with pytest.raises(BusinessError, match="user exists"):
        await account.register("bob", "pw")


@pytest.mark.asyncio
async def test_fetch_profile_without_session_sends_nothing(session):
    _stack, account = _account(session)

    assert await account.fetch_profile() is None
    assert session.calls == []


@pytest.mark.asyncio
async def test_fetch_profile_failure_drops_session(session):
    stack, account = _account(session, access="a1", refresh="r1")
    session.on("GET", "/profile", (500, {"error": "db down"}))

    assert await account.fetch_profile() is None

    assert not stack.store.is_active
    assert account.profile is None


@pytest.mark.asyncio
async def test_fetch_profile_renews_transparently(session):
    stack, account = _account(session, access="a1", refresh="r1")
    session.on("GET", "/profile", bearer_gate("a2"))
    session.on("POST", "/refresh", (200, {"code": 200, "data": {"access_token": "a2"}}))

    profile = await account.fetch_profile()

    assert profile.username == PROFILE["username"]
    assert stack.store.get() == CredentialPair("a2", "r1")


@pytest.mark.asyncio
async def test_update_profile_sends_only_given_fields(session):
    stack, account = _account(session, access="a1", refresh="r1")
    updated = dict(PROFILE, avatar="https://cdn/x.png")
    session.on("PUT", "/profile", bearer_gate("a1", updated))

    profile = await account.update_profile(avatar="https://cdn/x.png")

    assert session.calls_to("PUT", "/profile")[0].json == {"avatar": "https://cdn/x.png"}
    assert profile.avatar == "https://cdn/x.png"
    assert account.profile is profile
    assert stack.notifier.successes == ["Profile updated"]


@pytest.mark.asyncio
async def test_malformed_profile_payload_is_transport_error(session):
    _stack, account = _account(session, access="a1")
    session.on("PUT", "/profile", (200, {"code": 200, "data": {"ID": "not-a-number"}}))

    with pytest.raises(TransportError, match="Malformed profile update response"):
        await account.update_profile(user_name="x")


@pytest.mark.asyncio
async def test_refresh_token_if_needed_without_refresh_is_noop(session):
    _stack, account = _account(session, access="a1")

    assert await account.refresh_token_if_needed() is None
    assert session.calls == []


@pytest.mark.asyncio
async def test_proactive_refresh_joins_in_flight_renewal(session):
    stack, account = _account(session, access="a1", refresh="r1")
    session.on("GET", "/profile", bearer_gate("a2"))
    session.on("POST", "/refresh", (200, {"code": 200, "data": {"access_token": "a2"}}))
    release = session.gate("/refresh")

    request = asyncio.create_task(stack.pipeline.get("/profile"))
    await wait_until(lambda: stack.coordinator.renewal_count == 1)
    proactive = asyncio.create_task(account.refresh_token_if_needed())
    await wait_until(lambda: stack.coordinator.pending == 1)
    release.set()

    assert await proactive == "a2"
    assert await request == PROFILE
    assert len(session.calls_to("POST", "/refresh")) == 1


@pytest.mark.asyncio
async def test_logout_delegates_to_lifecycle(session):
    stack, account = _account(session, access="a1", refresh="r1")

    account.logout()

    assert stack.store.get() == CredentialPair()
    assert stack.navigations == []


def test_parse_returns_instance_of_requested_model():
    user = AccountService._parse(User, {"ID": 3, "username": "carol"}, "profile")
    empty = AccountService._parse(LoginResult, None, "login")

    assert isinstance(user, User)
    assert user.id == 3
    assert isinstance(empty, LoginResult)
    assert empty.access_token == ""
