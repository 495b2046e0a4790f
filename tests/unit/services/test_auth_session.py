import json

import httpx
import pytest
import pytest_asyncio

from fieldgate.core.exceptions import AuthEndpointError, EnvelopeFailureError, TransportError
from fieldgate.infrastructure.http.gateway_client import GatewayClient
from fieldgate.infrastructure.storage.memory import InMemoryCredentialStore
from fieldgate.services.auth_session import AuthSession
from tests.conftest import FRESH_TOKEN, FUTURE_EXPIRY, REFRESH_TOKEN
from tests.factories.token import create_fake_token, create_fake_user


@pytest.fixture
def empty_store():
    return InMemoryCredentialStore()


@pytest_asyncio.fixture
async def session(backend, empty_store, notifier, gateway_settings):
    client = GatewayClient(
        empty_store,
        notifier=notifier,
        config=gateway_settings,
        transport=httpx.MockTransport(backend),
    )
    yield AuthSession(client)
    await client.aclose()


def _login_ok(tokens, user):
    return lambda request: httpx.Response(
        200, json={"succeeded": True, "data": {**tokens, "user": user}}
    )


@pytest.mark.asyncio
async def test_login_stores_tokens_and_sends_remember_me(session, backend, empty_store):
    # Arrange
    tokens = create_fake_token()
    user = create_fake_user()
    backend.route("POST", "/Auth/login", _login_ok(tokens, user))

    # Act
    response = await session.login("grower@example.com", "s3cret")

    # Assert
    assert response.user == user
    assert await empty_store.get_access_token() == tokens["accessToken"]
    assert await empty_store.get_refresh_token() == tokens["refreshToken"]
    assert await empty_store.get_expires_at() == tokens["expiresAt"]
    sent = json.loads(backend.requests_to("/Auth/login")[0].content)
    assert sent == {"email": "grower@example.com", "password": "s3cret", "rememberMe": True}
    assert await session.is_authenticated()


@pytest.mark.asyncio
async def test_rejected_login_raises_and_stores_nothing(session, backend, empty_store, notifier):
    backend.route(
        "POST",
        "/Auth/login",
        lambda request: httpx.Response(401, json={"succeeded": False, "message": "Invalid credentials"}),
    )

    with pytest.raises(AuthEndpointError) as exc_info:
        await session.login("grower@example.com", "wrong")

    assert str(exc_info.value) == "Invalid credentials"
    assert backend.refresh_calls == 0
    assert not await session.is_authenticated()
    assert empty_store.snapshot() == {}
    assert notifier.messages == [("Authentication Error", "Invalid credentials")]


@pytest.mark.asyncio
async def test_login_envelope_failure_is_raised(session, backend):
    backend.route(
        "POST",
        "/Auth/login",
        lambda request: httpx.Response(200, json={"succeeded": False, "errors": ["Email not confirmed"]}),
    )

    with pytest.raises(EnvelopeFailureError) as exc_info:
        await session.login("grower@example.com", "s3cret", remember_me=False)

    assert str(exc_info.value) == "Email not confirmed"
    assert json.loads(backend.requests_to("/Auth/login")[0].content)["rememberMe"] is False


@pytest.mark.asyncio
async def test_login_with_incomplete_tokens_is_rejected(session, backend, empty_store):
    backend.route(
        "POST",
        "/Auth/login",
        lambda request: httpx.Response(200, json={"succeeded": True, "data": {"accessToken": "only"}}),
    )

    with pytest.raises(TransportError, match="Unexpected login response"):
        await session.login("grower@example.com", "s3cret")

    assert empty_store.snapshot() == {}


@pytest.mark.asyncio
async def test_register_stores_tokens(session, backend, empty_store):
    tokens = create_fake_token()
    backend.route("POST", "/Auth/register", _login_ok(tokens, create_fake_user()))

    await session.register({"email": "new@example.com", "password": "s3cret", "firstName": "Ada"})

    assert await empty_store.get_access_token() == tokens["accessToken"]
    assert json.loads(backend.requests_to("/Auth/register")[0].content)["firstName"] == "Ada"


@pytest.mark.asyncio
async def test_current_user_without_token_makes_no_request(session, backend):
    assert await session.get_current_user() is None
    assert backend.requests == []


@pytest.mark.asyncio
async def test_current_user_is_returned(session, backend, empty_store):
    user = create_fake_user()
    await empty_store.set_tokens(FRESH_TOKEN, REFRESH_TOKEN, FUTURE_EXPIRY)
    backend.route("GET", "/Auth/me", lambda request: httpx.Response(200, json={"succeeded": True, "data": user}))

    assert await session.get_current_user() == user
    assert await session.is_authenticated()


@pytest.mark.asyncio
async def test_current_user_not_found_clears_tokens(session, backend, empty_store):
    await empty_store.set_tokens(FRESH_TOKEN, REFRESH_TOKEN, FUTURE_EXPIRY)
    backend.route("GET", "/Auth/me", lambda request: httpx.Response(404, json={"message": "User not found"}))

    assert await session.get_current_user() is None
    assert not await session.is_authenticated()


@pytest.mark.asyncio
async def test_logout_clears_tokens(session, backend, empty_store):
    await empty_store.set_tokens(FRESH_TOKEN, REFRESH_TOKEN, FUTURE_EXPIRY)

    await session.logout()

    assert len(backend.requests_to("/Auth/logout")) == 1
    assert empty_store.snapshot() == {}


@pytest.mark.asyncio
async def test_logout_clears_tokens_even_when_backend_fails(session, backend, empty_store):
    await empty_store.set_tokens(FRESH_TOKEN, REFRESH_TOKEN, FUTURE_EXPIRY)
    backend.route("POST", "/Auth/logout", lambda request: httpx.Response(500, json={"message": "Boom"}))

    await session.logout()

    assert empty_store.snapshot() == {}
