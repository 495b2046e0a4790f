import httpx
import pytest
import structlog

from fieldgate.core.config.settings import Settings
from fieldgate.infrastructure import dependency_injection
from fieldgate.infrastructure.dependency_injection import (
    close_default_client,
    create_gateway_client,
    get_default_client,
)
from fieldgate.infrastructure.notifications import LoggingNotifier
from fieldgate.infrastructure.storage import (
    FileCredentialStore,
    InMemoryCredentialStore,
    RedisCredentialStore,
    create_credential_store,
)
from tests.conftest import API_URL


def test_memory_backend_is_default():
    assert isinstance(create_credential_store(Settings()), InMemoryCredentialStore)


def test_expiry_buffer_comes_from_settings(tmp_path):
    assert create_credential_store(Settings()).expiry_buffer_seconds == 300
    store = create_credential_store(
        Settings(
            CREDENTIAL_STORE_BACKEND="file",
            CREDENTIAL_FILE_PATH=str(tmp_path / "creds.json"),
            TOKEN_EXPIRY_BUFFER_SECONDS=30,
        )
    )

    assert store.expiry_buffer_seconds == 30


def test_file_backend_uses_configured_path(tmp_path):
    path = tmp_path / "creds.json"
    store = create_credential_store(
        Settings(CREDENTIAL_STORE_BACKEND="file", CREDENTIAL_FILE_PATH=str(path))
    )

    assert isinstance(store, FileCredentialStore)
    assert store.path == path


def test_redis_backend_uses_prefix():
    store = create_credential_store(
        Settings(CREDENTIAL_STORE_BACKEND="redis", REDIS_KEY_PREFIX="farm:tokens")
    )

    assert isinstance(store, RedisCredentialStore)
    assert store._key("accessToken") == "farm:tokens:accessToken"


@pytest.mark.asyncio
async def test_create_gateway_client_wires_settings(notifier):
    config = Settings(API_URL=API_URL + "/", REFRESH_TIMEOUT_SECONDS=3)
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"succeeded": True, "data": 1}))

    async with create_gateway_client(config, notifier=notifier, transport=transport) as client:
        assert client.base_url == API_URL
        assert client.notifier is notifier
        assert isinstance(client.credential_store, InMemoryCredentialStore)
        assert client.coordinator.timeout == 3
        assert await client.get("/Plots") == 1


@pytest.mark.asyncio
async def test_create_gateway_client_defaults_to_logging_notifier():
    store = InMemoryCredentialStore()

    async with create_gateway_client(Settings(API_URL=API_URL), credential_store=store) as client:
        assert client.credential_store is store
        assert isinstance(client.notifier, LoggingNotifier)


@pytest.mark.asyncio
async def test_default_client_is_shared_until_closed(monkeypatch):
    monkeypatch.setattr(dependency_injection, "_default_client", None)
    try:
        first = get_default_client()
        assert get_default_client() is first

        await close_default_client()
        assert dependency_injection._default_client is None

        second = get_default_client()
        assert second is not first
        await close_default_client()
    finally:
        structlog.reset_defaults()
