import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from fieldgate.core.config.settings import Settings
from fieldgate.domain.interfaces.notifier import IUserNotifier
from fieldgate.infrastructure.http.gateway_client import GatewayClient
from fieldgate.infrastructure.storage.memory import InMemoryCredentialStore
from tests.factories.token import create_fake_token

API_URL = "http://backend.test/api"
EXPIRED_TOKEN = "access-expired"
FRESH_TOKEN = "access-fresh"
REFRESH_TOKEN = "refresh-1"
FUTURE_EXPIRY = "2099-01-01T00:00:00Z"


class RecordingNotifier(IUserNotifier):
    """Collects notifications instead of showing them."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    async def notify(self, title: str, message: str) -> None:
        self.messages.append((title, message))


class FakeBackend:
    """Callable for `httpx.MockTransport` imitating the field-operations backend.

    Protected endpoints answer 401 unless the bearer token is in
    ``valid_tokens``. The refresh endpoint can be held open with
    ``hold_refresh()`` so tests control when the refresh settles.
    """

    def __init__(self, valid_tokens=(FRESH_TOKEN,)):
        self.valid_tokens = set(valid_tokens)
        self.requests: List[httpx.Request] = []
        self.refresh_calls = 0
        self.refresh_bodies: List[Any] = []
        self.refresh_response: Callable[[], httpx.Response] = self._refresh_success
        self.refreshed_tokens = create_fake_token(access_token=FRESH_TOKEN, refresh_token="refresh-2")
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.always_unauthorized: set = set()
        self._refresh_gate: Optional[asyncio.Event] = None

    def hold_refresh(self) -> asyncio.Event:
        self._refresh_gate = asyncio.Event()
        return self._refresh_gate

    def route(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[(method.upper(), path)] = handler

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/Auth/refresh"):
            self.refresh_calls += 1
            self.refresh_bodies.append(json.loads(request.content))
            if self._refresh_gate is not None:
                await self._refresh_gate.wait()
            return self.refresh_response()

        relative = path[len("/api"):] if path.startswith("/api") else path
        handler = self.routes.get((request.method, relative))
        if relative.startswith("/Auth/login") or relative.startswith("/Auth/register"):
            return handler(request) if handler else httpx.Response(404)

        authorization = request.headers.get("Authorization", "")
        token = authorization[len("Bearer "):] if authorization.startswith("Bearer ") else None
        if relative in self.always_unauthorized or token not in self.valid_tokens:
            return httpx.Response(401, json={"succeeded": False, "message": "Unauthorized"})
        if handler is not None:
            return handler(request)
        return httpx.Response(200, json={"succeeded": True, "data": {"path": relative}})

    def _refresh_success(self) -> httpx.Response:
        return httpx.Response(200, json={"succeeded": True, "data": self.refreshed_tokens})


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until ``predicate()`` holds."""
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout)


@pytest.fixture
def gateway_settings() -> Settings:
    return Settings(API_URL=API_URL, REFRESH_TIMEOUT_SECONDS=2.0, CREDENTIAL_STORE_BACKEND="memory")


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    """Store holding an expired access token and a usable refresh token."""
    return InMemoryCredentialStore(
        {"accessToken": EXPIRED_TOKEN, "refreshToken": REFRESH_TOKEN, "expiresAt": FUTURE_EXPIRY}
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def gateway_client(backend, credential_store, notifier, gateway_settings):
    client = GatewayClient(
        credential_store,
        notifier=notifier,
        config=gateway_settings,
        transport=httpx.MockTransport(backend),
    )
    yield client
    await client.aclose()
