"""Factories wiring settings, credential store, notifier and gateway client together.

`get_default_client()` returns the process-wide client, so every caller shares
one refresh coordinator and therefore one in-flight token refresh.
"""

from typing import Any, Optional

from structlog import get_logger

from fieldgate.core.config.settings import Settings, settings
from fieldgate.core.logging import configure_logging
from fieldgate.domain.interfaces.credential_store import ICredentialStore
from fieldgate.domain.interfaces.notifier import IUserNotifier
from fieldgate.infrastructure.http.gateway_client import GatewayClient
from fieldgate.infrastructure.notifications import LoggingNotifier
from fieldgate.infrastructure.storage import create_credential_store

logger = get_logger(__name__)

_default_client: Optional[GatewayClient] = None


def create_gateway_client(
    config: Optional[Settings] = None,
    *,
    credential_store: Optional[ICredentialStore] = None,
    notifier: Optional[IUserNotifier] = None,
    **client_kwargs: Any,
) -> GatewayClient:
    """Build a gateway client from settings.

    Args:
        config: Settings to use, defaults to the module singleton.
        credential_store: Overrides the backend selected by settings.
        notifier: Overrides the default `LoggingNotifier`.
        **client_kwargs: Passed through to `GatewayClient` (e.g. ``transport``).
    """
    config = config or settings
    store = credential_store or create_credential_store(config)
    client = GatewayClient(
        store,
        notifier=notifier or LoggingNotifier(),
        config=config,
        **client_kwargs,
    )
    logger.debug("Gateway client created", api_url=client.base_url, store=type(store).__name__)
    return client


def get_default_client() -> GatewayClient:
    """Return the lazily created process-wide gateway client."""
    global _default_client
    if _default_client is None:
        configure_logging()
        _default_client = create_gateway_client()
    return _default_client


async def close_default_client() -> None:
    """Close and forget the process-wide client."""
    global _default_client
    if _default_client is not None:
        await _default_client.aclose()
        _default_client = None
