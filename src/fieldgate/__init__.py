"""fieldgate: authenticated async gateway client for the field-operations backend."""

from fieldgate.core.exceptions import (
    AuthEndpointError,
    AuthenticationError,
    EnvelopeFailureError,
    FieldGateError,
    RefreshCancelledError,
    SessionExpiredError,
    TransportError,
)
from fieldgate.domain.services.refresh_coordinator import RefreshCoordinator, RefreshState
from fieldgate.domain.value_objects.token_set import TokenSet
from fieldgate.infrastructure.dependency_injection import (
    close_default_client,
    create_gateway_client,
    get_default_client,
)
from fieldgate.infrastructure.http.gateway_client import GatewayClient
from fieldgate.services.auth_session import AuthSession

__version__ = "0.1.0"

__all__ = [
    "AuthEndpointError",
    "AuthSession",
    "AuthenticationError",
    "EnvelopeFailureError",
    "FieldGateError",
    "GatewayClient",
    "RefreshCancelledError",
    "RefreshCoordinator",
    "RefreshState",
    "SessionExpiredError",
    "TokenSet",
    "TransportError",
    "close_default_client",
    "create_gateway_client",
    "get_default_client",
]
