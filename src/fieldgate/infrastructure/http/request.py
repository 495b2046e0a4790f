"""Outgoing request model used by the gateway client pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass
class OutgoingRequest:
    """A request as it travels through the client's interceptors.

    Attributes:
        retried: Set once the request has been replayed after a token refresh;
            a retried request never triggers another refresh.
        refreshed_token: Access token handed over by the refresh coordinator,
            preferred over the stored token when the request is replayed.
        with_credentials: Whether cookies set by the backend are kept.
    """

    method: str
    url: str
    params: Optional[Mapping[str, Any]] = None
    json: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    retried: bool = False
    refreshed_token: Optional[str] = None
    with_credentials: bool = False
