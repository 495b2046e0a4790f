"""Token set value object.

The backend issues an access token, a refresh token and the access token's
expiry together; they are persisted and replaced as one unit.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar, Dict, Mapping, Optional

from structlog import get_logger

logger = get_logger(__name__)


def parse_expiry(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 expiry string into an aware UTC datetime.

    A trailing ``Z`` is accepted and naive values are treated as UTC.
    Returns None for missing or unparseable values.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Unparseable token expiry", expires_at=value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def expires_within(expires_at: Optional[str], buffer_seconds: int,
                   now: Optional[datetime] = None) -> bool:
    """Return True if ``expires_at`` is missing, invalid, or inside the buffer window."""
    expiry = parse_expiry(expires_at)
    if expiry is None:
        return True
    current = now or datetime.now(timezone.utc)
    return expiry - current < timedelta(seconds=buffer_seconds)


@dataclass(frozen=True)
class TokenSet:
    """Access token, refresh token and expiry, always handled together.

    All three values are required; a set with any empty member cannot be
    constructed, which keeps partial token state out of the credential store.
    """

    access_token: str
    refresh_token: str
    expires_at: str

    ACCESS_TOKEN_KEY: ClassVar[str] = "accessToken"
    REFRESH_TOKEN_KEY: ClassVar[str] = "refreshToken"
    EXPIRES_AT_KEY: ClassVar[str] = "expiresAt"

    def __post_init__(self):
        for name in ("access_token", "refresh_token", "expires_at"):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                raise ValueError(f"Token set field '{name}' must be a non-empty string")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TokenSet":
        """Build a token set from the backend's camelCase payload.

        Raises:
            ValueError: If the payload is not a mapping or misses a field.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Token payload must be an object")
        expires_at = payload.get(cls.EXPIRES_AT_KEY)
        if isinstance(expires_at, datetime):
            expires_at = expires_at.isoformat()
        return cls(
            access_token=payload.get(cls.ACCESS_TOKEN_KEY),
            refresh_token=payload.get(cls.REFRESH_TOKEN_KEY),
            expires_at=expires_at,
        )

    def as_storage_items(self) -> Dict[str, str]:
        """Key/value pairs as persisted by the credential store."""
        return {
            self.ACCESS_TOKEN_KEY: self.access_token,
            self.REFRESH_TOKEN_KEY: self.refresh_token,
            self.EXPIRES_AT_KEY: self.expires_at,
        }

    def is_expired(self, buffer_seconds: int = 300, now: Optional[datetime] = None) -> bool:
        """Check whether the access token is expired or about to expire.

        Args:
            buffer_seconds: Tokens expiring within this window count as expired.
            now: Reference time, defaults to the current UTC time.
        """
        return expires_within(self.expires_at, buffer_seconds, now)

    def __repr__(self) -> str:
        return f"TokenSet(access_token='***', refresh_token='***', expires_at={self.expires_at!r})"
