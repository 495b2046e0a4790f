"""Credential store interface.

The gateway client never keeps tokens in memory beyond a single request; it
reads them from, and writes them to, an `ICredentialStore`.
"""

from abc import ABC, abstractmethod
from typing import Optional

from fieldgate.domain.value_objects.token_set import TokenSet

ACCESS_TOKEN_KEY = TokenSet.ACCESS_TOKEN_KEY
REFRESH_TOKEN_KEY = TokenSet.REFRESH_TOKEN_KEY
EXPIRES_AT_KEY = TokenSet.EXPIRES_AT_KEY
TOKEN_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, EXPIRES_AT_KEY)


class ICredentialStore(ABC):
    """Durable key-value storage for the access token, refresh token and expiry.

    Implementations must not raise from any of these methods: storage failures
    degrade to "no token" so that losing credentials leads to a new login
    rather than a crash in the request flow.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value for ``key`` or None."""
        raise NotImplementedError

    @abstractmethod
    async def set_tokens(self, access_token: str, refresh_token: str, expires_at: str) -> None:
        """Persist all three token values in one write."""
        raise NotImplementedError

    @abstractmethod
    async def clear_tokens(self) -> None:
        """Remove all three token values."""
        raise NotImplementedError

    @abstractmethod
    async def has_token(self) -> bool:
        """Return True if an access token is stored (i.e. the user is logged in)."""
        raise NotImplementedError

    async def get_access_token(self) -> Optional[str]:
        return await self.get(ACCESS_TOKEN_KEY)

    async def get_refresh_token(self) -> Optional[str]:
        return await self.get(REFRESH_TOKEN_KEY)

    async def get_expires_at(self) -> Optional[str]:
        return await self.get(EXPIRES_AT_KEY)

    async def save(self, token_set: TokenSet) -> None:
        await self.set_tokens(token_set.access_token, token_set.refresh_token, token_set.expires_at)

    @abstractmethod
    async def is_token_expired(self, buffer_seconds: Optional[int] = None) -> bool:
        """Return True if the access token is expired or expires within the buffer.

        ``None`` uses the store's configured buffer.
        """
        raise NotImplementedError
