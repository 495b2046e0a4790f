"""Shared facade for key-value credential stores.

Backends implement three primitives; the facade turns every backend failure
into a logged warning and a "no token" answer.
"""

from abc import abstractmethod
from typing import Dict, Optional, Sequence

from structlog import get_logger

from fieldgate.domain.interfaces.credential_store import (
    ACCESS_TOKEN_KEY,
    EXPIRES_AT_KEY,
    TOKEN_KEYS,
    ICredentialStore,
)
from fieldgate.domain.value_objects.token_set import TokenSet, expires_within

logger = get_logger(__name__)


class KeyValueCredentialStore(ICredentialStore):
    """Credential store built on get / multi-set / multi-remove primitives.

    Subclasses raise freely from the primitives (ideally `CredentialStoreError`);
    the public methods never propagate those errors.
    """

    backend_name = "key_value"
    # Tokens expiring within this many seconds count as expired
    expiry_buffer_seconds: int = 300

    @abstractmethod
    async def _get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    async def _multi_set(self, items: Dict[str, str]) -> None:
        """Write all items atomically."""
        raise NotImplementedError

    @abstractmethod
    async def _multi_remove(self, keys: Sequence[str]) -> None:
        raise NotImplementedError

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._get_item(key)
        except Exception as e:
            logger.warning("Credential store read failed", backend=self.backend_name, key=key, error=str(e))
            return None

    async def set_tokens(self, access_token: str, refresh_token: str, expires_at: str) -> None:
        try:
            token_set = TokenSet(access_token, refresh_token, expires_at)
        except ValueError as e:
            logger.warning("Refusing to store incomplete token set", backend=self.backend_name, error=str(e))
            return
        try:
            await self._multi_set(token_set.as_storage_items())
        except Exception as e:
            logger.warning("Credential store write failed", backend=self.backend_name, error=str(e))
            return
        logger.debug("Tokens stored", backend=self.backend_name, expires_at=expires_at)

    async def clear_tokens(self) -> None:
        try:
            await self._multi_remove(TOKEN_KEYS)
        except Exception as e:
            logger.warning("Credential store clear failed", backend=self.backend_name, error=str(e))
            return
        logger.debug("Tokens cleared", backend=self.backend_name)

    async def has_token(self) -> bool:
        try:
            return bool(await self._get_item(ACCESS_TOKEN_KEY))
        except Exception as e:
            logger.warning("Credential store check failed", backend=self.backend_name, error=str(e))
            return False

    async def is_token_expired(self, buffer_seconds: Optional[int] = None) -> bool:
        if buffer_seconds is None:
            buffer_seconds = self.expiry_buffer_seconds
        try:
            expires_at = await self._get_item(EXPIRES_AT_KEY)
        except Exception as e:
            logger.warning("Credential store expiry check failed", backend=self.backend_name, error=str(e))
            return True
        return expires_within(expires_at, buffer_seconds)
