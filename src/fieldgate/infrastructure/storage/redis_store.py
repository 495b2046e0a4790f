"""Redis credential store.

Useful when several worker processes act for the same account and must see
the same token set.
"""

from typing import Dict, Optional, Sequence

from redis.asyncio import Redis
from redis.exceptions import RedisError

from fieldgate.core.exceptions import CredentialStoreError
from fieldgate.infrastructure.storage.base import KeyValueCredentialStore


class RedisCredentialStore(KeyValueCredentialStore):
    """Stores each token under ``<prefix>:<key>``. MSET and DEL are single atomic commands."""

    backend_name = "redis"

    def __init__(self, redis_client: Redis, key_prefix: str = "fieldgate:credentials"):
        self.redis_client = redis_client
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "fieldgate:credentials") -> "RedisCredentialStore":
        return cls(Redis.from_url(url, encoding="utf-8", decode_responses=True), key_prefix)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def _get_item(self, key: str) -> Optional[str]:
        try:
            value = await self.redis_client.get(self._key(key))
        except RedisError as e:
            raise CredentialStoreError(f"Redis read failed: {e}") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def _multi_set(self, items: Dict[str, str]) -> None:
        try:
            await self.redis_client.mset({self._key(key): value for key, value in items.items()})
        except RedisError as e:
            raise CredentialStoreError(f"Redis write failed: {e}") from e

    async def _multi_remove(self, keys: Sequence[str]) -> None:
        try:
            await self.redis_client.delete(*(self._key(key) for key in keys))
        except RedisError as e:
            raise CredentialStoreError(f"Redis delete failed: {e}") from e

    async def aclose(self) -> None:
        await self.redis_client.aclose()
