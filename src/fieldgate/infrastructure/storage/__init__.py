"""Credential store backends and the factory that picks one from settings."""

from fieldgate.core.config.settings import Settings
from fieldgate.infrastructure.storage.base import KeyValueCredentialStore
from fieldgate.infrastructure.storage.file import FileCredentialStore
from fieldgate.infrastructure.storage.memory import InMemoryCredentialStore
from fieldgate.infrastructure.storage.redis_store import RedisCredentialStore


def create_credential_store(config: Settings) -> KeyValueCredentialStore:
    """Build the backend named by ``CREDENTIAL_STORE_BACKEND``."""
    backend = config.CREDENTIAL_STORE_BACKEND
    if backend == "file":
        store = FileCredentialStore(config.CREDENTIAL_FILE_PATH)
    elif backend == "redis":
        store = RedisCredentialStore.from_url(config.REDIS_URL, config.REDIS_KEY_PREFIX)
    else:
        store = InMemoryCredentialStore()
    store.expiry_buffer_seconds = config.TOKEN_EXPIRY_BUFFER_SECONDS
    return store


__all__ = [
    "KeyValueCredentialStore",
    "FileCredentialStore",
    "InMemoryCredentialStore",
    "RedisCredentialStore",
    "create_credential_store",
]
