"""
Credential store settings.
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class CredentialStoreSettings(BaseSettings):
    """
    Selects and configures the key-value store that persists the token set.

    Backends:
        - ``memory``: process-local dictionary, lost on exit.
        - ``file``: JSON file readable only by the current user.
        - ``redis``: shared store, keys namespaced by ``REDIS_KEY_PREFIX``.

    Security Note:
        - The file backend chmods its file to 0600; keep it on a private volume.
        - REDIS_URL should use ``rediss://`` when Redis is not on a trusted network.
    """
    CREDENTIAL_STORE_BACKEND: str = Field(default="memory", pattern="^(memory|file|redis)$")
    CREDENTIAL_FILE_PATH: str = ".fieldgate/credentials.json"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "fieldgate:credentials"

    # Tokens expiring within this window are reported as expired
    TOKEN_EXPIRY_BUFFER_SECONDS: int = Field(default=300, ge=0)
