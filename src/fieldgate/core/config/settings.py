"""Main client settings and configuration management.

This module composes the settings from the different modules (app, gateway,
credential storage) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the package.

Environment Support:
- Development: Uses .env
- Test: Uses .env.test when present
- Staging: Uses .env.staging when present
- Production: Uses .env.production when present
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .gateway import GatewaySettings
from .storage import CredentialStoreSettings

logger = logging.getLogger(__name__)
logging.getLogger("httpx").setLevel(logging.WARNING)


class Settings(AppSettings, GatewaySettings, CredentialStoreSettings):
    """The main settings class that aggregates all client configurations.

    Every field has a default so a client can be built without any
    environment, which is what the test suite relies on.

    Usage:
        - Access settings via the singleton instance `settings`, or build a
          fresh `Settings(...)` to override values for one client.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def is_auth_exempt(self, url: str) -> bool:
        """Return True if 401s from ``url`` must not trigger a token refresh."""
        return any(path in url for path in self.AUTH_EXEMPT_PATHS)


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }

    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    if Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
    else:
        logger.debug(f"No .env file found, using environment variables only (environment: {env})")
    return Settings()


# Create a singleton instance of the settings to be used across the package.
settings = create_settings()
