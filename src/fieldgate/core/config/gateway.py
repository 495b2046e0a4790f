"""Backend gateway settings.
"""

import logging
from typing import List, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class GatewaySettings(BaseSettings):
    """Defines how the client reaches the field-operations backend.

    Paths are relative to ``API_URL``. ``AUTH_EXEMPT_PATHS`` lists endpoints whose
    401 responses are reported directly instead of triggering a token refresh.

    Security Note:
        - Use an ``https://`` API_URL outside local development; bearer tokens
          travel in request headers.
    """

    API_URL: str = "http://localhost:5000/api"

    LOGIN_PATH: str = "/Auth/login"
    REGISTER_PATH: str = "/Auth/register"
    REFRESH_PATH: str = "/Auth/refresh"
    LOGOUT_PATH: str = "/Auth/logout"
    CURRENT_USER_PATH: str = "/Auth/me"
    AUTH_EXEMPT_PATHS: Union[str, List[str]] = Field(default=["/Auth/login", "/Auth/refresh"])

    REQUEST_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    REFRESH_TIMEOUT_SECONDS: float = Field(default=15.0, gt=0)
    WITH_CREDENTIALS: bool = True

    @field_validator("AUTH_EXEMPT_PATHS", mode="before")
    @classmethod
    def assemble_exempt_paths(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Splits a comma-separated string of paths into a list.

        Args:
            v: Input value as a string or list of paths.

        Returns:
            List of stripped, non-empty paths.
        """
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    @field_validator("API_URL")
    @classmethod
    def normalize_api_url(cls, v: str) -> str:
        if v.startswith("http://") and "localhost" not in v and "127.0.0.1" not in v:
            logger.warning("API_URL uses plain http outside localhost.")
        return v.rstrip("/")
