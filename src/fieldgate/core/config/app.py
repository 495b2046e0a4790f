"""
Application-specific settings.
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, environment and logging.

    Security Note:
        - Keep LOG_LEVEL above DEBUG in production; debug-level logs include
          request bodies (login payloads are always excluded).
    """
    PROJECT_NAME: str = "fieldgate"
    VERSION: str = "0.1.0"
    APP_ENV: str = "development"

    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    LOG_JSON: bool = False
