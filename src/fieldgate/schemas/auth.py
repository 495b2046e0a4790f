from __future__ import annotations

"""Pydantic models for the backend's authentication payloads."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from fieldgate.domain.value_objects.token_set import TokenSet


class LoginRequest(BaseModel):
    """Payload sent to ``POST /Auth/login``."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    remember_me: bool = Field(default=True, alias="rememberMe")


class LoginResponse(BaseModel):
    """Data returned by the login and register endpoints."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    access_token: str = Field(..., alias="accessToken", min_length=1)
    refresh_token: str = Field(..., alias="refreshToken", min_length=1)
    expires_at: str = Field(..., alias="expiresAt", min_length=1)
    user: Optional[Dict[str, Any]] = None

    def token_set(self) -> TokenSet:
        return TokenSet(self.access_token, self.refresh_token, self.expires_at)
