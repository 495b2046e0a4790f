"""Session operations on top of the gateway client.

Logging in and registering persist the returned token set; logging out always
clears it, whether or not the backend acknowledged the logout.
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError
from structlog import get_logger

from fieldgate.core.exceptions import FieldGateError, TransportError
from fieldgate.infrastructure.http.gateway_client import GatewayClient
from fieldgate.schemas.auth import LoginRequest, LoginResponse

logger = get_logger(__name__)


class AuthSession:
    """Login, registration, current user and logout for one gateway client."""

    def __init__(self, client: GatewayClient):
        self.client = client
        self.credential_store = client.credential_store
        self.config = client.config

    async def login(self, email: str, password: str, remember_me: bool = True) -> LoginResponse:
        """Authenticate with email and password and store the issued tokens.

        Raises:
            AuthEndpointError: The backend rejected the credentials with a 401.
            EnvelopeFailureError: The backend reported a failed login.
        """
        payload = LoginRequest(email=email, password=password, remember_me=remember_me)
        data = await self.client.post(self.config.LOGIN_PATH, json=payload.model_dump(by_alias=True))
        response = self._parse_login_response(data)
        await self.credential_store.save(response.token_set())
        await logger.ainfo("User logged in", user_id=(response.user or {}).get("id"))
        return response

    async def register(self, payload: Dict[str, Any]) -> LoginResponse:
        """Create an account; the backend answers like a login and the tokens are stored."""
        data = await self.client.post(self.config.REGISTER_PATH, json=payload)
        response = self._parse_login_response(data)
        await self.credential_store.save(response.token_set())
        await logger.ainfo("User registered", user_id=(response.user or {}).get("id"))
        return response

    async def get_current_user(self) -> Optional[Dict[str, Any]]:
        """Return the logged-in user, or None when there is no usable session.

        Any failure clears stored tokens so the application falls back to its
        login flow.
        """
        if not await self.credential_store.has_token():
            return None
        try:
            return await self.client.get(self.config.CURRENT_USER_PATH)
        except FieldGateError as e:
            if isinstance(e, TransportError) and e.status_code == 404:
                logger.warning("User profile endpoint returned 404, clearing stale credentials")
            else:
                logger.error("Failed to fetch current user", error=str(e), code=e.code)
            await self.credential_store.clear_tokens()
            return None

    async def logout(self) -> None:
        """Tell the backend about the logout, then clear local tokens regardless."""
        try:
            await self.client.post(self.config.LOGOUT_PATH)
        except FieldGateError as e:
            logger.error("Logout API call failed", error=str(e), code=e.code)
        finally:
            await self.credential_store.clear_tokens()
        logger.info("User logged out")

    async def is_authenticated(self) -> bool:
        return await self.credential_store.has_token()

    @staticmethod
    def _parse_login_response(data: Any) -> LoginResponse:
        try:
            return LoginResponse.model_validate(data)
        except ValidationError as e:
            raise TransportError("Unexpected login response from server", body=data) from e
