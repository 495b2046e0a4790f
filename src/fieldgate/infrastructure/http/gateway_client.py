"""Authenticated gateway client for the field-operations backend.

Every call runs through three interceptors:

1. Outgoing: ``Accept: application/json``, bearer token from the credential
   store, credentialed-request flag.
2. Incoming: the body goes through the envelope codec; a failure envelope is
   shown to the user and raised as `EnvelopeFailureError`.
3. Error: a 401 on a regular endpoint is recovered by the refresh coordinator
   and the request is replayed once; 401s from the login / refresh endpoints
   and every other failure are shown to the user and raised.
"""

from typing import Any, Iterable, Mapping, Optional

import httpx
from structlog import get_logger

from fieldgate.core.config.settings import Settings, settings
from fieldgate.core.exceptions import (
    AuthEndpointError,
    EnvelopeFailureError,
    SessionExpiredError,
    TransportError,
)
from fieldgate.domain.interfaces.credential_store import ICredentialStore
from fieldgate.domain.interfaces.notifier import IUserNotifier
from fieldgate.domain.services.envelope_codec import decode, failure_message, parse_envelope
from fieldgate.domain.services.refresh_coordinator import RefreshCoordinator
from fieldgate.domain.value_objects.envelope import SuccessEnvelope
from fieldgate.domain.value_objects.token_set import TokenSet
from fieldgate.infrastructure.http.request import OutgoingRequest
from fieldgate.infrastructure.notifications import LoggingNotifier

logger = get_logger(__name__)

JSON_MEDIA_TYPE = "application/json"
NETWORK_ERROR_MESSAGE = "Network Error"


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text; empty bodies are None."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def body_message(body: Any) -> Optional[str]:
    if isinstance(body, Mapping) and isinstance(body.get("message"), str) and body["message"]:
        return body["message"]
    return None


def body_errors(body: Any) -> Iterable[str]:
    if isinstance(body, Mapping) and isinstance(body.get("errors"), list):
        return [item for item in body["errors"] if isinstance(item, str)]
    return ()


def status_text(status_code: int) -> str:
    return f"Request failed with status code {status_code}"


class GatewayClient:
    """Async HTTP client that authenticates requests and unwraps backend envelopes.

    The client owns one `RefreshCoordinator`, so all requests issued through the
    same client share a single in-flight token refresh.

    Attributes:
        credential_store: Source of the bearer token and target of refreshed tokens.
        notifier: Where user-visible errors are shown before a call fails.
        coordinator: The single-flight refresh coordinator.
        config: Settings the client was built from.
    """

    def __init__(
        self,
        credential_store: ICredentialStore,
        *,
        notifier: Optional[IUserNotifier] = None,
        config: Optional[Settings] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        refresh_timeout: Optional[float] = None,
        coordinator: Optional[RefreshCoordinator] = None,
    ):
        self.config = config or settings
        self.credential_store = credential_store
        self.notifier = notifier or LoggingNotifier()
        self.base_url = (base_url or self.config.API_URL).rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or self.config.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
            follow_redirects=True,
        )
        self.coordinator = coordinator or RefreshCoordinator(
            credential_store,
            self._request_refresh,
            timeout=refresh_timeout or self.config.REFRESH_TIMEOUT_SECONDS,
        )

    async def __aenter__(self) -> "GatewayClient":
        return self

    async def __aexit__(self, exc_type, exc_val, traceback) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Public request API
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Send a request and return the unwrapped response.

        Returns:
            ``data`` for a success envelope, the whole envelope for a paged
            one, and the decoded body unchanged for anything else.

        Raises:
            EnvelopeFailureError: The backend answered ``succeeded: false``.
            AuthenticationError: The session ended and the user must log in.
            TransportError: Any other HTTP or network failure.
        """
        outgoing = OutgoingRequest(
            method=method.upper(),
            url=url,
            params=params,
            json=json,
            headers=dict(headers or {}),
        )
        return await self._dispatch(outgoing)

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _dispatch(self, outgoing: OutgoingRequest) -> Any:
        await self._prepare(outgoing)
        try:
            response = await self._http.request(
                outgoing.method,
                outgoing.url,
                params=outgoing.params,
                json=outgoing.json,
                headers=outgoing.headers,
            )
        except httpx.RequestError as e:
            return await self._on_error(outgoing, None, e)

        if not outgoing.with_credentials:
            self._http.cookies.clear()

        if response.is_error:
            return await self._on_error(outgoing, response, None)
        return await self._on_response(outgoing, response)

    async def _prepare(self, outgoing: OutgoingRequest) -> None:
        """Outgoing interceptor."""
        outgoing.headers["Accept"] = JSON_MEDIA_TYPE
        access_token = outgoing.refreshed_token or await self.credential_store.get_access_token()
        if access_token:
            outgoing.headers["Authorization"] = f"Bearer {access_token}"
        outgoing.with_credentials = self.config.WITH_CREDENTIALS

        logger.info("API request", method=outgoing.method, url=self._full_url(outgoing.url),
                    retried=outgoing.retried)
        if outgoing.json is not None and not self._carries_credentials(outgoing.url):
            logger.debug("API request body", url=outgoing.url, body=outgoing.json)

    async def _on_response(self, outgoing: OutgoingRequest, response: httpx.Response) -> Any:
        """Incoming interceptor."""
        logger.info("API response", status=response.status_code, method=outgoing.method, url=outgoing.url)
        try:
            return decode(decode_body(response))
        except EnvelopeFailureError as e:
            logger.error("Backend returned error", url=outgoing.url, message=e.server_message,
                         errors=list(e.errors))
            await self._notify("Error", e.message)
            raise

    async def _on_error(
        self,
        outgoing: OutgoingRequest,
        response: Optional[httpx.Response],
        error: Optional[httpx.RequestError],
    ) -> Any:
        """Error interceptor."""
        status_code = response.status_code if response is not None else None
        body = decode_body(response) if response is not None else None
        if error is not None:
            transport_message = str(error) or NETWORK_ERROR_MESSAGE
        else:
            transport_message = status_text(status_code)

        logger.error(
            "API request failed",
            status=status_code or "network_error",
            method=outgoing.method,
            url=outgoing.url,
            error=transport_message,
            body=body,
        )

        if status_code == 401 and not outgoing.retried:
            if self.is_auth_endpoint(outgoing.url):
                message = body_message(body) or transport_message
                logger.error("Auth endpoint rejected credentials, not refreshing", url=outgoing.url)
                await self._notify("Authentication Error", message)
                raise AuthEndpointError(message)

            logger.warning("401 Unauthorized, refreshing access token", url=outgoing.url)
            outgoing.retried = True
            outgoing.refreshed_token = await self.coordinator.refresh()
            return await self._dispatch(outgoing)

        message = failure_message(body_errors(body), body_message(body), fallback=transport_message)
        await self._notify("Error", message)
        raise TransportError(message, status_code=status_code, body=body) from error

    # ------------------------------------------------------------------
    # Token refresh
    # ------------------------------------------------------------------

    async def _request_refresh(self, refresh_token: str) -> TokenSet:
        """Exchange the refresh token for a new token set.

        Sent directly on the HTTP client: the refresh call carries no bearer
        token and its failures are handled by the coordinator, not the interceptors.
        """
        try:
            response = await self._http.post(
                self.config.REFRESH_PATH,
                json={"refreshToken": refresh_token},
                headers={"Accept": JSON_MEDIA_TYPE},
            )
        except httpx.RequestError as e:
            raise TransportError(str(e) or NETWORK_ERROR_MESSAGE) from e

        body = decode_body(response)
        if response.is_error:
            message = failure_message(body_errors(body), body_message(body),
                                      fallback=status_text(response.status_code))
            raise TransportError(message, status_code=response.status_code, body=body)

        envelope = parse_envelope(body)
        if not isinstance(envelope, SuccessEnvelope) or not envelope.data:
            raise SessionExpiredError("Token refresh failed")
        return TokenSet.from_payload(envelope.data)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def is_auth_endpoint(self, url: str) -> bool:
        return self.config.is_auth_exempt(url)

    def _carries_credentials(self, url: str) -> bool:
        return self.config.LOGIN_PATH in url or self.config.REGISTER_PATH in url

    def _full_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self.base_url}/{url.lstrip('/')}"

    async def _notify(self, title: str, message: str) -> None:
        try:
            await self.notifier.notify(title, message)
        except Exception:
            # The original failure is what the caller needs to see
            logger.exception("User notification failed", title=title)

