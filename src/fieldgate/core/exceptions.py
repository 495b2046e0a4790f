from __future__ import annotations

"""Centralized, structured exception hierarchy for fieldgate.

Every error the gateway client raises to its callers derives from
`FieldGateError` and carries a machine-readable `code` next to the
human-readable `message`. The message is the same text shown to the user by
the notifier, so callers can display `str(error)` directly.

Hierarchy:
- EnvelopeFailureError: the backend answered ``succeeded: false``.
- AuthenticationError: the session cannot continue without a new login.
  - AuthEndpointError: 401 from the login or refresh endpoints.
  - SessionExpiredError: no refresh token, or the refresh itself failed.
  - RefreshCancelledError: the task running the refresh was cancelled.
- TransportError: any other non-2xx response or network failure.
- CredentialStoreError: raised by storage backends, never escapes the store.
"""

from typing import Any, Final, Optional, Sequence

__all__: Final = [
    "FieldGateError",
    "EnvelopeFailureError",
    "AuthenticationError",
    "AuthEndpointError",
    "SessionExpiredError",
    "RefreshCancelledError",
    "TransportError",
    "CredentialStoreError",
]


class FieldGateError(Exception):
    """Base exception class for all custom errors raised by fieldgate.

    Attributes:
        message (str): A human-readable error message, suitable for display.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Envelope errors
# ---------------------------------------------------------------------------


class EnvelopeFailureError(FieldGateError):
    """Raised when the backend explicitly reports ``succeeded: false``.

    The message is the newline-joined ``errors`` list when it is non-empty,
    otherwise the envelope ``message``. These errors are never retried.

    Attributes:
        errors (tuple[str, ...]): Validation errors reported by the backend.
        server_message (str | None): The raw ``message`` field, if any.
    """

    def __init__(
        self,
        message: str,
        errors: Sequence[str] = (),
        server_message: Optional[str] = None,
        code: str = "envelope_failure",
    ):
        super().__init__(message, code)
        self.errors = tuple(errors)
        self.server_message = server_message


# ---------------------------------------------------------------------------
# Auth-related errors
# ---------------------------------------------------------------------------


class AuthenticationError(FieldGateError):
    """Raised when the request cannot be authenticated and will not be recovered.

    The surrounding application is expected to route the user to a login flow.
    """

    def __init__(
        self,
        message: str,
        code: str = "authentication_error",
        status_code: Optional[int] = 401,
    ):
        super().__init__(message, code)
        self.status_code = status_code


class AuthEndpointError(AuthenticationError):
    """Raised for a 401 returned by the login or refresh endpoints themselves."""

    def __init__(self, message: str, code: str = "auth_endpoint_rejected"):
        super().__init__(message, code)


class SessionExpiredError(AuthenticationError):
    """Raised when the access token expired and could not be refreshed.

    Persisted tokens have already been cleared when this is raised.
    """

    def __init__(self, message: str = "Session expired, please log in again",
                 code: str = "session_expired"):
        super().__init__(message, code)


class RefreshCancelledError(AuthenticationError):
    """Raised to queued requests when the task running the refresh is cancelled.

    Persisted tokens are left untouched, so a later request may refresh again.
    """

    def __init__(self, message: str = "Token refresh was cancelled",
                 code: str = "refresh_cancelled"):
        super().__init__(message, code, status_code=None)


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------


class TransportError(FieldGateError):
    """Raised for non-2xx responses and network-level failures.

    Attributes:
        status_code (int | None): HTTP status, ``None`` for network errors.
        body (Any): The decoded response body, if one was received.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
        code: str = "transport_error",
    ):
        super().__init__(message, code)
        self.status_code = status_code
        self.body = body


# ---------------------------------------------------------------------------
# Storage errors
# ---------------------------------------------------------------------------


class CredentialStoreError(FieldGateError):
    """Raised by credential store backends when the underlying storage fails."""

    def __init__(self, message: str, code: str = "credential_store_error"):
        super().__init__(message, code)
