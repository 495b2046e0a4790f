"""Envelope codec.

Turns decoded response bodies into `Envelope` variants and unwraps them into
what the caller of the gateway client receives.
"""

from typing import Any, Iterable, Mapping, Optional

from fieldgate.core.exceptions import EnvelopeFailureError
from fieldgate.domain.value_objects.envelope import (
    Envelope,
    FailureEnvelope,
    PagedEnvelope,
    Pagination,
    RawBody,
    SuccessEnvelope,
)

DEFAULT_FAILURE_MESSAGE = "Request failed"

PAGINATION_KEYS = ("currentPage", "totalPages", "totalCount")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _string_errors(errors: Any) -> tuple:
    if not isinstance(errors, (list, tuple)):
        return ()
    return tuple(item for item in errors if isinstance(item, str))


def failure_message(
    errors: Optional[Iterable[str]],
    message: Optional[str],
    fallback: str = DEFAULT_FAILURE_MESSAGE,
) -> str:
    """Pick the user-facing text for a failed call.

    A non-empty ``errors`` list wins and is joined by newlines as is, even
    when its entries are blank. Then ``message``, then ``fallback``.
    """
    collected = list(errors or ())
    if collected:
        return "\n".join(collected)
    if message:
        return message
    return fallback


def parse_envelope(body: Any) -> Envelope:
    """Classify a decoded response body.

    Args:
        body: The JSON-decoded body (or text / None for non-JSON responses).

    Returns:
        RawBody when there is no boolean ``succeeded`` field, FailureEnvelope
        when it is false, PagedEnvelope when the three pagination counters are
        numeric, SuccessEnvelope otherwise.
    """
    if not isinstance(body, Mapping) or not isinstance(body.get("succeeded"), bool):
        return RawBody(body)

    if body["succeeded"] is False:
        message = body.get("message")
        return FailureEnvelope(
            message=message if isinstance(message, str) else None,
            errors=_string_errors(body.get("errors")),
        )

    if all(_is_number(body.get(key)) for key in PAGINATION_KEYS):
        return PagedEnvelope(
            data=body.get("data"),
            pagination=Pagination(
                current_page=int(body["currentPage"]),
                total_pages=int(body["totalPages"]),
                total_count=int(body["totalCount"]),
            ),
            body=dict(body),
        )

    return SuccessEnvelope(body.get("data"))


def unwrap(envelope: Envelope) -> Any:
    """Return the caller-facing value of an envelope.

    Raises:
        EnvelopeFailureError: For a FailureEnvelope.
    """
    if isinstance(envelope, SuccessEnvelope):
        return envelope.data
    if isinstance(envelope, PagedEnvelope):
        return envelope.body
    if isinstance(envelope, RawBody):
        return envelope.body
    if isinstance(envelope, FailureEnvelope):
        raise EnvelopeFailureError(
            failure_message(envelope.errors, envelope.message),
            errors=envelope.errors,
            server_message=envelope.message,
        )
    raise TypeError(f"Unknown envelope type: {type(envelope).__name__}")


def decode(body: Any) -> Any:
    """Parse and unwrap in one step."""
    return unwrap(parse_envelope(body))
