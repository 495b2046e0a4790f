"""Envelope value objects.

The backend wraps most response bodies in a ``Result<T>`` envelope. Parsing
turns a raw body into exactly one of the variants below so that callers match
on the type instead of probing keys.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_count: int


@dataclass(frozen=True)
class SuccessEnvelope:
    """``{"succeeded": true, "data": ...}`` without pagination metadata."""

    data: Any


@dataclass(frozen=True)
class PagedEnvelope:
    """Success envelope that also carries ``currentPage``, ``totalPages`` and ``totalCount``.

    ``body`` keeps the full envelope, which is what callers receive.
    """

    data: Any
    pagination: Pagination
    body: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FailureEnvelope:
    """``{"succeeded": false, "message": ..., "errors": [...]}``."""

    message: Optional[str] = None
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RawBody:
    """Any body without a boolean ``succeeded`` field, passed through unchanged."""

    body: Any


Envelope = Union[SuccessEnvelope, PagedEnvelope, FailureEnvelope, RawBody]
