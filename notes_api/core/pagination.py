"""
Pagination Utilities.

Keyset (cursor-based) pagination for list endpoints. Cursors are opaque
URL-safe base64 tokens; the caller decides what the token encodes.
"""

import base64
import binascii
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel

from notes_api.core.exceptions import ValidationError
from notes_api.schemas.base import PaginatedResponse, PaginationInfo, ResponseMetadata

T = TypeVar("T")


# =============================================================================
# Pagination Parameters
# =============================================================================


@dataclass
class PaginationParams:
    """Pagination parameters extracted from query string."""

    limit: int
    cursor: str | None

    @property
    def is_cursor_based(self) -> bool:
        """Check if continuing from a previous page."""
        return self.cursor is not None


def get_pagination_params(
    limit: int | None = Query(
        default=None,
        ge=1,
        description="Maximum number of items to return",
    ),
    cursor: str | None = Query(
        default=None,
        description="Cursor returned as next_cursor by the previous page",
    ),
) -> PaginationParams:
    """
    FastAPI dependency for pagination parameters.

    The default and maximum page sizes come from application.yaml.

    Raises:
        ValidationError: If limit exceeds the configured maximum
    """
    from notes_api.core.config import get_app_config

    settings = get_app_config().application.pagination
    if limit is None:
        limit = settings.default_limit
    if limit > settings.max_limit:
        raise ValidationError(
            "limit too large",
            details={"limit": f"Maximum is {settings.max_limit}"},
        )
    return PaginationParams(limit=limit, cursor=cursor)


# =============================================================================
# Cursor Encoding/Decoding
# =============================================================================


def encode_cursor(value: str | int) -> str:
    """
    Encode a value as a pagination cursor.

    Args:
        value: The value to encode

    Returns:
        Base64-encoded cursor string
    """
    return base64.urlsafe_b64encode(str(value).encode()).decode()


def decode_cursor(cursor: str) -> str:
    """
    Decode a pagination cursor.

    Args:
        cursor: Base64-encoded cursor string

    Returns:
        Decoded cursor value

    Raises:
        ValueError: If cursor is invalid
    """
    try:
        return base64.urlsafe_b64decode(cursor.encode()).decode()
    except (binascii.Error, UnicodeError) as exc:
        raise ValueError(f"Invalid cursor: {cursor}") from exc


# =============================================================================
# Paginated Result Builder
# =============================================================================


@dataclass
class PagedResult(Generic[T]):
    """Items of one page plus the cursor for the next one."""

    items: list[T]
    limit: int
    has_more: bool
    next_cursor: str | None = None


def create_paginated_response(
    items: list[Any],
    item_schema: type[BaseModel],
    limit: int,
    cursor: str | None = None,
    next_cursor: str | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """
    Create a standardized paginated response.

    Args:
        items: List of items (model instances or dicts)
        item_schema: Pydantic schema to validate items
        limit: Page size limit
        cursor: Cursor the page was requested with
        next_cursor: Cursor for next page, None on the last page
        request_id: Request ID for metadata

    Returns:
        Dict matching PaginatedResponse structure
    """
    validated_items = [
        item_schema.model_validate(item).model_dump(mode="json")
        for item in items
    ]

    pagination = PaginationInfo(
        limit=limit,
        cursor=cursor,
        next_cursor=next_cursor,
        has_more=next_cursor is not None,
    )

    response = PaginatedResponse(
        data=validated_items,
        pagination=pagination,
        metadata=ResponseMetadata(request_id=request_id),
    )

    return response.model_dump(mode="json")


# =============================================================================
# Keyset Pagination Helper for Services
# =============================================================================


async def paginate_keyset(
    query_func: Callable[[int], Awaitable[list[T]]],
    limit: int,
    cursor_func: Callable[[T], str],
) -> PagedResult[T]:
    """
    Execute a keyset-paginated query.

    Args:
        query_func: Async function that takes a row limit and returns items
            in the listing's order, starting after the current position
        limit: Page size
        cursor_func: Builds the encoded cursor for an item

    Returns:
        PagedResult with next_cursor set only when more items exist

    Usage:
        page = await paginate_keyset(
            query_func=lambda n: repo.list_first_page(n),
            limit=20,
            cursor_func=lambda note: NoteCursor.from_note(note).encode(),
        )
    """
    # One extra row tells whether another page exists
    items = await query_func(limit + 1)

    has_more = len(items) > limit
    if has_more:
        items = items[:limit]

    next_cursor = cursor_func(items[-1]) if has_more and items else None

    return PagedResult(
        items=items,
        limit=limit,
        has_more=has_more,
        next_cursor=next_cursor,
    )
