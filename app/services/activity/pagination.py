"""Cursor pagination over an already-merged commit list.

The cursor is the key (commit SHA) of the last item the client saw. Resolution
is positional: the page starts right after the matching item. An unknown
cursor restarts from the beginning, which keeps existing clients working when
the underlying data shifts between calls.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from app.services.activity.exceptions import InvalidPageLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 50


def _sha(item: object) -> str:
    sha: str = item.sha  # type: ignore[attr-defined]
    return sha


@dataclass
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    has_more: bool = False
    next_cursor: str | None = None


def paginate(
    items: Sequence[T],
    cursor: str | None,
    limit: int = DEFAULT_PAGE_LIMIT,
    key: Callable[[T], str] = _sha,
) -> Page[T]:
    """
    Slice one page out of items.

    Args:
        items: Full ordered result list
        cursor: Key of the last item of the previous page, or None to start
        limit: Page size (must be > 0)
        key: Extracts the unique key of an item

    Returns:
        Page with the slice, whether more items follow, and the cursor for the
        next page (only when more items follow)

    Raises:
        InvalidPageLimitError: If limit is not positive
    """
    if limit <= 0:
        raise InvalidPageLimitError(f"limit must be greater than 0, got {limit}")

    if not items:
        return Page()

    start = 0
    if cursor:
        for index, item in enumerate(items):
            if key(item) == cursor:
                start = index + 1
                break
        else:
            logger.debug(f"Cursor {cursor} not in result set, restarting from first page")

    end = start + limit
    page_items = list(items[start:end])
    has_more = end < len(items)

    return Page(
        items=page_items,
        has_more=has_more,
        next_cursor=key(page_items[-1]) if has_more and page_items else None,
    )
