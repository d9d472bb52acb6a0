"""Page / size arithmetic shared by every list query."""

from __future__ import annotations

import math
from typing import Any, NamedTuple

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class Page(NamedTuple):
    limit: int
    offset: int


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def page_index(page: Any = 0) -> int:
    """Zero-based page number; non-numeric or negative input becomes 0."""
    index = _to_int(page)
    return index if index and index > 0 else 0


def page_size(size: Any = DEFAULT_PAGE_SIZE, max_size: int = MAX_PAGE_SIZE) -> int:
    """Coerce *size* to a positive integer no larger than *max_size*.

    Non-numeric, zero or negative sizes fall back to ``DEFAULT_PAGE_SIZE``.
    """
    limit = _to_int(size)
    if not limit or limit < 0:
        limit = DEFAULT_PAGE_SIZE
    return min(limit, max_size)


def paginate(page: Any = 0, size: Any = DEFAULT_PAGE_SIZE, max_size: int = MAX_PAGE_SIZE) -> Page:
    """Turn ``(page, size)`` into a ``(limit, offset)`` pair.

    Pages are zero-based.  A non-numeric or non-positive *page* yields
    offset 0.
    """
    limit = page_size(size, max_size)
    return Page(limit=limit, offset=page_index(page) * limit)


def total_pages(count: int, size: Any = DEFAULT_PAGE_SIZE, max_size: int = MAX_PAGE_SIZE) -> int:
    """Number of pages needed to show *count* rows at the coerced *size*."""
    return math.ceil(count / page_size(size, max_size))
