"""The content store contract shared by the SQLite and CSV backends.

Every named query is expressed once here in terms of two primitives,
``_select(filter, limit, offset)`` and ``_count(filter)``, so both backends
answer ``list_by_genre_and_type`` and friends identically.  Backends
implement the primitives plus the mutations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from catalog.db.models import Content, ContentFilter, Link
from catalog.db.pagination import MAX_PAGE_SIZE, paginate


class ContentStore(ABC):
    """Query + mutation capability set for catalog content."""

    max_page_size: int = MAX_PAGE_SIZE

    # ------------------------------------------------------------------
    # Backend primitives
    # ------------------------------------------------------------------
    @abstractmethod
    def _select(self, flt: ContentFilter, limit: int, offset: int) -> list[Content]:
        """Rows matching *flt*, id descending, sliced by limit / offset."""

    @abstractmethod
    def _count(self, flt: ContentFilter) -> int:
        """Number of rows matching *flt*."""

    @abstractmethod
    def _get(self, content_id: int) -> Optional[Content]:
        """A single content row without links, or ``None``."""

    @abstractmethod
    def list_links(self, content_id: int) -> list[Link]:
        """Links of *content_id* ordered by link id ascending."""

    @abstractmethod
    def save(self, content: Content) -> Content:
        """Insert (no id) or replace (with id) a content row."""

    @abstractmethod
    def delete_by_id(self, content_id: int) -> bool:
        """Delete a content row and all of its links."""

    @abstractmethod
    def add_link(self, content_id: int, link: Link) -> Link:
        """Attach a new link to an existing content row."""

    @abstractmethod
    def delete_link(self, content_id: int, link_id: int) -> bool:
        """Remove the link matching both ids; ``False`` when nothing matched."""

    def close(self) -> None:
        """Release backend resources (no-op by default)."""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def query(self, flt: ContentFilter, page: Any = 0, size: Any = 10) -> list[Content]:
        limit, offset = paginate(page, size, self.max_page_size)
        return self._select(flt, limit, offset)

    def list_all(self, page: Any = 0, size: Any = 10) -> list[Content]:
        return self.query(ContentFilter(), page, size)

    def list_by_type(self, type: str, page: Any = 0, size: Any = 10) -> list[Content]:
        return self.query(ContentFilter(type=type), page, size)

    def search_by_keyword(self, keyword: str, page: Any = 0, size: Any = 10) -> list[Content]:
        return self.query(ContentFilter(keyword=keyword), page, size)

    def search_by_type_and_keyword(
        self, type: str, keyword: str, page: Any = 0, size: Any = 10
    ) -> list[Content]:
        return self.query(ContentFilter(type=type, keyword=keyword), page, size)

    def list_by_genre(self, genre: str, page: Any = 0, size: Any = 10) -> list[Content]:
        return self.query(ContentFilter(genre=genre), page, size)

    def list_by_genre_and_type(
        self, genre: str, type: str, page: Any = 0, size: Any = 10
    ) -> list[Content]:
        return self.query(ContentFilter(type=type, genre=genre), page, size)

    def count_all(self) -> int:
        return self._count(ContentFilter())

    def count_by_type(self, type: str) -> int:
        return self._count(ContentFilter(type=type))

    def count_by_keyword(self, keyword: str) -> int:
        return self._count(ContentFilter(keyword=keyword))

    def count_by_type_and_keyword(self, type: str, keyword: str = "") -> int:
        return self._count(ContentFilter(type=type, keyword=keyword))

    def count_by_genre(self, genre: str) -> int:
        return self._count(ContentFilter(genre=genre))

    def count_by_genre_and_type(self, genre: str, type: str) -> int:
        return self._count(ContentFilter(type=type, genre=genre))

    def find_by_id(self, content_id: int) -> Optional[Content]:
        """Return the content with its links attached, or ``None``."""
        content = self._get(content_id)
        if content is None:
            return None
        content.links = self.list_links(content_id)
        return content

    def find_by_id_and_type(self, content_id: int, type: str) -> Optional[Content]:
        """Like :meth:`find_by_id` but ``None`` when the type differs."""
        content = self.find_by_id(content_id)
        if content is None or content.type != type:
            return None
        return content

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def save_batch(self, contents: Iterable[Content]) -> list[Content]:
        """Save each content in input order.

        Not transactional: when one save fails the earlier ones stay
        persisted and the error propagates.
        """
        return [self.save(content) for content in contents]
