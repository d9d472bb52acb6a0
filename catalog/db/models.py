"""Dataclass models representing catalog rows.

These are plain Python objects, not ORM models.  Both content backends
normalise their rows into these shapes so the query / mutation logic never
branches on where the data came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ContentType(str, Enum):
    MOVIE = "MOVIE"
    WEBSERIES = "WEBSERIES"


# Schema columns of the ``content`` table, in storage order (id excluded).
CONTENT_FIELDS = (
    "name",
    "rating",
    "genre",
    "plot_summary",
    "poster_url",
    "release_year",
    "duration",
    "type",
)

LINK_FIELDS = ("title", "link", "content_id")


@dataclass
class Link:
    title: str
    link: str
    content_id: Optional[int] = None
    id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "contentId": self.content_id,
        }


@dataclass
class Content:
    name: str
    type: str
    rating: Optional[float] = None
    genre: str = ""
    plot_summary: str = ""
    poster_url: str = ""
    release_year: Optional[int] = None
    duration: str = ""
    id: Optional[int] = None
    links: list[Link] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------
    def row_values(self) -> tuple[Any, ...]:
        """Column values in ``CONTENT_FIELDS`` order, for INSERT / UPDATE."""
        return tuple(getattr(self, name) for name in CONTENT_FIELDS)

    def to_dict(self, include_links: bool = True) -> dict[str, Any]:
        """Serialise using the camelCase field names of the public API."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "rating": self.rating,
            "genre": self.genre,
            "plotSummary": self.plot_summary,
            "posterUrl": self.poster_url,
            "releaseYear": self.release_year,
            "duration": self.duration,
            "type": self.type,
        }
        if include_links:
            data["links"] = [link.to_dict() for link in self.links]
        return data


@dataclass
class Visit:
    ip_hash: str
    page_url: str
    user_agent: str
    timestamp: float
    id: Optional[int] = None


@dataclass
class TopUrl:
    page_url: str
    visit_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"page_url": self.page_url, "visit_count": self.visit_count}


@dataclass(frozen=True)
class ContentFilter:
    """Predicate shared by every list / count query.

    ``None`` or an empty string means "no constraint" for each attribute.
    ``keyword`` matches ``name`` and ``genre`` matches ``genre``, both as
    case-insensitive substrings; ``type`` is an exact match.
    """

    type: Optional[str] = None
    keyword: Optional[str] = None
    genre: Optional[str] = None

    def matches(self, content: Content) -> bool:
        if self.type and content.type != self.type:
            return False
        if self.keyword and self.keyword.lower() not in (content.name or "").lower():
            return False
        if self.genre and self.genre.lower() not in (content.genre or "").lower():
            return False
        return True
