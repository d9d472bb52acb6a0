"""Public catalogue endpoints.

Routes
------
GET /                          Latest movies (same as /movies)
GET /movies                    Movies, optional ?keyword= and ?page=
GET /webseries                 Web series, optional ?keyword= and ?page=
GET /movie/{id}/{slug}         Movie detail with links (records a visit)
GET /webseries/{id}/{slug}     Web-series detail with links (records a visit)
GET /genre/{genre}             Both types filtered by genre substring
GET /search                    Both types filtered by name keyword
GET /data/visits               Visit analytics dashboard payload
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request

from catalog.db import visits
from catalog.db.models import Content, ContentType
from catalog.db.pagination import page_index, total_pages
from catalog.db.store import ContentStore

router = APIRouter()

_LISTING_NAMES = {ContentType.MOVIE: "movies", ContentType.WEBSERIES: "webseries"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _listing(
    contents: list[Content],
    page: int,
    pages: int,
    content_type: str,
    **extra: Any,
) -> dict[str, Any]:
    return {
        "contents": [c.to_dict(include_links=False) for c in contents],
        "currentPage": page,
        "totalPages": pages,
        "contentType": content_type,
        **extra,
    }


def _typed_listing(
    request: Request, type: ContentType, page: Optional[str], keyword: Optional[str]
) -> dict[str, Any]:
    store: ContentStore = request.app.state.store
    size = request.app.state.settings.public_page_size
    index = page_index(page)
    keyword = (keyword or "").strip()

    if keyword:
        contents = store.search_by_type_and_keyword(type.value, keyword, index, size)
    else:
        contents = store.list_by_type(type.value, index, size)
    count = store.count_by_type_and_keyword(type.value, keyword)
    return _listing(
        contents,
        index,
        total_pages(count, size),
        _LISTING_NAMES[type],
        keyword=keyword,
    )


def _detail(request: Request, content_id: int, type: ContentType) -> dict[str, Any]:
    store: ContentStore = request.app.state.store
    content = store.find_by_id_and_type(content_id, type.value)
    if content is None:
        raise HTTPException(status_code=404, detail="Content not found")

    visits.record_visit(
        request.app.state.db,
        f"movie-detail-{content.name}",
        request.client.host if request.client else None,
        request.headers.get("user-agent"),
        salt=request.app.state.settings.visit_ip_salt,
    )
    return content.to_dict()


def format_genre(genre: str) -> str:
    """Display form of a genre slug: ``"sci-fi"`` → ``"Sci Fi"``."""
    return " ".join(word.capitalize() for word in genre.replace("-", " ").split())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/")
@router.get("/movies")
def movies(request: Request, page: Optional[str] = None, keyword: Optional[str] = None) -> dict[str, Any]:
    return _typed_listing(request, ContentType.MOVIE, page, keyword)


@router.get("/webseries")
def webseries(request: Request, page: Optional[str] = None, keyword: Optional[str] = None) -> dict[str, Any]:
    return _typed_listing(request, ContentType.WEBSERIES, page, keyword)


@router.get("/movie/{content_id}/{slug}")
def movie_detail(content_id: int, slug: str, request: Request) -> dict[str, Any]:
    return _detail(request, content_id, ContentType.MOVIE)


@router.get("/webseries/{content_id}/{slug}")
def webseries_detail(content_id: int, slug: str, request: Request) -> dict[str, Any]:
    return _detail(request, content_id, ContentType.WEBSERIES)


@router.get("/genre/{genre}")
def by_genre(genre: str, request: Request, page: Optional[str] = None) -> dict[str, Any]:
    """Movies and web series whose genre contains *genre*."""
    store: ContentStore = request.app.state.store
    size = request.app.state.settings.public_page_size
    index = page_index(page)
    contents = store.list_by_genre(genre, index, size)
    count = store.count_by_genre(genre)
    return _listing(contents, index, total_pages(count, size), "all", genre=format_genre(genre))


@router.get("/search")
def search(request: Request, keyword: Optional[str] = None, page: Optional[str] = None) -> dict[str, Any]:
    """Search both types; each type contributes its own page of results."""
    store: ContentStore = request.app.state.store
    size = request.app.state.settings.public_page_size
    index = page_index(page)
    keyword = (keyword or "").strip()

    movie_page = store.search_by_type_and_keyword(ContentType.MOVIE.value, keyword, index, size)
    series_page = store.search_by_type_and_keyword(ContentType.WEBSERIES.value, keyword, index, size)
    count = store.count_by_type_and_keyword(
        ContentType.MOVIE.value, keyword
    ) + store.count_by_type_and_keyword(ContentType.WEBSERIES.value, keyword)
    return _listing(
        movie_page + series_page, index, total_pages(count, size), "all", keyword=keyword
    )


@router.get("/data/visits")
def visit_dashboard(request: Request) -> dict[str, Any]:
    return visits.visit_summary(
        request.app.state.db, top_limit=request.app.state.settings.top_urls_limit
    )
