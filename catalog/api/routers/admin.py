"""Admin CRUD endpoints for content and its download links.

Routes
------
GET    /admin/content                         List content (?keyword= &type= &page= &size=)
POST   /admin/content                         Create a content row (links optional)
POST   /admin/contents/all                    Create many content rows in order
GET    /admin/content/{content_id}            Fetch one content row with links
PUT    /admin/content/{content_id}            Merge fields over the stored row and save
DELETE /admin/content/{content_id}            Delete a content row (links cascade)
POST   /admin/content/{content_id}/links      Attach a link
DELETE /admin/content/{content_id}/links/{link_id}  Remove a link
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from catalog.db.models import Content, ContentType, Link
from catalog.db.store import ContentStore

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class LinkCreate(BaseModel):
    title: str = ""
    link: str


class ContentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: ContentType
    rating: Optional[float] = None
    genre: str = ""
    plot_summary: str = Field("", alias="plotSummary")
    poster_url: str = Field("", alias="posterUrl")
    release_year: Optional[int] = Field(None, alias="releaseYear")
    duration: str = ""
    links: list[LinkCreate] = Field(default_factory=list)

    def to_content(self, content_id: Optional[int] = None) -> Content:
        return Content(
            id=content_id,
            name=self.name,
            type=self.type.value,
            rating=self.rating,
            genre=self.genre,
            plot_summary=self.plot_summary,
            poster_url=self.poster_url,
            release_year=self.release_year,
            duration=self.duration,
            links=[Link(title=lk.title, link=lk.link) for lk in self.links],
        )


class ContentUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    type: Optional[ContentType] = None
    rating: Optional[float] = None
    genre: Optional[str] = None
    plot_summary: Optional[str] = Field(None, alias="plotSummary")
    poster_url: Optional[str] = Field(None, alias="posterUrl")
    release_year: Optional[int] = Field(None, alias="releaseYear")
    duration: Optional[str] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _store(request: Request) -> ContentStore:
    return request.app.state.store


def _require(store: ContentStore, content_id: int) -> Content:
    content = store.find_by_id(content_id)
    if content is None:
        raise HTTPException(status_code=404, detail="Content not found")
    return content


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/content")
def list_content(
    request: Request,
    keyword: Optional[str] = None,
    type: Optional[str] = None,
    page: Optional[str] = "0",
    size: Optional[str] = "10",
) -> list[dict[str, Any]]:
    """Dispatch to the matching list query based on which filters are set."""
    store = _store(request)
    if keyword and type:
        results = store.search_by_type_and_keyword(type, keyword, page, size)
    elif type:
        results = store.list_by_type(type, page, size)
    elif keyword:
        results = store.search_by_keyword(keyword, page, size)
    else:
        results = store.list_all(page, size)
    return [c.to_dict(include_links=False) for c in results]


@router.post("/content", status_code=201)
def create_content(body: ContentCreate, request: Request) -> dict[str, Any]:
    """Create one content row together with any links in the body."""
    saved = _store(request).save(body.to_content())
    return saved.to_dict(include_links=False)


@router.post("/contents/all")
def create_contents(body: list[ContentCreate], request: Request) -> list[dict[str, Any]]:
    """Create several rows in input order (not all-or-nothing)."""
    if not body:
        raise HTTPException(status_code=400, detail="No content provided")
    saved = _store(request).save_batch(item.to_content() for item in body)
    return [c.to_dict(include_links=False) for c in saved]


@router.get("/content/{content_id}")
def get_content(content_id: int, request: Request) -> dict[str, Any]:
    return _require(_store(request), content_id).to_dict()


@router.put("/content/{content_id}")
def update_content(content_id: int, body: ContentUpdate, request: Request) -> dict[str, Any]:
    """Merge the supplied fields over the stored row, then save it."""
    store = _store(request)
    existing = _require(store, content_id)
    merged = existing.to_dict(include_links=False)
    merged.update(body.model_dump(by_alias=True, exclude_unset=True, exclude_none=True))
    updated = ContentCreate.model_validate(merged)
    saved = store.save(updated.to_content(content_id))
    return saved.to_dict(include_links=False)


@router.delete("/content/{content_id}")
def delete_content(content_id: int, request: Request) -> Response:
    """Delete a content row and every link attached to it."""
    if not _store(request).delete_by_id(content_id):
        raise HTTPException(status_code=404, detail="Content not found")
    return Response(status_code=204)


@router.post("/content/{content_id}/links", status_code=201)
def add_link(content_id: int, body: LinkCreate, request: Request) -> dict[str, Any]:
    link = _store(request).add_link(content_id, Link(title=body.title, link=body.link))
    return link.to_dict()


@router.delete("/content/{content_id}/links/{link_id}")
def delete_link(content_id: int, link_id: int, request: Request) -> Response:
    if not _store(request).delete_link(content_id, link_id):
        raise HTTPException(status_code=404, detail="Link not found")
    return Response(status_code=204)
