"""Visit tracking and analytics endpoints.

Routes
------
POST /visits/track        Record a visit for {"pageUrl": ...}
POST /visits/deleteAll    Remove every recorded visit
GET  /visits/today        Visits since UTC midnight
GET  /visits/weekly       Visits in the last 7×24h
GET  /visits/monthly      Visits in the last 30×24h
GET  /visits/top-urls     Most visited page labels
GET  /visits/last7days    Per-day counts, oldest first, zero-filled
GET  /visits/last30days   Per-day counts, oldest first, zero-filled
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from catalog.db import visits
from catalog.errors import ValidationError

router = APIRouter()


class TrackRequest(BaseModel):
    pageUrl: Optional[str] = None


@router.post("/track")
def track(body: TrackRequest, request: Request) -> dict[str, str]:
    if not body.pageUrl:
        raise ValidationError("pageUrl is required")
    visits.record_visit(
        request.app.state.db,
        body.pageUrl,
        request.client.host if request.client else None,
        request.headers.get("user-agent"),
        salt=request.app.state.settings.visit_ip_salt,
    )
    return {"message": "Visit tracked!"}


@router.post("/deleteAll")
def delete_all(request: Request) -> dict[str, Any]:
    removed = visits.delete_all_visits(request.app.state.db)
    return {"message": "All visits deleted", "deleted": removed}


@router.get("/today")
def today(request: Request) -> dict[str, int]:
    return {"count": visits.count_today(request.app.state.db)}


@router.get("/weekly")
def weekly(request: Request) -> dict[str, int]:
    return {"count": visits.count_last_7_days(request.app.state.db)}


@router.get("/monthly")
def monthly(request: Request) -> dict[str, int]:
    return {"count": visits.count_last_30_days(request.app.state.db)}


@router.get("/top-urls")
def top_urls(request: Request) -> list[dict[str, Any]]:
    limit = request.app.state.settings.top_urls_limit
    return [t.to_dict() for t in visits.top_urls(request.app.state.db, limit=limit)]


@router.get("/last7days")
def last_7_days(request: Request) -> list[int]:
    return visits.daily_series(request.app.state.db, 7)


@router.get("/last30days")
def last_30_days(request: Request) -> list[int]:
    return visits.daily_series(request.app.state.db, 30)
