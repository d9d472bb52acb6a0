"""Download-token redirector.

A token is the base64 encoding of a JSON object with an ``id`` naming a
content row (see :mod:`catalog.tokens`).

Routes
------
GET /file/choose/{token}     Content (with links) the token points at
GET /file/getting?token=     Plain-text file link for the token's id
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from catalog.errors import ValidationError
from catalog.tokens import build_file_link, decode_token

router = APIRouter()


def _content_id(payload: dict[str, Any]) -> int:
    try:
        return int(payload["id"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError("Token id is not a content id.") from exc


@router.get("/choose/{token}")
def choose(token: str, request: Request) -> dict[str, Any]:
    content_id = _content_id(decode_token(token))
    content = request.app.state.store.find_by_id(content_id)
    if content is None:
        raise HTTPException(status_code=404, detail=f"Content not found for ID: {content_id}")
    return {"content": content.to_dict(), "token": token}


@router.get("/getting", response_class=PlainTextResponse)
def getting(request: Request, token: Optional[str] = None) -> str:
    if not token:
        raise ValidationError("Missing token.")
    payload = decode_token(token)
    cfg = request.app.state.settings
    return build_file_link(_content_id(payload), cfg.app_prefix_url, cfg.app_suffix_url)
