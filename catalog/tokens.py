"""Download tokens: base64-encoded JSON objects carrying a content ``id``.

    >>> token = encode_token({"id": 42})
    >>> decode_token(token)["id"]
    42
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from catalog.errors import ValidationError


def encode_token(payload: dict[str, Any]) -> str:
    """Standard base64 of the compact JSON encoding of *payload*."""
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_token(token: str) -> dict[str, Any]:
    """Decode a token back into its JSON object.

    Both the standard and the URL-safe alphabets are accepted, with or
    without ``=`` padding.

    Raises:
        ValidationError: For bad base64, non-UTF-8 bytes, invalid JSON, a
            non-object payload or a missing ``id``.
    """
    if not token or not token.strip():
        raise ValidationError("Missing token.")
    text = token.strip().replace("-", "+").replace("_", "/")
    text += "=" * (-len(text) % 4)
    try:
        raw = base64.b64decode(text, validate=True)
        obj = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError("Invalid token.") from exc
    if not isinstance(obj, dict):
        raise ValidationError("Invalid token.")
    if obj.get("id") in (None, ""):
        raise ValidationError("Token missing ID.")
    return obj


def build_file_link(content_id: Any, prefix: str = "", suffix: str = "") -> str:
    """File URL for a content id: ``{prefix}{id}{suffix}``."""
    return f"{prefix}{content_id}{suffix}"
