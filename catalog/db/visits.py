"""Visit log and the analytics computed over it.

All day arithmetic is done in **UTC**: ``today`` starts at UTC midnight and
``daily_series`` buckets rows by their UTC calendar date (``YYYY-MM-DD``).
Timestamps are stored as Unix epoch seconds (float).
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import sqlite3
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Union

from catalog.db.models import TopUrl, Visit
from catalog.errors import storage_errors

logger = logging.getLogger(__name__)

Instant = Union[datetime, float, int]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(timezone.utc)


def _epoch(instant: Instant) -> float:
    """Convert a datetime (naive = UTC) or epoch number to epoch seconds."""
    if isinstance(instant, datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.timestamp()
    return float(instant)


def _utc_midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def hash_ip(ip: Optional[str], salt: str = "") -> str:
    """One-way digest of a client IP.

    Plain SHA-256 hex when *salt* is empty, HMAC-SHA-256 keyed with *salt*
    otherwise.
    """
    raw = (ip or "").encode("utf-8")
    if salt:
        return hmac.new(salt.encode("utf-8"), raw, hashlib.sha256).hexdigest()
    return hashlib.sha256(raw).hexdigest()


# ---------------------------------------------------------------------------
# Recording
# ---------------------------------------------------------------------------

def record_visit(
    conn: sqlite3.Connection,
    page_url: str,
    ip: Optional[str],
    user_agent: Optional[str] = None,
    salt: str = "",
    now: Optional[Instant] = None,
) -> bool:
    """Append one visit row.

    Never raises: tracking must not break the request that triggered it.
    Returns whether the row was written.
    """
    try:
        visit = Visit(
            ip_hash=hash_ip(ip, salt),
            page_url=page_url,
            user_agent=user_agent or "",
            timestamp=_epoch(now if now is not None else _now()),
        )
        with conn:
            conn.execute(
                """
                INSERT INTO visits (ip_hash, page_url, user_agent, timestamp)
                VALUES (?, ?, ?, ?)
                """,
                (visit.ip_hash, visit.page_url, visit.user_agent, visit.timestamp),
            )
    except Exception:
        logger.warning("Error tracking visit for %r", page_url, exc_info=True)
        return False
    return True


@storage_errors
def delete_all_visits(conn: sqlite3.Connection) -> int:
    """Remove every visit row; returns how many were deleted."""
    with conn:
        cur = conn.execute("DELETE FROM visits")
    logger.info("Deleted %d visits", cur.rowcount)
    return cur.rowcount


# ---------------------------------------------------------------------------
# Counts
# ---------------------------------------------------------------------------

@storage_errors
def count_since(conn: sqlite3.Connection, instant: Instant) -> int:
    """Visits with ``timestamp >= instant``."""
    row = conn.execute(
        "SELECT COUNT(*) FROM visits WHERE timestamp >= ?", (_epoch(instant),)
    ).fetchone()
    return row[0]


@storage_errors
def count_after(conn: sqlite3.Connection, instant: Instant) -> int:
    """Visits with ``timestamp > instant`` (strict)."""
    row = conn.execute(
        "SELECT COUNT(*) FROM visits WHERE timestamp > ?", (_epoch(instant),)
    ).fetchone()
    return row[0]


def count_today(conn: sqlite3.Connection, now: Optional[datetime] = None) -> int:
    now = now or _now()
    return count_after(conn, _utc_midnight(now.astimezone(timezone.utc).date()))


def count_last_7_days(conn: sqlite3.Connection, now: Optional[datetime] = None) -> int:
    return count_after(conn, (now or _now()) - timedelta(days=7))


def count_last_30_days(conn: sqlite3.Connection, now: Optional[datetime] = None) -> int:
    return count_after(conn, (now or _now()) - timedelta(days=30))


@storage_errors
def top_urls(conn: sqlite3.Connection, limit: int = 20, offset: int = 0) -> list[TopUrl]:
    """Most visited ``page_url`` values, count descending then URL ascending."""
    rows = conn.execute(
        """
        SELECT page_url, COUNT(*) AS visit_count
        FROM   visits
        GROUP  BY page_url
        ORDER  BY visit_count DESC, page_url ASC
        LIMIT  ? OFFSET ?
        """,
        (limit, offset),
    ).fetchall()
    return [TopUrl(page_url=r["page_url"], visit_count=r["visit_count"]) for r in rows]


# ---------------------------------------------------------------------------
# Day-bucketed series
# ---------------------------------------------------------------------------

@storage_errors
def count_per_day(
    conn: sqlite3.Connection, start: Instant, end: Instant
) -> dict[str, int]:
    """Visit counts keyed by UTC ``YYYY-MM-DD`` for ``start <= ts < end``.

    Only days with at least one visit appear in the result.
    """
    rows = conn.execute(
        """
        SELECT date(timestamp, 'unixepoch') AS visit_date, COUNT(*) AS visit_count
        FROM   visits
        WHERE  timestamp >= ? AND timestamp < ?
        GROUP  BY visit_date
        ORDER  BY visit_date ASC
        """,
        (_epoch(start), _epoch(end)),
    ).fetchall()
    return {r["visit_date"]: r["visit_count"] for r in rows}


def daily_series(
    conn: sqlite3.Connection, days: int, now: Optional[datetime] = None
) -> list[int]:
    """Counts for *days* consecutive UTC calendar days ending today.

    The list is oldest first and has exactly *days* entries; days without
    visits are 0.  ``days <= 0`` yields an empty list.
    """
    if days <= 0:
        return []
    today = (now or _now()).astimezone(timezone.utc).date()
    first = today - timedelta(days=days - 1)
    counts = count_per_day(
        conn, _utc_midnight(first), _utc_midnight(today + timedelta(days=1))
    )
    keys = [(first + timedelta(days=i)).isoformat() for i in range(days)]
    return [counts.get(key, 0) for key in keys]


def visit_summary(
    conn: sqlite3.Connection, top_limit: int = 20, now: Optional[datetime] = None
) -> dict[str, Any]:
    """Everything the analytics dashboard shows, in one payload."""
    now = now or _now()
    top = top_urls(conn, limit=top_limit)
    return {
        "dailyCounts": count_today(conn, now),
        "weeklyCounts": count_last_7_days(conn, now),
        "monthlyCounts": count_last_30_days(conn, now),
        "weeklyVisits": daily_series(conn, 7, now),
        "monthlyVisits": daily_series(conn, 30, now),
        "topUrls": [t.page_url for t in top],
        "topCounts": [t.visit_count for t in top],
    }
