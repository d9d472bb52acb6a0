"""Database initialisation.

``init_db(conn)`` is idempotent, safe to call on an existing database.
"""

from __future__ import annotations

import sqlite3

from catalog.config import settings


def init_db(conn: sqlite3.Connection) -> None:
    """Create the content, links and visits tables plus their indexes.

    Every statement in ``schema.sql`` uses ``IF NOT EXISTS``, so calling this
    on a populated database leaves its rows untouched.
    """
    conn.executescript(settings.schema_path.read_text(encoding="utf-8"))
