"""Database layer package.

Public re-exports so callers can write::

    from catalog.db import get_connection, init_db, open_content_store
    from catalog.db import visits
"""

from __future__ import annotations

import sqlite3

from catalog.config import Settings
from catalog.db.connection import get_connection
from catalog.db.csv_store import CsvContentStore
from catalog.db.migrations import init_db
from catalog.db.sqlite_store import SqliteContentStore
from catalog.db.store import ContentStore
from catalog.db import visits


def open_content_store(settings: Settings, conn: sqlite3.Connection) -> ContentStore:
    """Build the content backend named by ``settings.backend``.

    ``sqlite`` reuses *conn*; ``csv`` reads from ``settings.csv_dir``.

    Raises:
        ValueError: For an unknown backend name.
    """
    if settings.backend == "sqlite":
        return SqliteContentStore(conn, max_page_size=settings.max_page_size)
    if settings.backend == "csv":
        store = CsvContentStore(settings.csv_dir, max_page_size=settings.max_page_size)
        store.load()
        return store
    raise ValueError(f"Unknown content backend: {settings.backend!r}")


__all__ = [
    "ContentStore",
    "CsvContentStore",
    "SqliteContentStore",
    "get_connection",
    "init_db",
    "open_content_store",
    "visits",
]
