"""SQLite connection factory.

Usage::

    from catalog.db.connection import get_connection

    with get_connection() as conn:
        cursor = conn.execute("SELECT 1")
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from catalog.config import settings


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Open and configure a SQLite connection.

    Steps performed on every new connection:
    1. Enable ``PRAGMA foreign_keys = ON`` so link rows cascade with content.
    2. Switch to WAL journal mode for concurrent readers.
    3. Register the SQL helper functions (see :func:`register_functions`).

    Args:
        db_path: Override the DB path.  Defaults to ``settings.db_path``.

    Returns:
        A configured :class:`sqlite3.Connection` with ``row_factory`` set to
        :class:`sqlite3.Row` so columns can be accessed by name.
    """
    path = db_path or settings.db_path

    # Create parent directory if needed (no-op for `:memory:`)
    if str(path) != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path), check_same_thread=False)
    conn.row_factory = sqlite3.Row

    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    register_functions(conn)

    return conn


def _py_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else None


def register_functions(conn: sqlite3.Connection) -> None:
    """Add ``py_lower(text)``, a full Unicode lower-casing function.

    SQLite's built-in ``LOWER`` only folds ASCII letters.
    """
    conn.create_function("py_lower", 1, _py_lower, deterministic=True)
