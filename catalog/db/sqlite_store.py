"""Relational content backend over the ``content`` and ``links`` tables."""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

from catalog.db.connection import register_functions
from catalog.db.models import CONTENT_FIELDS, Content, ContentFilter, Link
from catalog.db.store import ContentStore
from catalog.errors import NotFoundError, storage_errors


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_content(row: sqlite3.Row) -> Content:
    return Content(
        id=row["id"],
        name=row["name"],
        rating=row["rating"],
        genre=row["genre"],
        plot_summary=row["plot_summary"],
        poster_url=row["poster_url"],
        release_year=row["release_year"],
        duration=row["duration"],
        type=row["type"],
    )


def _row_to_link(row: sqlite3.Row) -> Link:
    return Link(
        id=row["id"],
        title=row["title"],
        link=row["link"],
        content_id=row["content_id"],
    )


def _where(flt: ContentFilter) -> tuple[str, list[Any]]:
    """Translate a :class:`ContentFilter` into a WHERE clause + params."""
    clauses: list[str] = []
    params: list[Any] = []
    if flt.type:
        clauses.append("type = ?")
        params.append(flt.type)
    if flt.keyword:
        clauses.append("instr(py_lower(name), py_lower(?)) > 0")
        params.append(flt.keyword)
    if flt.genre:
        clauses.append("instr(py_lower(genre), py_lower(?)) > 0")
        params.append(flt.genre)
    if not clauses:
        return "", params
    return "WHERE " + " AND ".join(clauses), params


_INSERT_CONTENT = (
    f"INSERT INTO content ({', '.join(CONTENT_FIELDS)}) "
    f"VALUES ({', '.join('?' for _ in CONTENT_FIELDS)})"
)
_UPDATE_CONTENT = (
    f"UPDATE content SET {', '.join(f'{col} = ?' for col in CONTENT_FIELDS)} "
    "WHERE id = ?"
)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class SqliteContentStore(ContentStore):
    """Content store backed by an open SQLite connection.

    The connection must already carry the schema (see
    :func:`catalog.db.migrations.init_db`).  Link cascade is enforced by the
    ``ON DELETE CASCADE`` foreign key and by an explicit delete inside the
    same transaction, so it holds even when ``foreign_keys`` is off.
    """

    def __init__(self, conn: sqlite3.Connection, max_page_size: Optional[int] = None) -> None:
        self.conn = conn
        register_functions(conn)
        if max_page_size is not None:
            self.max_page_size = max_page_size

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------
    @storage_errors
    def _select(self, flt: ContentFilter, limit: int, offset: int) -> list[Content]:
        where, params = _where(flt)
        rows = self.conn.execute(
            f"SELECT * FROM content {where} ORDER BY id DESC LIMIT ? OFFSET ?",  # noqa: S608
            [*params, limit, offset],
        ).fetchall()
        return [_row_to_content(r) for r in rows]

    @storage_errors
    def _count(self, flt: ContentFilter) -> int:
        where, params = _where(flt)
        row = self.conn.execute(
            f"SELECT COUNT(*) FROM content {where}", params  # noqa: S608
        ).fetchone()
        return row[0]

    @storage_errors
    def _get(self, content_id: int) -> Optional[Content]:
        row = self.conn.execute(
            "SELECT * FROM content WHERE id = ?", (content_id,)
        ).fetchone()
        return _row_to_content(row) if row else None

    @storage_errors
    def list_links(self, content_id: int) -> list[Link]:
        rows = self.conn.execute(
            "SELECT * FROM links WHERE content_id = ? ORDER BY id ASC",
            (content_id,),
        ).fetchall()
        return [_row_to_link(r) for r in rows]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    @storage_errors
    def save(self, content: Content) -> Content:
        """Insert or replace *content*.

        New rows get the next AUTOINCREMENT id and their ``links`` inserted in
        the same transaction.  Updates rewrite every schema column and leave
        links alone.

        Raises:
            NotFoundError: If ``content.id`` is set but no such row exists.
        """
        if content.id is not None:
            with self.conn:
                cur = self.conn.execute(
                    _UPDATE_CONTENT, (*content.row_values(), content.id)
                )
            if cur.rowcount == 0:
                raise NotFoundError(f"Content not found: {content.id!r}")
            return self._get(content.id)  # type: ignore[return-value]

        with self.conn:
            cur = self.conn.execute(_INSERT_CONTENT, content.row_values())
            new_id = cur.lastrowid
            for link in content.links or []:
                self.conn.execute(
                    "INSERT INTO links (title, link, content_id) VALUES (?, ?, ?)",
                    (link.title, link.link, new_id),
                )
        return self._get(new_id)  # type: ignore[arg-type,return-value]

    @storage_errors
    def delete_by_id(self, content_id: int) -> bool:
        with self.conn:
            self.conn.execute("DELETE FROM links WHERE content_id = ?", (content_id,))
            cur = self.conn.execute("DELETE FROM content WHERE id = ?", (content_id,))
        return cur.rowcount > 0

    @storage_errors
    def add_link(self, content_id: int, link: Link) -> Link:
        """Insert *link* under *content_id*.

        Raises:
            NotFoundError: If the content does not exist.
        """
        if self._get(content_id) is None:
            raise NotFoundError(f"Content not found: {content_id!r}")
        with self.conn:
            cur = self.conn.execute(
                "INSERT INTO links (title, link, content_id) VALUES (?, ?, ?)",
                (link.title, link.link, content_id),
            )
        return Link(id=cur.lastrowid, title=link.title, link=link.link, content_id=content_id)

    @storage_errors
    def delete_link(self, content_id: int, link_id: int) -> bool:
        with self.conn:
            cur = self.conn.execute(
                "DELETE FROM links WHERE id = ? AND content_id = ?",
                (link_id, content_id),
            )
        return cur.rowcount > 0
