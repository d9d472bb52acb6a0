"""Content commands: list, show, import and delete catalogue entries."""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer

from catalog.config import settings
from catalog.db import ContentStore, get_connection, init_db, open_content_store
from catalog.db.models import Content, ContentFilter, Link
from catalog.errors import CatalogError

content_app = typer.Typer(help="Browse and edit catalogue content.", no_args_is_help=True)


@contextmanager
def open_store() -> Iterator[ContentStore]:
    """Open the configured content store for the duration of a command."""
    conn = get_connection()
    init_db(conn)
    store = open_content_store(settings, conn)
    try:
        yield store
    finally:
        store.close()
        conn.close()


def _content_from_json(data: dict) -> Content:
    return Content(
        name=data["name"],
        type=str(data["type"]).upper(),
        rating=data.get("rating"),
        genre=data.get("genre", ""),
        plot_summary=data.get("plotSummary", data.get("plot_summary", "")),
        poster_url=data.get("posterUrl", data.get("poster_url", "")),
        release_year=data.get("releaseYear", data.get("release_year")),
        duration=data.get("duration", ""),
        links=[Link(title=lk.get("title", ""), link=lk["link"]) for lk in data.get("links", [])],
    )


@content_app.command("list")
def content_list(
    type: Optional[str] = typer.Option(None, "--type", help="MOVIE or WEBSERIES."),
    keyword: Optional[str] = typer.Option(None, help="Substring of the name."),
    genre: Optional[str] = typer.Option(None, help="Substring of the genre."),
    page: int = typer.Option(0, help="Zero-based page number."),
    size: int = typer.Option(10, help="Page size."),
) -> None:
    """List content, newest first."""
    flt = ContentFilter(type=type.upper() if type else None, keyword=keyword, genre=genre)
    with open_store() as store:
        rows = store.query(flt, page, size)
    if not rows:
        typer.echo("[content list] No content found.")
        return
    for c in rows:
        typer.echo(f"  {c.id:>5}  [{c.type}]  {c.name!r}  {c.genre}")


@content_app.command("show")
def content_show(content_id: int = typer.Argument(..., help="Content id.")) -> None:
    """Print one content row and its links as JSON."""
    with open_store() as store:
        content = store.find_by_id(content_id)
    if content is None:
        typer.echo(f"[content show] Content not found: {content_id}")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(content.to_dict(), indent=2))


@content_app.command("import")
def content_import(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file: object or list."),
) -> None:
    """Create content rows (with links) from a JSON file, in file order."""
    data = json.loads(path.read_text(encoding="utf-8"))
    items = data if isinstance(data, list) else [data]
    try:
        contents = [_content_from_json(item) for item in items]
    except (KeyError, TypeError, AttributeError) as exc:
        typer.echo(f"[content import] Malformed entry: {exc}")
        raise typer.Exit(code=1)

    with open_store() as store:
        try:
            saved = store.save_batch(contents)
        except CatalogError as exc:
            typer.echo(f"[content import] Failed: {exc}")
            raise typer.Exit(code=1)
    for c in saved:
        typer.echo(f"[content import] Created {c.id}  {c.name!r}")


@content_app.command("delete")
def content_delete(content_id: int = typer.Argument(..., help="Content id.")) -> None:
    """Delete a content row together with its links."""
    with open_store() as store:
        removed = store.delete_by_id(content_id)
    if not removed:
        typer.echo(f"[content delete] Content not found: {content_id}")
        raise typer.Exit(code=1)
    typer.echo(f"[content delete] Deleted {content_id}")
