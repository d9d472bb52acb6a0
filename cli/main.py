"""Catalog Hub CLI, entry-point for all backend operations.

Usage:
    catalog --help

Sub-command groups:
    db       → schema initialisation
    content  → list / show / import / delete catalogue entries
    visits   → analytics summary, bulk delete
    token    → encode / decode download tokens
    serve    → run the HTTP API with uvicorn
"""

from __future__ import annotations

import json

import typer

from catalog.config import settings
from catalog.db import get_connection, init_db
from catalog.errors import ValidationError
from catalog.logging_setup import configure_logging
from catalog.tokens import build_file_link, decode_token, encode_token

from cli.commands.content import content_app
from cli.commands.visits import visits_app

app = typer.Typer(
    name="catalog",
    help="Catalog Hub backend CLI.",
    no_args_is_help=True,
)
app.add_typer(content_app, name="content")
app.add_typer(visits_app, name="visits")


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Root log level."),
) -> None:
    configure_logging(log_level)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Token commands
# ---------------------------------------------------------------------------
token_app = typer.Typer(help="Download tokens.", no_args_is_help=True)
app.add_typer(token_app, name="token")


@token_app.command("encode")
def token_encode(content_id: int = typer.Argument(..., help="Content id.")) -> None:
    """Print the download token for a content id."""
    typer.echo(encode_token({"id": content_id}))


@token_app.command("decode")
def token_decode(token: str = typer.Argument(..., help="Token to decode.")) -> None:
    """Print a token's payload and the file link it resolves to."""
    try:
        payload = decode_token(token)
    except ValidationError as exc:
        typer.echo(f"[token decode] {exc}")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(payload))
    typer.echo(build_file_link(payload["id"], settings.app_prefix_url, settings.app_suffix_url))


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(3000, help="Bind port."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("catalog.api.app:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
