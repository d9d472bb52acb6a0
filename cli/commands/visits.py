"""Visit analytics commands."""

from __future__ import annotations

import typer

from catalog.config import settings
from catalog.db import get_connection, init_db, visits

visits_app = typer.Typer(help="Visit analytics.", no_args_is_help=True)


@visits_app.command("stats")
def visits_stats() -> None:
    """Print rolling counts, the 7-day series and the top pages."""
    conn = get_connection()
    init_db(conn)
    try:
        summary = visits.visit_summary(conn, top_limit=settings.top_urls_limit)
    finally:
        conn.close()

    typer.echo(f"Today      : {summary['dailyCounts']}")
    typer.echo(f"Last 7 days: {summary['weeklyCounts']}")
    typer.echo(f"Last 30 days: {summary['monthlyCounts']}")
    typer.echo(f"Per day (7): {' '.join(str(n) for n in summary['weeklyVisits'])}")
    for url, count in zip(summary["topUrls"], summary["topCounts"]):
        typer.echo(f"  {count:>6}  {url}")


@visits_app.command("clear")
def visits_clear(
    yes: bool = typer.Option(False, "--yes", help="Confirm deleting every visit."),
) -> None:
    """Delete all recorded visits."""
    if not yes:
        typer.echo("[visits clear] Refusing to delete without --yes.")
        raise typer.Exit(code=1)
    conn = get_connection()
    init_db(conn)
    try:
        removed = visits.delete_all_visits(conn)
    finally:
        conn.close()
    typer.echo(f"[visits clear] Deleted {removed} visits.")
