"""Tests for the Typer CLI."""

import json

import pytest
from typer.testing import CliRunner

from catalog.db import get_connection, init_db, visits
from cli.main import app

runner = CliRunner()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Point the CLI at a fresh SQLite workspace for each test."""
    monkeypatch.setattr("catalog.config.settings.workspace_dir", tmp_path)
    monkeypatch.setattr("catalog.config.settings.backend", "sqlite")
    return tmp_path


def test_db_init(workspace):
    result = runner.invoke(app, ["db", "init"])
    assert result.exit_code == 0
    assert "Database ready" in result.stdout
    assert (workspace / "catalog.db").exists()


def test_content_import_list_show_delete(workspace):
    data = [
        {"name": "Heat", "type": "movie", "genre": "Crime"},
        {"name": "Dark", "type": "WEBSERIES", "genre": "Sci-Fi",
         "links": [{"title": "S1", "link": "https://x/s1"}]},
    ]
    source = workspace / "import.json"
    source.write_text(json.dumps(data), encoding="utf-8")

    result = runner.invoke(app, ["content", "import", str(source)])
    assert result.exit_code == 0, result.stdout
    assert "Created 1" in result.stdout
    assert "Created 2" in result.stdout

    result = runner.invoke(app, ["content", "list", "--type", "webseries"])
    assert result.exit_code == 0
    assert "Dark" in result.stdout
    assert "Heat" not in result.stdout

    result = runner.invoke(app, ["content", "show", "2"])
    assert result.exit_code == 0
    shown = json.loads(result.stdout)
    assert shown["links"][0]["title"] == "S1"

    result = runner.invoke(app, ["content", "delete", "2"])
    assert result.exit_code == 0
    result = runner.invoke(app, ["content", "show", "2"])
    assert result.exit_code == 1


def test_content_import_rejects_malformed_entries(workspace):
    source = workspace / "bad.json"
    source.write_text(json.dumps([{"genre": "no name"}]), encoding="utf-8")
    result = runner.invoke(app, ["content", "import", str(source)])
    assert result.exit_code == 1
    assert "Malformed entry" in result.stdout


def test_token_encode_decode(workspace):
    result = runner.invoke(app, ["token", "encode", "42"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "eyJpZCI6NDJ9"

    result = runner.invoke(app, ["token", "decode", "eyJpZCI6NDJ9"])
    assert result.exit_code == 0
    assert '{"id": 42}' in result.stdout


def test_token_decode_invalid(workspace):
    result = runner.invoke(app, ["token", "decode", "not-a-token!"])
    assert result.exit_code == 1


def test_visits_stats_and_clear(workspace):
    conn = get_connection()
    init_db(conn)
    visits.record_visit(conn, "movie-detail-Heat", "127.0.0.1", "cli-test")
    conn.close()

    result = runner.invoke(app, ["visits", "stats"])
    assert result.exit_code == 0
    assert "movie-detail-Heat" in result.stdout

    result = runner.invoke(app, ["visits", "clear"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["visits", "clear", "--yes"])
    assert result.exit_code == 0
    assert "Deleted 1 visits" in result.stdout
