"""Content store contract tests, run against both backends.

The SQLite store uses an in-memory database; the CSV store writes into a
per-test ``tmp_path`` directory.
"""

from __future__ import annotations

import dataclasses
from typing import Generator

import pytest

from catalog.db.connection import get_connection
from catalog.db.csv_store import CsvContentStore
from catalog.db.migrations import init_db
from catalog.db.models import Content, ContentFilter, Link
from catalog.db.sqlite_store import SqliteContentStore
from catalog.db.store import ContentStore
from catalog.errors import NotFoundError, StorageError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(params=["sqlite", "csv"])
def store(request, tmp_path) -> Generator[ContentStore, None, None]:
    if request.param == "sqlite":
        conn = get_connection(db_path=":memory:")  # type: ignore[arg-type]
        init_db(conn)
        yield SqliteContentStore(conn)
        conn.close()
    else:
        yield CsvContentStore(tmp_path / "data")


def _content(name: str, type: str = "MOVIE", genre: str = "Action", **kwargs) -> Content:
    return Content(name=name, type=type, genre=genre, **kwargs)


@pytest.fixture()
def catalog(store: ContentStore) -> ContentStore:
    """A store pre-loaded with a small mixed catalogue."""
    store.save(_content("The Matrix", genre="Action, Sci-Fi"))
    store.save(_content("Dark", type="WEBSERIES", genre="Sci-Fi Thriller"))
    store.save(_content("Matrix Reloaded", genre="Action Sci-Fi"))
    store.save(_content("The Office", type="WEBSERIES", genre="Comedy"))
    store.save(_content("Heat", genre="Crime, Drama"))
    return store


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

class TestQueries:
    def test_list_all_newest_first(self, catalog: ContentStore) -> None:
        rows = catalog.list_all(0, 10)
        ids = [c.id for c in rows]
        assert ids == sorted(ids, reverse=True)
        assert len(rows) == 5

    def test_list_by_type(self, catalog: ContentStore) -> None:
        rows = catalog.list_by_type("WEBSERIES", 0, 10)
        assert {c.name for c in rows} == {"Dark", "The Office"}
        assert all(c.type == "WEBSERIES" for c in rows)

    def test_count_by_type_matches_unpaged_list(self, catalog: ContentStore) -> None:
        for type in ("MOVIE", "WEBSERIES", "OTHER"):
            assert catalog.count_by_type(type) == len(catalog.list_by_type(type, 0, 100))

    def test_keyword_is_case_insensitive(self, catalog: ContentStore) -> None:
        names = [c.name for c in catalog.search_by_keyword("MATRIX", 0, 10)]
        assert names == ["Matrix Reloaded", "The Matrix"]

    @pytest.mark.parametrize(
        "name,genre,keyword,genre_query",
        [
            ("Élite", "Драма", "élite", "драма"),
            ("ÜBER STRASSE", "Ação", "über", "AÇÃO"),
        ],
    )
    def test_non_ascii_matching_is_case_insensitive(
        self, store: ContentStore, name: str, genre: str, keyword: str, genre_query: str
    ) -> None:
        store.save(_content(name, genre=genre))
        store.save(_content("Other", genre="Comedy"))
        assert [c.name for c in store.search_by_keyword(keyword, 0, 10)] == [name]
        assert store.count_by_keyword(keyword) == 1
        assert [c.name for c in store.list_by_genre(genre_query, 0, 10)] == [name]
        assert store.count_by_genre_and_type(genre_query, "MOVIE") == 1

    def test_empty_keyword_matches_everything(self, catalog: ContentStore) -> None:
        assert catalog.search_by_keyword("", 0, 10) == catalog.list_all(0, 10)
        assert catalog.count_by_type_and_keyword("MOVIE", "") == catalog.count_by_type("MOVIE")

    def test_type_and_keyword(self, catalog: ContentStore) -> None:
        rows = catalog.search_by_type_and_keyword("MOVIE", "the", 0, 10)
        assert [c.name for c in rows] == ["The Matrix"]
        assert catalog.count_by_type_and_keyword("WEBSERIES", "the") == 1

    def test_genre_is_substring_match(self, catalog: ContentStore) -> None:
        rows = catalog.list_by_genre("sci", 0, 10)
        assert {c.name for c in rows} == {"The Matrix", "Dark", "Matrix Reloaded"}
        assert catalog.count_by_genre("sci") == 3

    def test_genre_and_type(self, catalog: ContentStore) -> None:
        rows = catalog.list_by_genre_and_type("sci-fi", "WEBSERIES", 0, 10)
        assert [c.name for c in rows] == ["Dark"]
        assert catalog.count_by_genre_and_type("sci-fi", "MOVIE") == 2

    def test_filtered_results_are_subset_of_list_all(self, catalog: ContentStore) -> None:
        everything = {c.id: c for c in catalog.list_all(0, 100)}
        flt = ContentFilter(type="MOVIE", keyword="a")
        rows = catalog.query(flt, 0, 100)
        assert rows
        for c in rows:
            assert c.id in everything
            assert flt.matches(c)
        assert [c.id for c in rows] == sorted((c.id for c in rows), reverse=True)

    def test_pages_do_not_overlap(self, catalog: ContentStore) -> None:
        first = catalog.list_all(0, 2)
        second = catalog.list_all(1, 2)
        assert len(first) == 2 and len(second) == 2
        assert not {c.id for c in first} & {c.id for c in second}

    def test_page_past_end_is_empty(self, catalog: ContentStore) -> None:
        assert catalog.list_all(50, 10) == []
        assert catalog.list_by_genre("sci", 9, 10) == []

    def test_page_size_is_clamped(self, catalog: ContentStore) -> None:
        catalog.max_page_size = 2
        assert len(catalog.list_all(0, 1000)) == 2

    def test_count_all(self, catalog: ContentStore) -> None:
        assert catalog.count_all() == 5
        assert catalog.count_by_keyword("matrix") == 2


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

class TestLookups:
    def test_find_by_id_attaches_links_in_id_order(self, store: ContentStore) -> None:
        saved = store.save(
            _content(
                "Dune",
                links=[Link(title="720p", link="https://x/720"), Link(title="1080p", link="https://x/1080")],
            )
        )
        found = store.find_by_id(saved.id)
        assert found is not None
        assert [lk.title for lk in found.links] == ["720p", "1080p"]
        assert all(lk.content_id == saved.id for lk in found.links)
        assert found.links[0].id < found.links[1].id

    def test_find_by_id_missing(self, store: ContentStore) -> None:
        assert store.find_by_id(999) is None

    def test_find_by_id_and_type(self, store: ContentStore) -> None:
        saved = store.save(_content("Dark", type="WEBSERIES"))
        assert store.find_by_id_and_type(saved.id, "WEBSERIES") is not None
        assert store.find_by_id_and_type(saved.id, "MOVIE") is None

    def test_save_round_trip(self, store: ContentStore) -> None:
        original = Content(
            name="Arrival",
            type="MOVIE",
            rating=7.9,
            genre="Drama, Sci-Fi",
            plot_summary="Linguist meets heptapods.",
            poster_url="https://img.example/arrival.jpg",
            release_year=2016,
            duration="1h 56m",
        )
        saved = store.save(original)
        found = store.find_by_id(saved.id)
        assert found is not None
        assert found == dataclasses.replace(original, id=saved.id)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

class TestMutations:
    def test_ids_are_monotonic(self, store: ContentStore) -> None:
        a = store.save(_content("A"))
        b = store.save(_content("B"))
        assert a.id == 1
        assert b.id == 2

    def test_ids_not_reused_after_delete(self, store: ContentStore) -> None:
        store.save(_content("A"))
        b = store.save(_content("B"))
        store.delete_by_id(b.id)
        c = store.save(_content("C"))
        assert c.id > b.id

    def test_update_replaces_row_and_keeps_links(self, store: ContentStore) -> None:
        saved = store.save(_content("Old", links=[Link(title="HD", link="https://x/hd")]))
        store.save(dataclasses.replace(saved, name="New", rating=9.0))
        found = store.find_by_id(saved.id)
        assert found is not None
        assert found.name == "New"
        assert found.rating == 9.0
        assert [lk.title for lk in found.links] == ["HD"]
        assert store.count_all() == 1

    def test_update_missing_id_raises(self, store: ContentStore) -> None:
        with pytest.raises(NotFoundError):
            store.save(_content("Ghost", id=404))

    def test_delete_cascades_links(self, store: ContentStore) -> None:
        saved = store.save(_content("Gone", links=[Link(title="a", link="https://x/a")]))
        keep = store.save(_content("Kept", links=[Link(title="b", link="https://x/b")]))
        assert store.delete_by_id(saved.id) is True
        assert store.find_by_id(saved.id) is None
        assert store.list_links(saved.id) == []
        assert len(store.list_links(keep.id)) == 1

    def test_delete_missing_reports_false(self, store: ContentStore) -> None:
        assert store.delete_by_id(12345) is False

    def test_add_then_delete_link(self, store: ContentStore) -> None:
        saved = store.save(_content("Linked"))
        link = store.add_link(saved.id, Link(title="4K", link="https://x/4k"))
        assert link.id is not None
        assert link.content_id == saved.id
        assert store.delete_link(saved.id, link.id) is True
        assert store.delete_link(saved.id, link.id) is False

    def test_delete_link_requires_matching_content(self, store: ContentStore) -> None:
        a = store.save(_content("A"))
        b = store.save(_content("B"))
        link = store.add_link(a.id, Link(title="x", link="https://x"))
        assert store.delete_link(b.id, link.id) is False
        assert len(store.list_links(a.id)) == 1

    def test_add_link_to_missing_content_raises(self, store: ContentStore) -> None:
        with pytest.raises(NotFoundError):
            store.add_link(77, Link(title="orphan", link="https://x"))

    def test_save_batch_keeps_input_order(self, store: ContentStore) -> None:
        saved = store.save_batch([_content("First"), _content("Second"), _content("Third")])
        assert [c.name for c in saved] == ["First", "Second", "Third"]
        assert [c.id for c in saved] == sorted(c.id for c in saved)


class TestSqliteBatch:
    def test_save_batch_is_not_transactional(self) -> None:
        conn = get_connection(db_path=":memory:")  # type: ignore[arg-type]
        init_db(conn)
        store = SqliteContentStore(conn)
        with pytest.raises(StorageError):
            store.save_batch([_content("Kept"), Content(name=None, type="MOVIE")])  # type: ignore[arg-type]
        assert [c.name for c in store.list_all()] == ["Kept"]
        conn.close()


def test_init_db_is_idempotent_and_keeps_rows() -> None:
    conn = get_connection(db_path=":memory:")  # type: ignore[arg-type]
    init_db(conn)
    SqliteContentStore(conn).save(_content("Survivor"))
    init_db(conn)
    tables = {r["name"] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert {"content", "links", "visits"} <= tables
    assert "schema_version" not in tables
    assert [c.name for c in SqliteContentStore(conn).list_all()] == ["Survivor"]
    conn.close()
