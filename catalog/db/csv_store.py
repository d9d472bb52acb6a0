"""CSV-backed content store.

Two flat files, ``content_rows.csv`` and ``links_rows.csv``, are read into an
in-memory snapshot on first use and rewritten in full on every mutation.
Mutations inside one process are serialised by a lock; separate processes
writing the same files can still lose each other's writes (last write wins
at file granularity).

A small ``sequences.json`` sidecar records the highest id ever handed out per
table so ids stay unique after the newest row is deleted.
"""

from __future__ import annotations

import csv
import dataclasses
import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from catalog.db.models import CONTENT_FIELDS, Content, ContentFilter, Link
from catalog.db.store import ContentStore
from catalog.errors import NotFoundError, storage_errors

logger = logging.getLogger(__name__)

CONTENT_FILE = "content_rows.csv"
LINKS_FILE = "links_rows.csv"
SEQUENCE_FILE = "sequences.json"

CONTENT_HEADER = ("id", *CONTENT_FIELDS)
LINKS_HEADER = ("id", "title", "link", "content_id")


# ---------------------------------------------------------------------------
# Row coercion
# ---------------------------------------------------------------------------

def _int(value: Any) -> Optional[int]:
    if value is None or str(value).strip() == "":
        return None
    return int(float(str(value).strip()))


def _float(value: Any) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    return float(str(value).strip())


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _record_to_content(record: dict[str, Any]) -> Content:
    return Content(
        id=_int(record.get("id")),
        name=_str(record.get("name")),
        rating=_float(record.get("rating")),
        genre=_str(record.get("genre")),
        plot_summary=_str(record.get("plot_summary")),
        poster_url=_str(record.get("poster_url")),
        release_year=_int(record.get("release_year")),
        duration=_str(record.get("duration")),
        type=_str(record.get("type")).strip().upper(),
    )


def _record_to_link(record: dict[str, Any]) -> Link:
    return Link(
        id=_int(record.get("id")),
        title=_str(record.get("title")),
        link=_str(record.get("link")),
        content_id=_int(record.get("content_id")),
    )


def _content_to_record(content: Content) -> dict[str, Any]:
    record = {"id": content.id}
    record.update({name: getattr(content, name) for name in CONTENT_FIELDS})
    return {k: "" if v is None else v for k, v in record.items()}


def _link_to_record(link: Link) -> dict[str, Any]:
    return {
        "id": link.id,
        "title": link.title,
        "link": link.link,
        "content_id": link.content_id,
    }


def _read_csv(path: Path) -> list[dict[str, str]]:
    if not path.exists():
        return []
    with path.open(newline="", encoding="utf-8") as fh:
        return list(csv.DictReader(fh))


def _tmp_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".tmp")


def _write_csv_tmp(path: Path, header: tuple[str, ...], records: list[dict[str, Any]]) -> Path:
    """Write *records* next to *path* and return the temporary file."""
    tmp = _tmp_path(path)
    with tmp.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=header)
        writer.writeheader()
        writer.writerows(records)
    return tmp


def _read_sequences(path: Path) -> dict[str, int]:
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return {"content": int(raw.get("content", 0)), "links": int(raw.get("links", 0))}
    except (ValueError, TypeError, AttributeError):
        logger.warning("Ignoring unreadable sequence file %s", path, exc_info=True)
        return {}


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass
class CsvSnapshot:
    contents: list[Content] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    content_seq: int = 0
    link_seq: int = 0


class CsvContentStore(ContentStore):
    """Content store over two CSV files in *data_dir*."""

    def __init__(self, data_dir: Path, max_page_size: Optional[int] = None) -> None:
        self.data_dir = Path(data_dir)
        self.content_path = self.data_dir / CONTENT_FILE
        self.links_path = self.data_dir / LINKS_FILE
        self.sequence_path = self.data_dir / SEQUENCE_FILE
        if max_page_size is not None:
            self.max_page_size = max_page_size
        self._snapshot: Optional[CsvSnapshot] = None
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @storage_errors
    def load(self, force: bool = False) -> CsvSnapshot:
        """Read both files into memory unless a snapshot is already cached."""
        if self._snapshot is not None and not force:
            return self._snapshot

        logger.info("Loading CSV data from %s", self.data_dir)
        contents = []
        for record in _read_csv(self.content_path):
            try:
                content = _record_to_content(record)
            except ValueError:
                logger.warning("Skipping malformed content row: %r", record)
                continue
            if content.id is None:
                logger.warning("Skipping content row without id: %r", record)
                continue
            contents.append(content)
        links = []
        for record in _read_csv(self.links_path):
            try:
                link = _record_to_link(record)
            except ValueError:
                logger.warning("Skipping malformed link row: %r", record)
                continue
            if link.id is None or link.content_id is None:
                logger.warning("Skipping link row without id: %r", record)
                continue
            links.append(link)

        seq = _read_sequences(self.sequence_path)

        self._snapshot = CsvSnapshot(
            contents=contents,
            links=links,
            content_seq=max([seq.get("content", 0)] + [c.id for c in contents]),  # type: ignore[list-item]
            link_seq=max([seq.get("links", 0)] + [lk.id for lk in links]),  # type: ignore[list-item]
        )
        return self._snapshot

    def refresh(self) -> CsvSnapshot:
        """Drop the cached snapshot and re-read the files."""
        return self.load(force=True)

    @property
    def snapshot(self) -> CsvSnapshot:
        return self.load()

    def _persist(self, snap: CsvSnapshot) -> None:
        """Write every file to a temporary sibling, then swap them all in.

        A failure while writing leaves the files on disk and the cached
        snapshot at their previous state.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        tmp_sequence = _tmp_path(self.sequence_path)
        written: list[Path] = []
        try:
            written.append(_write_csv_tmp(
                self.content_path, CONTENT_HEADER, [_content_to_record(c) for c in snap.contents]
            ))
            written.append(_write_csv_tmp(
                self.links_path, LINKS_HEADER, [_link_to_record(lk) for lk in snap.links]
            ))
            tmp_sequence.write_text(
                json.dumps({"content": snap.content_seq, "links": snap.link_seq}),
                encoding="utf-8",
            )
            written.append(tmp_sequence)
        except Exception:
            for tmp in written:
                tmp.unlink(missing_ok=True)
            raise

        for tmp, target in zip(written, (self.content_path, self.links_path, self.sequence_path)):
            tmp.replace(target)
        self._snapshot = snap

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------
    def _select(self, flt: ContentFilter, limit: int, offset: int) -> list[Content]:
        matched = [c for c in self.snapshot.contents if flt.matches(c)]
        matched.sort(key=lambda c: c.id, reverse=True)
        return [dataclasses.replace(c, links=[]) for c in matched[offset:offset + limit]]

    def _count(self, flt: ContentFilter) -> int:
        return sum(1 for c in self.snapshot.contents if flt.matches(c))

    def _get(self, content_id: int) -> Optional[Content]:
        for content in self.snapshot.contents:
            if content.id == int(content_id):
                return dataclasses.replace(content, links=[])
        return None

    def list_links(self, content_id: int) -> list[Link]:
        links = [lk for lk in self.snapshot.links if lk.content_id == int(content_id)]
        return [dataclasses.replace(lk) for lk in sorted(links, key=lambda lk: lk.id)]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    @storage_errors
    def save(self, content: Content) -> Content:
        with self._write_lock:
            snap = self.load()
            contents = list(snap.contents)
            links = list(snap.links)
            content_seq, link_seq = snap.content_seq, snap.link_seq

            if content.id is not None:
                for index, existing in enumerate(contents):
                    if existing.id == int(content.id):
                        stored = dataclasses.replace(content, id=existing.id, links=[])
                        contents[index] = stored
                        break
                else:
                    raise NotFoundError(f"Content not found: {content.id!r}")
            else:
                content_seq += 1
                stored = dataclasses.replace(content, id=content_seq, links=[])
                contents.append(stored)
                for link in content.links or []:
                    link_seq += 1
                    links.append(Link(id=link_seq, title=link.title, link=link.link, content_id=content_seq))

            self._persist(CsvSnapshot(contents, links, content_seq, link_seq))
        return dataclasses.replace(stored)

    @storage_errors
    def delete_by_id(self, content_id: int) -> bool:
        with self._write_lock:
            snap = self.load()
            contents = [c for c in snap.contents if c.id != int(content_id)]
            if len(contents) == len(snap.contents):
                return False
            links = [lk for lk in snap.links if lk.content_id != int(content_id)]
            self._persist(CsvSnapshot(contents, links, snap.content_seq, snap.link_seq))
        return True

    @storage_errors
    def add_link(self, content_id: int, link: Link) -> Link:
        with self._write_lock:
            snap = self.load()
            if not any(c.id == int(content_id) for c in snap.contents):
                raise NotFoundError(f"Content not found: {content_id!r}")
            link_seq = snap.link_seq + 1
            stored = Link(id=link_seq, title=link.title, link=link.link, content_id=int(content_id))
            self._persist(
                CsvSnapshot(list(snap.contents), [*snap.links, stored], snap.content_seq, link_seq)
            )
        return dataclasses.replace(stored)

    @storage_errors
    def delete_link(self, content_id: int, link_id: int) -> bool:
        with self._write_lock:
            snap = self.load()
            links = [
                lk for lk in snap.links
                if not (lk.id == int(link_id) and lk.content_id == int(content_id))
            ]
            if len(links) == len(snap.links):
                return False
            self._persist(CsvSnapshot(list(snap.contents), links, snap.content_seq, snap.link_seq))
        return True
