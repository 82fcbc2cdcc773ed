"""SQLite-backed backlink index with incremental updates."""

import logging
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from ..core.model import EntryId, Link, Range
from ..core.ports import Index
from ..core.store import EntryStore
from ..markdown.wikilinks import find_wiki_links

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"


@dataclass
class SQLiteIndex(Index):
    """
    Durable reverse index keyed by extracted wiki-link ids.

    The DB is a cache that can be rebuilt; entry files remain the source of
    truth. Change detection compares file mtime and size.
    """

    db_path: Path
    store: EntryStore

    def _conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _init_schema(self) -> None:
        conn = self._conn()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    id TEXT PRIMARY KEY,
                    mtime_ns INTEGER NOT NULL,
                    size_bytes INTEGER NOT NULL,
                    title TEXT
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS links (
                    src TEXT NOT NULL,
                    dst TEXT NOT NULL,
                    start INTEGER NOT NULL,
                    end INTEGER NOT NULL,
                    display TEXT,
                    PRIMARY KEY (src, start),
                    FOREIGN KEY (src) REFERENCES entries(id) ON DELETE CASCADE
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tags (
                    entry_id TEXT NOT NULL,
                    tag TEXT NOT NULL,
                    PRIMARY KEY (entry_id, tag),
                    FOREIGN KEY (entry_id) REFERENCES entries(id) ON DELETE CASCADE
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS links_dst_idx ON links(dst)")
            conn.execute("CREATE INDEX IF NOT EXISTS tags_tag_idx ON tags(tag)")
            conn.execute("""
                INSERT INTO meta(key, value) VALUES('schema_version', ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """, (SCHEMA_VERSION,))
            conn.commit()
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        """Create the DB if needed; a corrupt file is moved aside and rebuilt."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        if self.db_path.exists():
            try:
                conn = self._conn()
                try:
                    conn.execute("SELECT 1").fetchone()
                finally:
                    conn.close()
            except sqlite3.DatabaseError:
                backup_path = self.db_path.with_suffix(f".bad-{int(time.time())}.sqlite")
                self.db_path.rename(backup_path)
                logger.warning("corrupt index backed up to %s", backup_path)

        self._init_schema()

    def _is_dirty(self, entry_id: str, conn: sqlite3.Connection) -> bool:
        stats = self.store.storage.stat(entry_id)
        if stats is None:
            return False
        row = conn.execute(
            "SELECT mtime_ns, size_bytes FROM entries WHERE id = ?", (entry_id,)
        ).fetchone()
        return row is None or tuple(row) != stats

    def _index_entry(self, entry_id: str, conn: sqlite3.Connection) -> bool:
        """Index one entry in its own transaction. Returns False on failure."""
        try:
            entry = self.store.get(entry_id)
            stats = self.store.storage.stat(entry_id)
        except Exception as e:
            logger.warning("failed to load %s: %s", entry_id, e)
            return False
        if entry is None or stats is None:
            return False

        mtime_ns, size_bytes = stats
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute("""
                INSERT INTO entries (id, mtime_ns, size_bytes, title)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    mtime_ns = excluded.mtime_ns,
                    size_bytes = excluded.size_bytes,
                    title = excluded.title
            """, (entry_id, mtime_ns, size_bytes, entry.title))
            conn.execute("DELETE FROM links WHERE src = ?", (entry_id,))
            conn.execute("DELETE FROM tags WHERE entry_id = ?", (entry_id,))

            for link in find_wiki_links(entry.content, entry_id):
                conn.execute("""
                    INSERT INTO links (src, dst, start, end, display)
                    VALUES (?, ?, ?, ?, ?)
                """, (entry_id, link.target, link.range.start, link.range.end, link.display))

            conn.executemany(
                "INSERT OR IGNORE INTO tags (entry_id, tag) VALUES (?, ?)",
                [(entry_id, tag) for tag in entry.tags],
            )
            conn.commit()
            return True
        except sqlite3.Error as e:
            conn.rollback()
            logger.warning("failed to index %s: %s", entry_id, e)
            return False

    def _remove(self, entry_id: str, conn: sqlite3.Connection) -> None:
        conn.execute("DELETE FROM entries WHERE id = ?", (entry_id,))

    def rebuild(self, full: bool = False) -> dict[str, int]:
        """
        Bring the index in line with the store.

        Args:
            full: Reindex every entry instead of only changed ones

        Returns:
            Counts: scanned, dirty, inserted, updated, removed, failed
        """
        self.ensure_schema()
        conn = self._conn()
        conn.isolation_level = None  # explicit BEGIN/COMMIT per entry

        try:
            counts = dict.fromkeys(
                ("scanned", "dirty", "inserted", "updated", "removed", "failed"), 0
            )
            file_ids = set(self.store.list_ids())
            counts["scanned"] = len(file_ids)
            db_ids = {row[0] for row in conn.execute("SELECT id FROM entries")}

            for entry_id in db_ids - file_ids:
                self._remove(entry_id, conn)
                counts["removed"] += 1

            for entry_id in sorted(file_ids):
                if not (full or self._is_dirty(entry_id, conn)):
                    continue
                counts["dirty"] += 1
                if not self._index_entry(entry_id, conn):
                    counts["failed"] += 1
                elif entry_id in db_ids:
                    counts["updated"] += 1
                else:
                    counts["inserted"] += 1

            logger.info("index rebuild: %s", counts)
            return counts
        finally:
            conn.close()

    def update_entries(self, changed: set[str], deleted: set[str]) -> dict[str, int]:
        """Incremental update for a batch of file events."""
        self.ensure_schema()
        conn = self._conn()
        conn.isolation_level = None
        conn.execute("PRAGMA busy_timeout=3000")

        try:
            counts = {"inserted": 0, "updated": 0, "removed": 0, "failed": 0}
            for entry_id in deleted:
                self._remove(entry_id, conn)
                counts["removed"] += 1

            for entry_id in sorted(changed - deleted):
                known = conn.execute(
                    "SELECT 1 FROM entries WHERE id = ?", (entry_id,)
                ).fetchone()
                if not self._index_entry(entry_id, conn):
                    counts["failed"] += 1
                elif known:
                    counts["updated"] += 1
                else:
                    counts["inserted"] += 1
            return counts
        finally:
            conn.close()

    def _links(self, where: str, value: str) -> list[Link]:
        self.ensure_schema()
        conn = self._conn()
        try:
            rows = conn.execute(
                f"SELECT src, dst, start, end, display FROM links WHERE {where} = ? "
                "ORDER BY src, start",
                (value,),
            ).fetchall()
        finally:
            conn.close()
        return [
            Link(source=src, target=dst, display=display, range=Range(start, end))
            for src, dst, start, end, display in rows
        ]

    def links_out(self, id: EntryId) -> list[Link]:
        return self._links("src", id)

    def links_in(self, id: EntryId) -> list[Link]:
        return self._links("dst", id)

    def backlinks(self, id: EntryId) -> list[EntryId]:
        return sorted({link.source for link in self.links_in(id)})

    def titles(self, ids: Iterable[EntryId]) -> dict[EntryId, str]:
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return {}
        self.ensure_schema()
        conn = self._conn()
        try:
            rows = conn.execute(
                "SELECT id, title FROM entries WHERE id IN ({})".format(
                    ",".join("?" * len(wanted))
                ),
                wanted,
            ).fetchall()
        finally:
            conn.close()
        return {eid: title for eid, title in rows if title}

    def entries_with_tag(self, tag: str) -> list[EntryId]:
        self.ensure_schema()
        conn = self._conn()
        try:
            rows = conn.execute(
                "SELECT entry_id FROM tags WHERE tag = ? ORDER BY entry_id", (tag,)
            ).fetchall()
        finally:
            conn.close()
        return [row[0] for row in rows]

    def graph_data(self) -> dict[str, Any]:
        """Nodes (id, title) and distinct edges for graph views."""
        self.ensure_schema()
        conn = self._conn()
        try:
            nodes = [
                {"id": eid, "title": title or ""}
                for eid, title in conn.execute("SELECT id, title FROM entries ORDER BY id")
            ]
            edges = [
                {"source": src, "target": dst}
                for src, dst in conn.execute(
                    "SELECT DISTINCT src, dst FROM links ORDER BY src, dst"
                )
            ]
        finally:
            conn.close()
        return {"nodes": nodes, "edges": edges}
