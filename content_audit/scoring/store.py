"""Score store abstraction + SQLite implementation.

Rows are keyed by (entity_type, entity_id, vector_id, langcode). A write
for an entity replaces every row for that entity and language inside one
transaction, so readers never see old and new scores mixed.
"""

import asyncio
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping

from content_audit.entities.interfaces import Entity
from content_audit.scoring.models import ScoreRecord, ScoreStatistics, clamp_score

TABLE = "content_audit_results"

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    entity_type TEXT NOT NULL,
    entity_id TEXT NOT NULL,
    entity_revision_id TEXT,
    langcode TEXT NOT NULL,
    vector_id TEXT NOT NULL,
    score INTEGER NOT NULL,
    content_hash TEXT NOT NULL,
    config_hash TEXT NOT NULL,
    analyzed_timestamp INTEGER NOT NULL,
    UNIQUE (entity_type, entity_id, vector_id, langcode)
);
CREATE INDEX IF NOT EXISTS idx_{TABLE}_entity ON {TABLE} (entity_type, entity_id);
CREATE INDEX IF NOT EXISTS idx_{TABLE}_config ON {TABLE} (config_hash);
CREATE INDEX IF NOT EXISTS idx_{TABLE}_vector ON {TABLE} (vector_id);
"""


class ScoreStore(ABC):
    """Abstract base for persisted per-vector scores."""

    @abstractmethod
    async def fetch_scores(
        self, entity_type: str, entity_id: str, langcode: str,
        content_hash: str, config_hash: str,
    ) -> dict[str, int]:
        """Scores for rows matching the entity AND both hashes."""
        ...

    @abstractmethod
    async def replace_scores(
        self, entity: Entity, scores: Mapping[str, object],
        content_hash: str, config_hash: str,
    ) -> int:
        """Delete rows for (type, id, langcode), insert the new set. Returns rows written."""
        ...

    @abstractmethod
    async def delete_entity(self, entity_type: str, entity_id: str) -> int:
        ...

    @abstractmethod
    async def delete_vector(self, vector_id: str) -> int:
        ...

    @abstractmethod
    async def delete_stale_config(self, current_config_hash: str) -> int:
        """Delete every row whose config hash differs from the current one."""
        ...

    @abstractmethod
    async def statistics(self) -> ScoreStatistics:
        ...

    @abstractmethod
    async def average_scores(self) -> dict[str, float]:
        ...

    @abstractmethod
    async def analyzed_entity_ids(self, entity_type: str, config_hash: str, since: int) -> set[str]:
        """Entity ids with rows under `config_hash` analyzed after `since`."""
        ...

    @abstractmethod
    async def records(self, entity_type: str, entity_id: str) -> list[ScoreRecord]:
        """All stored rows for an entity, stale ones included."""
        ...


class SQLiteScoreStore(ScoreStore):
    """sqlite3-backed score store.

    Each call opens its own connection and runs in a worker thread via
    asyncio.to_thread. Writes are serialized through a lock.
    """

    def __init__(self, db_path: str, clock: Callable[[], float] = time.time):
        self._db_path = db_path
        self._clock = clock
        self._lock = threading.Lock()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        conn = self._connect()
        try:
            conn.executescript(_SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def _read(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        conn = self._connect()
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()

    def _write(self, sql: str, params: tuple = ()) -> int:
        with self._lock:
            conn = self._connect()
            try:
                with conn:
                    cur = conn.execute(sql, params)
                return cur.rowcount
            finally:
                conn.close()

    async def fetch_scores(self, entity_type, entity_id, langcode, content_hash, config_hash):
        rows = await asyncio.to_thread(
            self._read,
            f"""
            SELECT vector_id, score FROM {TABLE}
            WHERE entity_type = ? AND entity_id = ? AND langcode = ?
              AND content_hash = ? AND config_hash = ?
            """,
            (entity_type, str(entity_id), langcode, content_hash, config_hash),
        )
        return {r["vector_id"]: int(r["score"]) for r in rows}

    def _replace_sync(self, entity: Entity, scores: Mapping[str, object],
                      content_hash: str, config_hash: str) -> int:
        analyzed_at = int(self._clock())
        rows = [
            (
                entity.entity_type, str(entity.id), entity.revision_id, entity.langcode,
                vector_id, clamp_score(score), content_hash, config_hash, analyzed_at,
            )
            for vector_id, score in scores.items()
        ]
        with self._lock:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        f"DELETE FROM {TABLE} WHERE entity_type = ? AND entity_id = ? AND langcode = ?",
                        (entity.entity_type, str(entity.id), entity.langcode),
                    )
                    if rows:
                        conn.executemany(
                            f"""
                            INSERT INTO {TABLE} (
                                entity_type, entity_id, entity_revision_id, langcode,
                                vector_id, score, content_hash, config_hash, analyzed_timestamp
                            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                            """,
                            rows,
                        )
            finally:
                conn.close()
        return len(rows)

    async def replace_scores(self, entity, scores, content_hash, config_hash):
        return await asyncio.to_thread(self._replace_sync, entity, scores, content_hash, config_hash)

    async def delete_entity(self, entity_type, entity_id):
        return await asyncio.to_thread(
            self._write,
            f"DELETE FROM {TABLE} WHERE entity_type = ? AND entity_id = ?",
            (entity_type, str(entity_id)),
        )

    async def delete_vector(self, vector_id):
        return await asyncio.to_thread(
            self._write, f"DELETE FROM {TABLE} WHERE vector_id = ?", (vector_id,),
        )

    async def delete_stale_config(self, current_config_hash):
        return await asyncio.to_thread(
            self._write, f"DELETE FROM {TABLE} WHERE config_hash != ?", (current_config_hash,),
        )

    async def statistics(self) -> ScoreStatistics:
        rows = await asyncio.to_thread(
            self._read,
            f"""
            SELECT COUNT(*) AS total_results,
                   COUNT(DISTINCT entity_type || ':' || entity_id) AS unique_entities,
                   COUNT(DISTINCT vector_id) AS unique_vectors,
                   MIN(analyzed_timestamp) AS oldest_analysis,
                   MAX(analyzed_timestamp) AS newest_analysis
            FROM {TABLE}
            """,
        )
        r = rows[0]
        return ScoreStatistics(
            total_results=int(r["total_results"]),
            unique_entities=int(r["unique_entities"]),
            unique_vectors=int(r["unique_vectors"]),
            oldest_analysis=int(r["oldest_analysis"] or 0),
            newest_analysis=int(r["newest_analysis"] or 0),
        )

    async def average_scores(self) -> dict[str, float]:
        rows = await asyncio.to_thread(
            self._read,
            f"SELECT vector_id, AVG(score) AS average_score FROM {TABLE} GROUP BY vector_id",
        )
        return {r["vector_id"]: float(r["average_score"]) for r in rows}

    async def analyzed_entity_ids(self, entity_type, config_hash, since):
        rows = await asyncio.to_thread(
            self._read,
            f"""
            SELECT DISTINCT entity_id FROM {TABLE}
            WHERE entity_type = ? AND config_hash = ? AND analyzed_timestamp > ?
            """,
            (entity_type, config_hash, int(since)),
        )
        return {r["entity_id"] for r in rows}

    async def records(self, entity_type, entity_id):
        rows = await asyncio.to_thread(
            self._read,
            f"SELECT * FROM {TABLE} WHERE entity_type = ? AND entity_id = ? ORDER BY id",
            (entity_type, str(entity_id)),
        )
        return [
            ScoreRecord(
                entity_type=r["entity_type"],
                entity_id=r["entity_id"],
                langcode=r["langcode"],
                vector_id=r["vector_id"],
                score=int(r["score"]),
                content_hash=r["content_hash"],
                config_hash=r["config_hash"],
                analyzed_at=int(r["analyzed_timestamp"]),
                entity_revision_id=r["entity_revision_id"],
            )
            for r in rows
        ]
