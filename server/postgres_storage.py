"""PostgreSQL storage implementation."""

import json
import os
from contextlib import contextmanager
from datetime import datetime

import psycopg2
from psycopg2 import errors as pg_errors
from psycopg2.extras import RealDictCursor

from core.config import (
    ACTIVE_TABLE, CATALOG_TABLE, EVENTS_TABLE,
    DEFAULT_DATABASE_URL, ENV_DATABASE_URL
)
from core.errors import DuplicateWordError, StoreError
from core.interfaces import ActiveSetStore, CatalogStore
from core.models import ActiveEntry, CatalogWord


CATALOG_COLUMNS = "id, word, openai_audio, syllable, difficulty"
ACTIVE_COLUMNS = "id, word, openai_audio, syllable, difficulty, created_at"


def _catalog_word(row: dict) -> CatalogWord:
    return CatalogWord(row['id'], row['word'], row['openai_audio'],
                       row['syllable'], row['difficulty'])


def _active_entry(row: dict) -> ActiveEntry:
    return ActiveEntry(row['word'], row['openai_audio'], row['syllable'],
                       row['difficulty'], row['created_at'], id=row['id'])


def _band_filter(syllable_min: int | None, syllable_max: int | None) -> tuple[str, list]:
    """SQL fragment and params for an inclusive syllable band."""
    clauses = []
    params = []
    if syllable_min is not None:
        clauses.append("syllable >= %s")
        params.append(syllable_min)
    if syllable_max is not None:
        clauses.append("syllable <= %s")
        params.append(syllable_max)
    return ''.join(f" AND {c}" for c in clauses), params


class PostgresStorage(CatalogStore, ActiveSetStore):
    """PostgreSQL-backed catalog and active set."""

    def __init__(self, db_url: str = None):
        self.db_url = db_url or os.environ.get(ENV_DATABASE_URL, DEFAULT_DATABASE_URL)
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg2.connect(self.db_url)
            except psycopg2.Error as e:
                raise StoreError(f"Cannot connect to database: {e}") from e
            if not self._initialized:
                self._initialized = True
                try:
                    self._init_db()
                except StoreError:
                    self._initialized = False
                    raise
        return self._conn

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._cursor() as cur:
            cur.execute(f"""
                CREATE TABLE IF NOT EXISTS {CATALOG_TABLE} (
                    id SERIAL PRIMARY KEY,
                    word VARCHAR(255) NOT NULL UNIQUE,
                    openai_audio TEXT,
                    syllable INTEGER NOT NULL CHECK (syllable > 0),
                    difficulty VARCHAR(20) NOT NULL
                )
            """)
            cur.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_{CATALOG_TABLE}_difficulty
                ON {CATALOG_TABLE}(difficulty, syllable)
            """)
            # Unique word keeps concurrent runs from inserting the same word twice
            cur.execute(f"""
                CREATE TABLE IF NOT EXISTS {ACTIVE_TABLE} (
                    id SERIAL PRIMARY KEY,
                    word VARCHAR(255) NOT NULL UNIQUE,
                    openai_audio TEXT,
                    syllable INTEGER NOT NULL,
                    difficulty VARCHAR(20) NOT NULL,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_{ACTIVE_TABLE}_created
                ON {ACTIVE_TABLE}(difficulty, created_at)
            """)
            cur.execute(f"""
                CREATE TABLE IF NOT EXISTS {EVENTS_TABLE} (
                    id SERIAL PRIMARY KEY,
                    timestamp TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
                    event VARCHAR(50) NOT NULL,
                    data JSONB
                )
            """)
            cur.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_{EVENTS_TABLE}_event ON {EVENTS_TABLE}(event)
            """)

    @contextmanager
    def _cursor(self):
        """Cursor that commits on success and rolls back on failure.

        psycopg2 errors are re-raised as StoreError.
        """
        conn = self.conn
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                yield cur
            conn.commit()
        except pg_errors.UniqueViolation:
            self._rollback(conn)
            raise
        except psycopg2.Error as e:
            self._rollback(conn)
            raise StoreError(str(e).strip()) from e

    @staticmethod
    def _rollback(conn):
        """Roll back unless the server already dropped the connection."""
        if conn.closed:
            return
        try:
            conn.rollback()
        except psycopg2.Error:
            # Connection died during the failed statement; the original error is reported
            pass

    def close(self):
        """Close the database connection."""
        if self._conn and not self._conn.closed:
            self._conn.close()

    # Catalog

    def list_catalog_ids(self, difficulty: str) -> list:
        with self._cursor() as cur:
            cur.execute(f"""
                SELECT id FROM {CATALOG_TABLE}
                WHERE difficulty = %s AND openai_audio IS NOT NULL
            """, (difficulty,))
            return [row['id'] for row in cur.fetchall()]

    def get_catalog_word(self, word_id) -> CatalogWord | None:
        with self._cursor() as cur:
            cur.execute(f"""
                SELECT {CATALOG_COLUMNS} FROM {CATALOG_TABLE}
                WHERE id = %s AND openai_audio IS NOT NULL
            """, (word_id,))
            row = cur.fetchone()
            return _catalog_word(row) if row else None

    def query_catalog(self, difficulty: str, syllable_min: int | None = None,
                      syllable_max: int | None = None) -> list[CatalogWord]:
        band, band_params = _band_filter(syllable_min, syllable_max)
        with self._cursor() as cur:
            cur.execute(f"""
                SELECT {CATALOG_COLUMNS} FROM {CATALOG_TABLE}
                WHERE difficulty = %s AND openai_audio IS NOT NULL{band}
            """, [difficulty, *band_params])
            return [_catalog_word(row) for row in cur.fetchall()]

    def seed_catalog(self, words: list[dict]) -> int:
        with self._cursor() as cur:
            for item in words:
                word = CatalogWord.from_dict(item)
                cur.execute(f"""
                    INSERT INTO {CATALOG_TABLE} (word, openai_audio, syllable, difficulty)
                    VALUES (%s, %s, %s, %s)
                    ON CONFLICT (word) DO UPDATE SET
                        openai_audio = EXCLUDED.openai_audio,
                        syllable = EXCLUDED.syllable,
                        difficulty = EXCLUDED.difficulty
                """, (word.word, word.narration_asset, word.syllable_count, word.difficulty))
        return len(words)

    # Active set

    def exists_in_active_set(self, word: str) -> bool:
        with self._cursor() as cur:
            cur.execute(f"SELECT 1 FROM {ACTIVE_TABLE} WHERE word = %s", (word,))
            return cur.fetchone() is not None

    def query_oldest_active(self, difficulty: str, syllable_min: int | None = None,
                            syllable_max: int | None = None) -> ActiveEntry | None:
        band, band_params = _band_filter(syllable_min, syllable_max)
        with self._cursor() as cur:
            cur.execute(f"""
                SELECT {ACTIVE_COLUMNS} FROM {ACTIVE_TABLE}
                WHERE difficulty = %s{band}
                ORDER BY created_at ASC, id ASC
                LIMIT 1
            """, [difficulty, *band_params])
            row = cur.fetchone()
            return _active_entry(row) if row else None

    def touch_active_entry(self, entry_id, created_at: datetime) -> bool:
        with self._cursor() as cur:
            cur.execute(
                f"UPDATE {ACTIVE_TABLE} SET created_at = %s WHERE id = %s",
                (created_at, entry_id)
            )
            return cur.rowcount > 0

    def insert_active_entry(self, entry: ActiveEntry) -> ActiveEntry:
        try:
            with self._cursor() as cur:
                cur.execute(f"""
                    INSERT INTO {ACTIVE_TABLE} (word, openai_audio, syllable, difficulty, created_at)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING id
                """, (entry.word, entry.narration_asset, entry.syllable_count,
                      entry.difficulty, entry.created_at))
                entry.id = cur.fetchone()['id']
        except pg_errors.UniqueViolation as e:
            raise DuplicateWordError(entry.word) from e
        return entry

    def list_active_entries(self, difficulty: str | None = None) -> list[ActiveEntry]:
        with self._cursor() as cur:
            if difficulty:
                cur.execute(f"""
                    SELECT {ACTIVE_COLUMNS} FROM {ACTIVE_TABLE}
                    WHERE difficulty = %s ORDER BY created_at ASC, id ASC
                """, (difficulty,))
            else:
                cur.execute(f"""
                    SELECT {ACTIVE_COLUMNS} FROM {ACTIVE_TABLE}
                    ORDER BY created_at ASC, id ASC
                """)
            return [_active_entry(row) for row in cur.fetchall()]

    def delete_active_entries_before(self, cutoff: datetime) -> int:
        with self._cursor() as cur:
            cur.execute(f"DELETE FROM {ACTIVE_TABLE} WHERE created_at < %s", (cutoff,))
            return cur.rowcount

    # Event logging

    def log_event(self, event: str, **data) -> None:
        """Log an event to the database."""
        with self._cursor() as cur:
            cur.execute(
                f"INSERT INTO {EVENTS_TABLE} (event, data) VALUES (%s, %s)",
                (event, json.dumps(data) if data else None)
            )

    def get_recent_events(self, event_type: str = None, limit: int = 50) -> list[dict]:
        """Get recent events, newest first."""
        with self._cursor() as cur:
            if event_type:
                cur.execute(f"""
                    SELECT * FROM {EVENTS_TABLE}
                    WHERE event = %s
                    ORDER BY timestamp DESC LIMIT %s
                """, (event_type, limit))
            else:
                cur.execute(f"""
                    SELECT * FROM {EVENTS_TABLE}
                    ORDER BY timestamp DESC LIMIT %s
                """, (limit,))
            return [dict(row) for row in cur.fetchall()]
