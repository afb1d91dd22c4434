"""File-based storage implementation."""

import json
import os
import tempfile
import threading
from datetime import datetime

from core.config import (
    ACTIVE_TABLE, CATALOG_TABLE, EVENTS_TABLE,
    DEFAULT_STATE_DIR, ENV_STATE_DIR
)
from core.errors import DuplicateWordError, StoreError
from core.interfaces import ActiveSetStore, CatalogStore
from core.models import ActiveEntry, CatalogWord
from core.utils import format_timestamp, in_syllable_band, parse_timestamp, utc_now


MAX_EVENTS = 1000  # Oldest events are dropped beyond this


class FileStorage(CatalogStore, ActiveSetStore):
    """JSON file-backed catalog and active set, one file per table.

    Every read-modify-write holds the instance lock, so jobs running in
    server executor threads do not overwrite each other's changes.
    """

    def __init__(self, state_dir: str = None):
        self.state_dir = state_dir or os.environ.get(ENV_STATE_DIR, DEFAULT_STATE_DIR)
        self._lock = threading.RLock()

    def _get_file(self, table: str) -> str:
        return os.path.join(self.state_dir, f'{table}.json')

    def _load(self, table: str) -> list[dict]:
        """Load all rows of a table. A missing file is an empty table."""
        path = self._get_file(table)
        if not os.path.exists(path):
            return []
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot read {path}: {e}") from e

    def _save(self, table: str, rows: list[dict]) -> None:
        path = self._get_file(table)
        tmp_path = None
        try:
            os.makedirs(self.state_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f'{table}.', suffix='.tmp', dir=self.state_dir)
            with os.fdopen(fd, 'w') as f:
                json.dump(rows, f, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreError(f"Cannot write {path}: {e}") from e

    @staticmethod
    def _next_id(rows: list[dict]) -> int:
        return max((row['id'] for row in rows), default=0) + 1

    # Catalog

    def _narrated(self, difficulty: str) -> list[dict]:
        return [
            row for row in self._load(CATALOG_TABLE)
            if row['difficulty'] == difficulty and row.get('narration_asset') is not None
        ]

    def list_catalog_ids(self, difficulty: str) -> list:
        return [row['id'] for row in self._narrated(difficulty)]

    def get_catalog_word(self, word_id) -> CatalogWord | None:
        for row in self._load(CATALOG_TABLE):
            if row['id'] == word_id and row.get('narration_asset') is not None:
                return CatalogWord.from_dict(row)
        return None

    def query_catalog(self, difficulty: str, syllable_min: int | None = None,
                      syllable_max: int | None = None) -> list[CatalogWord]:
        return [
            CatalogWord.from_dict(row) for row in self._narrated(difficulty)
            if in_syllable_band(row['syllable_count'], syllable_min, syllable_max)
        ]

    def seed_catalog(self, words: list[dict]) -> int:
        with self._lock:
            rows = self._load(CATALOG_TABLE)
            by_word = {row['word']: row for row in rows}
            for item in words:
                word = CatalogWord.from_dict(item)
                existing = by_word.get(word.word)
                if existing:
                    existing.update(narration_asset=word.narration_asset,
                                    syllable_count=word.syllable_count,
                                    difficulty=word.difficulty)
                else:
                    row = word.to_dict()
                    row['id'] = self._next_id(rows)
                    rows.append(row)
                    by_word[word.word] = row
            self._save(CATALOG_TABLE, rows)
        return len(words)

    # Active set

    def _active_rows(self) -> list[dict]:
        return self._load(ACTIVE_TABLE)

    @staticmethod
    def _oldest_first(entries: list[ActiveEntry]) -> list[ActiveEntry]:
        return sorted(entries, key=lambda e: (e.created_at, e.id))

    def exists_in_active_set(self, word: str) -> bool:
        return any(row['word'] == word for row in self._active_rows())

    def query_oldest_active(self, difficulty: str, syllable_min: int | None = None,
                            syllable_max: int | None = None) -> ActiveEntry | None:
        matches = [
            ActiveEntry.from_dict(row) for row in self._active_rows()
            if row['difficulty'] == difficulty
            and in_syllable_band(row['syllable_count'], syllable_min, syllable_max)
        ]
        if not matches:
            return None
        return self._oldest_first(matches)[0]

    def touch_active_entry(self, entry_id, created_at: datetime) -> bool:
        with self._lock:
            rows = self._active_rows()
            for row in rows:
                if row['id'] == entry_id:
                    row['created_at'] = format_timestamp(created_at)
                    self._save(ACTIVE_TABLE, rows)
                    return True
        return False

    def insert_active_entry(self, entry: ActiveEntry) -> ActiveEntry:
        with self._lock:
            rows = self._active_rows()
            if any(row['word'] == entry.word for row in rows):
                raise DuplicateWordError(entry.word)
            entry.id = self._next_id(rows)
            rows.append(entry.to_dict())
            self._save(ACTIVE_TABLE, rows)
        return entry

    def list_active_entries(self, difficulty: str | None = None) -> list[ActiveEntry]:
        entries = [
            ActiveEntry.from_dict(row) for row in self._active_rows()
            if not difficulty or row['difficulty'] == difficulty
        ]
        return self._oldest_first(entries)

    def delete_active_entries_before(self, cutoff: datetime) -> int:
        cutoff = parse_timestamp(cutoff)
        with self._lock:
            rows = self._active_rows()
            kept = [row for row in rows if parse_timestamp(row['created_at']) >= cutoff]
            self._save(ACTIVE_TABLE, kept)
        return len(rows) - len(kept)

    # Event logging

    def log_event(self, event: str, **data) -> None:
        """Append an event to the events file."""
        with self._lock:
            events = self._load(EVENTS_TABLE)
            events.append({
                'id': self._next_id(events),
                'timestamp': format_timestamp(utc_now()),
                'event': event,
                'data': data or None
            })
            self._save(EVENTS_TABLE, events[-MAX_EVENTS:])

    def get_recent_events(self, event_type: str = None, limit: int = 50) -> list[dict]:
        """Get recent events, newest first."""
        events = self._load(EVENTS_TABLE)
        if event_type:
            events = [e for e in events if e['event'] == event_type]
        return list(reversed(events))[:limit]
