"""Tests for the file and PostgreSQL storage backends."""

import os
import random
import tempfile
import threading
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import psycopg2
from psycopg2 import errors as pg_errors

from core.config import DEFAULT_SCHEDULE
from core.errors import DuplicateWordError, StoreError
from core.models import ActiveEntry, RotationRequest
from core.rotation import RotationJob
from core.schedule import parse_schedule
from scripts.seed_catalog import get_seed_words, UNNARRATED
from server.file_storage import FileStorage
from server.postgres_storage import PostgresStorage, _band_filter
from server.storage import create_storage


T1 = datetime(2024, 2, 27, 6, 0, tzinfo=timezone.utc)
T2 = datetime(2024, 2, 28, 6, 0, tzinfo=timezone.utc)
T3 = datetime(2024, 2, 29, 6, 0, tzinfo=timezone.utc)
NOW = datetime(2024, 3, 1, 6, 0, tzinfo=timezone.utc)


def catalog_row(word, difficulty='easy', syllables=1, audio=True) -> dict:
    return {
        'word': word,
        'narration_asset': f'audio/{word}.mp3' if audio else None,
        'syllable_count': syllables,
        'difficulty': difficulty
    }


class TestFileStorage(unittest.TestCase):
    """Tests for FileStorage against a temporary directory."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.storage = FileStorage(state_dir=self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_empty_directory_is_empty_store(self):
        self.assertEqual(self.storage.list_catalog_ids('easy'), [])
        self.assertIsNone(self.storage.query_oldest_active('easy'))
        self.assertFalse(self.storage.exists_in_active_set('cat'))

    def test_catalog_excludes_unnarrated(self):
        self.storage.seed_catalog([
            catalog_row('cat'), catalog_row('dog', audio=False),
            catalog_row('garden', 'medium', 2)
        ])

        ids = self.storage.list_catalog_ids('easy')

        self.assertEqual(len(ids), 1)
        self.assertEqual(self.storage.get_catalog_word(ids[0]).word, 'cat')

    def test_get_catalog_word_hides_unnarrated(self):
        self.storage.seed_catalog([catalog_row('dog', audio=False)])
        self.assertIsNone(self.storage.get_catalog_word(1))
        self.assertIsNone(self.storage.get_catalog_word(999))

    def test_query_catalog_band_is_inclusive(self):
        self.storage.seed_catalog([
            catalog_row(f'w{n}', 'difficult', n) for n in range(1, 7)
        ])

        words = self.storage.query_catalog('difficult', 3, 4)

        self.assertEqual(sorted(w.syllable_count for w in words), [3, 4])

    def test_seed_updates_existing_word(self):
        self.storage.seed_catalog([catalog_row('cat', audio=False)])
        self.storage.seed_catalog([catalog_row('cat')])

        self.assertEqual(len(self.storage.list_catalog_ids('easy')), 1)

    def test_insert_rejects_duplicate_word(self):
        self.storage.insert_active_entry(ActiveEntry('cat', 'a.mp3', 1, 'easy', T1))

        with self.assertRaises(DuplicateWordError):
            self.storage.insert_active_entry(ActiveEntry('cat', 'a.mp3', 1, 'easy', T2))
        self.assertEqual(len(self.storage.list_active_entries()), 1)

    def test_oldest_and_touch(self):
        for word, ts in [('b', T2), ('a', T1), ('c', T3)]:
            self.storage.insert_active_entry(ActiveEntry(word, f'{word}.mp3', 1, 'easy', ts))

        oldest = self.storage.query_oldest_active('easy')
        self.assertEqual(oldest.word, 'a')

        self.assertTrue(self.storage.touch_active_entry(oldest.id, NOW))
        self.assertEqual(self.storage.query_oldest_active('easy').word, 'b')
        self.assertFalse(self.storage.touch_active_entry(999, NOW))
        self.assertEqual([e.word for e in self.storage.list_active_entries()], ['b', 'c', 'a'])

    def test_oldest_respects_band(self):
        self.storage.insert_active_entry(ActiveEntry('short', 's.mp3', 1, 'difficult', T1))
        self.storage.insert_active_entry(ActiveEntry('long', 'l.mp3', 6, 'difficult', T2))

        self.assertEqual(self.storage.query_oldest_active('difficult', 5, 10).word, 'long')
        self.assertIsNone(self.storage.query_oldest_active('difficult', 3, 4))

    def test_delete_before_cutoff(self):
        self.storage.insert_active_entry(ActiveEntry('old', 'o.mp3', 1, 'easy', T1))
        self.storage.insert_active_entry(ActiveEntry('new', 'n.mp3', 1, 'easy', T3))

        self.assertEqual(self.storage.delete_active_entries_before(T2), 1)
        self.assertEqual([e.word for e in self.storage.list_active_entries()], ['new'])

    def test_delete_before_naive_cutoff_is_utc(self):
        self.storage.insert_active_entry(ActiveEntry('old', 'o.mp3', 1, 'easy', T1))
        self.storage.insert_active_entry(ActiveEntry('new', 'n.mp3', 1, 'easy', T3))

        self.assertEqual(self.storage.delete_active_entries_before(datetime(2024, 2, 28, 6, 0)), 1)
        self.assertEqual([e.word for e in self.storage.list_active_entries()], ['new'])

    def test_concurrent_inserts_are_all_kept(self):
        def insert_batch(batch):
            for n in range(10):
                self.storage.insert_active_entry(
                    ActiveEntry(f'w{batch}_{n}', 'a.mp3', 1, 'easy', T1))

        threads = [threading.Thread(target=insert_batch, args=(b,)) for b in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        entries = self.storage.list_active_entries()
        self.assertEqual(len(entries), 80)
        self.assertEqual(len({e.id for e in entries}), 80)
        self.assertEqual([f for f in os.listdir(self.tmp.name) if f.endswith('.tmp')], [])

    def test_corrupt_file_raises_store_error(self):
        with open(os.path.join(self.tmp.name, 'spellol_daily.json'), 'w') as f:
            f.write('{not json')

        with self.assertRaises(StoreError):
            self.storage.exists_in_active_set('cat')

    def test_events_newest_first(self):
        self.storage.log_event('rotation.run', inserted=['cat'])
        self.storage.log_event('other')
        self.storage.log_event('rotation.run', inserted=['dog'])

        events = self.storage.get_recent_events('rotation.run')

        self.assertEqual([e['data']['inserted'] for e in events], [['dog'], ['cat']])
        self.assertEqual(len(self.storage.get_recent_events(limit=2)), 2)

    def test_rotation_with_seed_catalog(self):
        self.storage.seed_catalog(get_seed_words())
        job = RotationJob(self.storage, self.storage, rng=random.Random(11),
                          now=lambda: NOW,
                          schedule=[RotationRequest('easy', 2),
                                    RotationRequest('difficult', 2, 'full', 3, 4)])

        report = job.run()

        entries = self.storage.list_active_entries()
        self.assertEqual(len(entries), 4)
        self.assertEqual([e.word for e in entries], report.inserted)
        for entry in entries:
            self.assertEqual(entry.created_at, NOW)
            self.assertNotIn(entry.word, UNNARRATED)
        self.assertEqual(len(self.storage.get_recent_events('rotation.run')), 1)

    def test_repeat_rotation_never_duplicates(self):
        self.storage.seed_catalog([catalog_row(w) for w in ('cat', 'dog', 'sun')])
        job = RotationJob(self.storage, self.storage, rng=random.Random(5),
                          now=lambda: NOW, schedule=[RotationRequest('easy', 2)])

        job.run()
        second = job.run()

        words = [e.word for e in self.storage.list_active_entries()]
        self.assertEqual(sorted(words), ['cat', 'dog', 'sun'])
        self.assertEqual(len(second.inserted), 1)


class TestPostgresStorage(unittest.TestCase):
    """Tests for PostgresStorage with a mocked connection."""

    def setUp(self):
        self.storage = PostgresStorage(db_url='postgresql://test/spellol')
        self.conn = MagicMock()
        self.conn.closed = False
        self.cur = MagicMock()
        self.conn.cursor.return_value.__enter__.return_value = self.cur
        self.storage._conn = self.conn
        self.storage._initialized = True

    def test_band_filter(self):
        self.assertEqual(_band_filter(None, None), ('', []))
        sql, params = _band_filter(3, 4)
        self.assertEqual(sql, ' AND syllable >= %s AND syllable <= %s')
        self.assertEqual(params, [3, 4])
        self.assertEqual(_band_filter(5, None), (' AND syllable >= %s', [5]))

    def test_query_catalog_maps_columns(self):
        self.cur.fetchall.return_value = [
            {'id': 7, 'word': 'rhythm', 'openai_audio': 'r.mp3', 'syllable': 2, 'difficulty': 'difficult'}
        ]

        words = self.storage.query_catalog('difficult', 1, 2)

        self.assertEqual(words[0].word, 'rhythm')
        self.assertEqual(words[0].syllable_count, 2)
        self.assertEqual(words[0].narration_asset, 'r.mp3')
        sql, params = self.cur.execute.call_args[0]
        self.assertIn('openai_audio IS NOT NULL', sql)
        self.assertEqual(params, ['difficult', 1, 2])
        self.conn.commit.assert_called_once()

    def test_query_oldest_orders_by_created_at(self):
        self.cur.fetchone.return_value = {
            'id': 3, 'word': 'cat', 'openai_audio': 'c.mp3', 'syllable': 1,
            'difficulty': 'easy', 'created_at': T1
        }

        entry = self.storage.query_oldest_active('easy')

        self.assertEqual((entry.id, entry.created_at), (3, T1))
        sql = self.cur.execute.call_args[0][0]
        self.assertIn('ORDER BY created_at ASC', sql)
        self.assertIn('LIMIT 1', sql)

    def test_touch_reports_missing_row(self):
        self.cur.rowcount = 0
        self.assertFalse(self.storage.touch_active_entry(5, NOW))
        self.cur.rowcount = 1
        self.assertTrue(self.storage.touch_active_entry(5, NOW))

    def test_unique_violation_becomes_duplicate(self):
        self.cur.execute.side_effect = pg_errors.UniqueViolation('duplicate key')

        with self.assertRaises(DuplicateWordError) as ctx:
            self.storage.insert_active_entry(ActiveEntry('cat', 'c.mp3', 1, 'easy', NOW))
        self.assertEqual(ctx.exception.word, 'cat')
        self.conn.rollback.assert_called_once()

    def test_insert_sets_id(self):
        self.cur.fetchone.return_value = {'id': 12}
        entry = self.storage.insert_active_entry(ActiveEntry('cat', 'c.mp3', 1, 'easy', NOW))
        self.assertEqual(entry.id, 12)

    def test_database_error_becomes_store_error(self):
        self.cur.execute.side_effect = psycopg2.OperationalError('server closed the connection')

        with self.assertRaises(StoreError):
            self.storage.exists_in_active_set('cat')
        self.conn.rollback.assert_called_once()

    def drop_connection(self, *args):
        self.conn.closed = 2
        raise psycopg2.OperationalError('server closed the connection unexpectedly')

    def test_dropped_connection_becomes_store_error(self):
        self.cur.execute.side_effect = self.drop_connection
        self.conn.rollback.side_effect = psycopg2.InterfaceError('connection already closed')

        with self.assertRaises(StoreError) as ctx:
            self.storage.exists_in_active_set('cat')
        self.assertIn('server closed the connection', str(ctx.exception))
        self.conn.rollback.assert_not_called()

    def test_failed_rollback_still_raises_store_error(self):
        self.cur.execute.side_effect = psycopg2.OperationalError('terminating connection')
        self.conn.rollback.side_effect = psycopg2.InterfaceError('connection already closed')

        with self.assertRaises(StoreError):
            self.storage.list_catalog_ids('easy')

    def test_rotation_survives_dropped_connection(self):
        self.cur.execute.side_effect = self.drop_connection
        self.conn.rollback.side_effect = psycopg2.InterfaceError('connection already closed')
        job = RotationJob(self.storage, self.storage, rng=random.Random(1),
                          now=lambda: NOW,
                          schedule=parse_schedule(DEFAULT_SCHEDULE))

        with patch('server.postgres_storage.psycopg2.connect',
                   side_effect=psycopg2.OperationalError('could not connect')):
            report = job.run()

        self.assertEqual(len(report.failed_requests), 5)
        self.assertEqual(report.inserted, [])

    def test_connect_failure_becomes_store_error(self):
        storage = PostgresStorage(db_url='postgresql://nowhere/spellol')
        with patch('server.postgres_storage.psycopg2.connect',
                   side_effect=psycopg2.OperationalError('could not connect')):
            with self.assertRaises(StoreError):
                storage.list_catalog_ids('easy')


class TestCreateStorage(unittest.TestCase):
    """Tests for backend selection."""

    def test_file_backend(self):
        with tempfile.TemporaryDirectory() as tmp:
            with patch.dict(os.environ, {'SPELLOL_STORAGE': 'file', 'SPELLOL_STATE_DIR': tmp}):
                storage = create_storage()
        self.assertIsInstance(storage, FileStorage)
        self.assertEqual(storage.state_dir, tmp)

    def test_postgres_is_default(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertIsInstance(create_storage(), PostgresStorage)

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            create_storage('redis')


if __name__ == '__main__':
    unittest.main()
