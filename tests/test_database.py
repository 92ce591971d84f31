"""
Tests for tagreflector.database module.

Tests cover:
- Database connection management and schema
- TagStore get/set/overwrite semantics
- Current and legacy record decoding
- Backup and restore of raw records
- Concurrent writers
"""

import json
import os
import sqlite3
import tempfile
import threading
import unittest
from pathlib import Path
from unittest.mock import patch

from tagreflector.database.connection import (
    Database,
    get_db_path,
    get_database_info,
    reset_database,
    transaction,
)
from tagreflector.database.schema import CURRENT_VERSION, get_schema_version
from tagreflector.database.codec import encode_tags, decode_tags
from tagreflector.database.tags import TagStore, TAGS_PREFIX, key_for_repo, repo_for_key
from tagreflector.domain import Tag
from tagreflector.errors import DecodeError

TEST_REPO = "testing/testing"


class TestDatabaseConnection(unittest.TestCase):
    """Tests for database connection management."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.temp_dir) / 'test.db'

    def tearDown(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_get_db_path_default(self):
        """Test default database path."""
        with patch.dict(os.environ, {}, clear=True):
            path = get_db_path()
            self.assertTrue(str(path).endswith('tags.db'))
            self.assertIn('.tagreflector', str(path))

    def test_get_db_path_from_env(self):
        """Test database path from environment variable."""
        with patch.dict(os.environ, {'TAGREFLECTOR_DB': '/custom/path/db.sqlite'}):
            path = get_db_path()
            self.assertEqual(str(path), '/custom/path/db.sqlite')

    def test_get_db_path_from_config(self):
        """Test database path from config."""
        with patch.dict(os.environ, {}, clear=True):
            path = get_db_path({'database': {'path': '~/mydb.sqlite'}})
            self.assertIn('mydb.sqlite', str(path))
            self.assertNotIn('~', str(path))

    def test_empty_config_path_uses_default(self):
        """An empty database.path falls back to the default location."""
        with patch.dict(os.environ, {}, clear=True):
            path = get_db_path({'database': {'path': ''}})
            self.assertTrue(str(path).endswith('tags.db'))

    def test_database_creates_schema(self):
        """Test that Database creates schema on first connection."""
        with Database(db_path=self.db_path) as db:
            db.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = [row['name'] for row in db.fetchall()]
            self.assertIn('records', tables)
            self.assertEqual(get_schema_version(db.conn), CURRENT_VERSION)

    def test_database_creates_parent_directory(self):
        """Test that parent directories are created."""
        db_path = Path(self.temp_dir) / 'nested' / 'dir' / 'tags.db'
        with Database(db_path=db_path):
            pass
        self.assertTrue(db_path.exists())

    def test_conn_outside_context_raises(self):
        """Using the connection outside a with block is an error."""
        db = Database(db_path=self.db_path)
        with self.assertRaises(RuntimeError):
            _ = db.conn

    def test_transaction_rolls_back_on_error(self):
        """A failing transaction leaves no partial writes."""
        with Database(db_path=self.db_path) as db:
            with self.assertRaises(ValueError):
                with transaction(db):
                    db.execute("INSERT INTO records (key, value) VALUES (?, ?)", ('k', b'v'))
                    raise ValueError("boom")
            db.execute("SELECT COUNT(*) FROM records")
            self.assertEqual(db.fetchone()[0], 0)

    def test_get_database_info(self):
        """Test get_database_info returns stats."""
        store = TagStore(db_path=self.db_path)
        store.set("a/b", [Tag("v1")])
        store.set("c/d", [Tag("v2")])

        info = get_database_info(db_path=self.db_path)
        self.assertTrue(info['exists'])
        self.assertEqual(info['records'], 2)
        self.assertEqual(info['schema_version'], CURRENT_VERSION)
        self.assertIn('size_human', info)

    def test_get_database_info_missing(self):
        """Info on a missing database reports exists=False."""
        info = get_database_info(db_path=Path(self.temp_dir) / 'missing.db')
        self.assertFalse(info['exists'])

    def test_reset_database(self):
        """Reset removes every record."""
        config = {'database': {'path': str(self.db_path)}}
        store = TagStore(config=config)
        with patch.dict(os.environ, {}, clear=True):
            store.set(TEST_REPO, [Tag("latest")])
            reset_database(config)
            self.assertEqual(store.get(TEST_REPO), [])


class TestKeys(unittest.TestCase):
    """Tests for record key construction."""

    def test_key_for_repo(self):
        self.assertEqual(key_for_repo(TAGS_PREFIX, "library/nginx"), "tags:library/nginx")

    def test_repo_for_key(self):
        self.assertEqual(repo_for_key(TAGS_PREFIX, "tags:library/nginx"), "library/nginx")
        self.assertIsNone(repo_for_key(TAGS_PREFIX, "other:library/nginx"))


class TestCodec(unittest.TestCase):
    """Tests for record encoding and decoding."""

    def test_encode_current_format(self):
        data = encode_tags([Tag("latest", "sha256:1")])
        self.assertEqual(json.loads(data), [{"Name": "latest", "Digest": "sha256:1"}])

    def test_decode_current_format(self):
        data = b'[{"Name": "v0.0.1", "Digest": "d1"}, {"Name": "v0.0.2"}]'
        self.assertEqual(decode_tags(data), [Tag("v0.0.1", "d1"), Tag("v0.0.2", "")])

    def test_decode_current_format_any_key_case(self):
        data = b'[{"name": "v1", "digest": "d"}, {"NAME": "v2"}]'
        self.assertEqual(decode_tags(data), [Tag("v1", "d"), Tag("v2", "")])

    def test_decode_legacy_format(self):
        """Bare name lists decode to tags with empty digests."""
        data = b'["latest", "v0.0.1", "v0.0.2"]'
        self.assertEqual(
            decode_tags(data),
            [Tag("latest"), Tag("v0.0.1"), Tag("v0.0.2")],
        )

    def test_legacy_matches_current_with_empty_digests(self):
        legacy = decode_tags(b'["a", "b"]')
        current = decode_tags(encode_tags([Tag("a", ""), Tag("b", "")]))
        self.assertEqual(legacy, current)

    def test_decode_null(self):
        self.assertEqual(decode_tags(b'null'), [])

    def test_decode_empty_array(self):
        self.assertEqual(decode_tags(b'[]'), [])

    def test_decode_garbage_raises_with_both_errors(self):
        with self.assertRaises(DecodeError) as ctx:
            decode_tags(b'not json at all')
        self.assertIsNotNone(ctx.exception.first_error)
        self.assertIsNotNone(ctx.exception.second_error)
        self.assertIn("First error", str(ctx.exception))
        self.assertIn("Second error", str(ctx.exception))

    def test_decode_wrong_shape_raises(self):
        with self.assertRaises(DecodeError):
            decode_tags(b'{"Name": "latest"}')

    def test_decode_mixed_array_raises(self):
        with self.assertRaises(DecodeError):
            decode_tags(b'[{"Name": "latest"}, "v1"]')


class TestTagStore(unittest.TestCase):
    """Tests for TagStore."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.temp_dir) / 'tags.db'
        self.store = TagStore(db_path=self.db_path)

    def tearDown(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_get_with_unknown_repo(self):
        """An unknown repository yields an empty list, not an error."""
        self.assertEqual(self.store.get(TEST_REPO), [])

    def test_set_tags(self):
        tags = [
            Tag("latest", "latest-digest"),
            Tag("v0.0.1", "v0.0.1-digest"),
            Tag("v0.0.2", "v0.0.2-digest"),
        ]
        self.store.set(TEST_REPO, tags)
        self.assertEqual(self.store.get(TEST_REPO), tags)

    def test_set_tags_overwrites(self):
        tags1 = [Tag("latest", "latest-digest"), Tag("v0.0.1"), Tag("v0.0.2")]
        tags2 = [Tag("latest", "new-digest"), Tag("v0.0.1"), Tag("v0.0.2"), Tag("v0.0.3")]
        self.store.set(TEST_REPO, tags1)
        self.store.set(TEST_REPO, tags2)
        self.assertEqual(self.store.get(TEST_REPO), tags2)

    def test_set_shorter_list_leaves_no_residue(self):
        self.store.set(TEST_REPO, [Tag("a"), Tag("b"), Tag("c")])
        self.store.set(TEST_REPO, [Tag("z")])
        self.assertEqual(self.store.get(TEST_REPO), [Tag("z")])

    def test_set_empty_list(self):
        self.store.set(TEST_REPO, [Tag("a")])
        self.store.set(TEST_REPO, [])
        self.assertEqual(self.store.get(TEST_REPO), [])

    def test_get_only_fetches_for_repo(self):
        tags1 = [Tag("latest"), Tag("v0.0.1"), Tag("v0.0.2")]
        tags2 = [Tag("v0.0.3"), Tag("v0.0.4")]
        self.store.set(TEST_REPO, tags1)
        self.store.set("another/repo", tags2)
        self.assertEqual(self.store.get(TEST_REPO), tags1)
        self.assertEqual(self.store.get("another/repo"), tags2)

    def test_persists_across_instances(self):
        self.store.set(TEST_REPO, [Tag("v1", "d")])
        reopened = TagStore(db_path=self.db_path)
        self.assertEqual(reopened.get(TEST_REPO), [Tag("v1", "d")])

    def test_keys_are_prefixed(self):
        self.store.set(TEST_REPO, [Tag("v1")])
        with Database(db_path=self.db_path) as db:
            db.execute("SELECT key FROM records")
            keys = [row['key'] for row in db.fetchall()]
        self.assertEqual(keys, ["tags:testing/testing"])

    def test_other_record_kinds_are_ignored(self):
        with Database(db_path=self.db_path) as db:
            db.execute("INSERT INTO records (key, value) VALUES (?, ?)",
                       ("digests:testing/testing", b'"x"'))
        self.assertEqual(self.store.get(TEST_REPO), [])
        self.assertEqual(self.store.repositories(), [])

    def test_read_old_data(self):
        """Records written in the legacy format are readable."""
        self.store.load([
            {"key": key_for_repo(TAGS_PREFIX, TEST_REPO), "value": b'["latest","v0.0.1","v0.0.2"]'},
        ])
        self.assertEqual(
            self.store.get(TEST_REPO),
            [Tag("latest"), Tag("v0.0.1"), Tag("v0.0.2")],
        )

    def test_corrupt_record_raises_decode_error(self):
        self.store.load([{"key": key_for_repo(TAGS_PREFIX, TEST_REPO), "value": b'{broken'}])
        with self.assertRaises(DecodeError):
            self.store.get(TEST_REPO)

    def test_failed_write_keeps_previous_record(self):
        """A write that fails in the engine leaves the old record intact."""
        self.store.set(TEST_REPO, [Tag("v1")])
        with patch('tagreflector.database.tags.Database.execute',
                   side_effect=sqlite3.OperationalError("disk I/O error")):
            with self.assertRaises(sqlite3.OperationalError):
                self.store.set(TEST_REPO, [Tag("v2")])
        self.assertEqual(self.store.get(TEST_REPO), [Tag("v1")])

    def test_repositories(self):
        self.store.set("b/two", [Tag("1")])
        self.store.set("a/one", [Tag("1")])
        self.assertEqual(self.store.repositories(), ["a/one", "b/two"])

    def test_delete(self):
        self.store.set(TEST_REPO, [Tag("v1")])
        self.assertTrue(self.store.delete(TEST_REPO))
        self.assertFalse(self.store.delete(TEST_REPO))
        self.assertEqual(self.store.get(TEST_REPO), [])

    def test_dump_and_load(self):
        self.store.set("a/one", [Tag("v1", "d1")])
        self.store.load([{"key": "tags:b/legacy", "value": '["old"]'}])
        dumped = list(self.store.dump())
        self.assertEqual([entry['key'] for entry in dumped], ["tags:a/one", "tags:b/legacy"])

        other = TagStore(db_path=Path(self.temp_dir) / 'restored.db')
        self.assertEqual(other.load(dumped), 2)
        self.assertEqual(other.get("a/one"), [Tag("v1", "d1")])
        self.assertEqual(other.get("b/legacy"), [Tag("old")])

    def test_load_surrogate_escaped_value(self):
        """Text values carrying surrogate escapes restore the original bytes."""
        raw = b'\xff\xfe["v1"]'
        self.store.load([{"key": "tags:bad/bytes", "value": raw.decode('utf-8', 'surrogateescape')}])
        self.assertEqual(list(self.store.dump()), [{"key": "tags:bad/bytes", "value": raw}])

    def test_concurrent_writers(self):
        """Writers on different repositories do not interfere."""
        errors = []

        def writer(index):
            repo = f"repo/{index}"
            try:
                for round_ in range(5):
                    self.store.set(repo, [Tag(f"{index}.{round_}.0", f"d{round_}")])
                    self.assertEqual(len(self.store.get(repo)), 1)
            except Exception as exc:  # collected and asserted below
                errors.append(exc)

        threads = [threading.Thread(target=writer, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        for i in range(8):
            self.assertEqual(self.store.get(f"repo/{i}"), [Tag(f"{i}.4.0", "d4")])


if __name__ == '__main__':
    unittest.main()
