"""
Tag record storage for tagreflector.

Maps a repository identifier (e.g. "library/nginx") to the full list of
tags last written for it. Every write replaces the previous record; there
is no merge and no expiry. Reading a repository that was never written
returns an empty list.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from ..domain import Tag
from .codec import encode_tags, decode_tags
from .connection import Database, transaction

logger = logging.getLogger(__name__)

TAGS_PREFIX = "tags"


def key_for_repo(prefix: str, repository: str) -> str:
    """Build the storage key for a repository under a record-kind prefix."""
    return f"{prefix}:{repository}"


def repo_for_key(prefix: str, key: str) -> Optional[str]:
    """Inverse of key_for_repo; None if the key belongs to another kind."""
    marker = f"{prefix}:"
    if key.startswith(marker):
        return key[len(marker):]
    return None


class TagStore:
    """
    Durable per-repository tag cache backed by SQLite.

    Each operation opens its own connection and runs in its own
    transaction, so the store can be shared by worker threads: writes to
    different repositories do not interfere and a read always sees a whole
    record.

    Example:
        store = TagStore(db_path=Path("/var/lib/tagreflector/tags.db"))
        store.set("library/nginx", [Tag("1.25.3", "sha256:...")])
        store.get("library/nginx")
    """

    def __init__(self, db_path: Optional[Path] = None, config: Optional[Dict[str, Any]] = None):
        """
        Initialize TagStore.

        Args:
            db_path: Explicit database file (resolved from config if None)
            config: Configuration dict used to resolve the database path
        """
        self.db_path = db_path
        self.config = config

    def _database(self) -> Database:
        return Database(db_path=self.db_path, config=self.config)

    def get(self, repository: str) -> List[Tag]:
        """
        Fetch the tags recorded for a repository.

        Returns:
            The stored tags in write order, or [] if nothing was stored
        """
        with self._database() as db:
            db.execute(
                "SELECT value FROM records WHERE key = ?",
                (key_for_repo(TAGS_PREFIX, repository),)
            )
            row = db.fetchone()

        if row is None:
            return []
        return decode_tags(row['value'])

    def set(self, repository: str, tags: Iterable[Tag]) -> None:
        """
        Record the tags for a repository, replacing any previous record.

        The value is encoded before the transaction starts; a failure at
        any point leaves the previous record untouched.
        """
        tags = list(tags)
        value = encode_tags(tags)
        with self._database() as db:
            with transaction(db):
                db.execute(
                    """INSERT INTO records (key, value, updated_at)
                       VALUES (?, ?, CURRENT_TIMESTAMP)
                       ON CONFLICT(key) DO UPDATE SET
                           value = excluded.value,
                           updated_at = excluded.updated_at""",
                    (key_for_repo(TAGS_PREFIX, repository), value)
                )
        logger.debug("Stored %d tags for %s", len(tags), repository)

    def delete(self, repository: str) -> bool:
        """
        Remove the record for a repository.

        Returns:
            True if a record existed
        """
        with self._database() as db:
            with transaction(db):
                db.execute(
                    "DELETE FROM records WHERE key = ?",
                    (key_for_repo(TAGS_PREFIX, repository),)
                )
                deleted = db.rowcount > 0
        if deleted:
            logger.debug("Deleted tag record for %s", repository)
        return deleted

    def repositories(self) -> List[str]:
        """List repositories that have a tag record, sorted."""
        with self._database() as db:
            db.execute(
                "SELECT key FROM records WHERE key LIKE ? ORDER BY key",
                (f"{TAGS_PREFIX}:%",)
            )
            rows = db.fetchall()

        repos = []
        for row in rows:
            repo = repo_for_key(TAGS_PREFIX, row['key'])
            if repo is not None:
                repos.append(repo)
        return repos

    def dump(self) -> Iterator[Dict[str, Any]]:
        """
        Export every raw record for backup.

        Values are yielded undecoded so records in either format survive
        a dump/load cycle byte for byte.

        Yields:
            {"key": str, "value": bytes}
        """
        with self._database() as db:
            db.execute("SELECT key, value FROM records ORDER BY key")
            rows = db.fetchall()

        for row in rows:
            value = row['value']
            if isinstance(value, str):
                value = value.encode('utf-8')
            yield {'key': row['key'], 'value': bytes(value)}

    def load(self, entries: Iterable[Dict[str, Any]]) -> int:
        """
        Restore raw records produced by dump(), in one transaction.

        Existing records with the same keys are replaced.

        Returns:
            Number of records written
        """
        rows = []
        for entry in entries:
            value = entry['value']
            if isinstance(value, str):
                value = value.encode('utf-8', 'surrogateescape')
            rows.append((entry['key'], value))

        with self._database() as db:
            with transaction(db):
                db.executemany(
                    """INSERT INTO records (key, value, updated_at)
                       VALUES (?, ?, CURRENT_TIMESTAMP)
                       ON CONFLICT(key) DO UPDATE SET
                           value = excluded.value,
                           updated_at = excluded.updated_at""",
                    rows
                )
        logger.debug("Loaded %d records", len(rows))
        return len(rows)
