"""
Database connection management for tagreflector.

Provides connection setup, context managers, and configuration.
Uses SQLite with WAL mode so readers never block on a concurrent writer.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Generator

from .schema import ensure_schema, get_schema_version

# Seconds a connection waits on a locked database before failing
BUSY_TIMEOUT = 30.0


def get_db_path(config: Optional[dict] = None) -> Path:
    """
    Get the database file path.

    Checks in order:
    1. TAGREFLECTOR_DB environment variable
    2. config['database']['path'] if provided
    3. Default: ~/.tagreflector/tags.db

    Args:
        config: Optional configuration dictionary

    Returns:
        Path to database file
    """
    if 'TAGREFLECTOR_DB' in os.environ:
        return Path(os.environ['TAGREFLECTOR_DB'])

    if config and 'database' in config and config['database'].get('path'):
        return Path(config['database']['path']).expanduser()

    return Path.home() / '.tagreflector' / 'tags.db'


def get_connection(
    db_path: Optional[Path] = None,
    config: Optional[dict] = None,
    read_only: bool = False
) -> sqlite3.Connection:
    """
    Get a database connection.

    Creates the database and applies schema if it doesn't exist.

    Args:
        db_path: Optional explicit path to database
        config: Optional configuration dictionary
        read_only: If True, open in read-only mode

    Returns:
        SQLite connection
    """
    if db_path is None:
        db_path = get_db_path(config)
    db_path = Path(db_path)

    if read_only:
        uri = f"file:{db_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, timeout=BUSY_TIMEOUT)
    else:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path), timeout=BUSY_TIMEOUT)

    conn.row_factory = sqlite3.Row

    if not read_only:
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = FULL")
        ensure_schema(conn)

    return conn


class Database:
    """
    Database context manager for tagreflector.

    Opens one connection for the duration of the block. The block commits
    on success and rolls back if it raises, so each `with` is one
    transaction.

    Usage:
        with Database(db_path=path) as db:
            db.execute("SELECT key FROM records")
            for row in db.fetchall():
                print(row['key'])

        # Read-only mode
        with Database(read_only=True) as db:
            ...
    """

    def __init__(
        self,
        db_path: Optional[Path] = None,
        config: Optional[dict] = None,
        read_only: bool = False
    ):
        self.db_path = db_path
        self.config = config
        self.read_only = read_only
        self._conn: Optional[sqlite3.Connection] = None
        self._cursor: Optional[sqlite3.Cursor] = None

    def __enter__(self) -> 'Database':
        self._conn = get_connection(
            db_path=self.db_path,
            config=self.config,
            read_only=self.read_only
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._cursor:
            self._cursor.close()
        if self._conn:
            try:
                if exc_type is None and not self.read_only:
                    self._conn.commit()
                else:
                    self._conn.rollback()
            finally:
                self._conn.close()
                self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Get the underlying connection."""
        if self._conn is None:
            raise RuntimeError("Database not connected. Use 'with Database() as db:'")
        return self._conn

    def begin(self) -> None:
        """Start a write transaction, taking the write lock immediately."""
        self.conn.execute("BEGIN IMMEDIATE")

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute SQL statement."""
        self._cursor = self.conn.execute(sql, params)
        return self._cursor

    def executemany(self, sql: str, params_seq) -> sqlite3.Cursor:
        """Execute SQL statement with multiple parameter sets."""
        self._cursor = self.conn.executemany(sql, params_seq)
        return self._cursor

    def fetchone(self) -> Optional[sqlite3.Row]:
        """Fetch one row from last query."""
        if self._cursor is None:
            return None
        return self._cursor.fetchone()

    def fetchall(self) -> list:
        """Fetch all rows from last query."""
        if self._cursor is None:
            return []
        return self._cursor.fetchall()

    def commit(self) -> None:
        """Commit current transaction."""
        self.conn.commit()

    def rollback(self) -> None:
        """Rollback current transaction."""
        self.conn.rollback()

    @property
    def rowcount(self) -> int:
        """Get number of rows affected by last statement."""
        if self._cursor is None:
            return 0
        return self._cursor.rowcount


@contextmanager
def transaction(db: Database) -> Generator[None, None, None]:
    """
    Context manager for explicit transactions.

    Usage:
        with Database() as db:
            with transaction(db):
                db.execute("INSERT ...")
                db.execute("DELETE ...")
                # Commits on success, rolls back on exception
    """
    db.begin()
    try:
        yield
        db.commit()
    except BaseException:
        db.rollback()
        raise


def reset_database(config: Optional[dict] = None) -> None:
    """
    Delete and recreate the database.

    Use with caution - this destroys every stored tag record!

    Args:
        config: Optional configuration dictionary
    """
    db_path = get_db_path(config)
    for suffix in ('', '-wal', '-shm'):
        path = Path(str(db_path) + suffix)
        if path.exists():
            path.unlink()

    with Database(config=config) as _db:
        pass  # Schema is applied on connection


def get_database_info(config: Optional[dict] = None, db_path: Optional[Path] = None) -> dict:
    """
    Get information about the database.

    Returns:
        Dictionary with database stats
    """
    if db_path is None:
        db_path = get_db_path(config)
    db_path = Path(db_path)

    if not db_path.exists():
        return {
            'exists': False,
            'path': str(db_path),
        }

    with Database(db_path=db_path, read_only=True) as db:
        db.execute("SELECT COUNT(*) FROM records")
        row = db.fetchone()
        record_count = row[0] if row else 0

        schema_version = get_schema_version(db.conn)

    file_size = db_path.stat().st_size

    return {
        'exists': True,
        'path': str(db_path),
        'size_bytes': file_size,
        'size_human': _human_size(file_size),
        'schema_version': schema_version,
        'records': record_count,
    }


def _human_size(size_bytes: int) -> str:
    """Convert bytes to human-readable size."""
    size: float = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
