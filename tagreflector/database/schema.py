"""
Database schema for tagreflector.

This module defines the SQLite schema and handles migrations.
Records are opaque key/value pairs so several record kinds can share one
table; keys carry a kind prefix (see database.tags).
"""

import logging
import sqlite3
from typing import List, Sequence, Tuple

logger = logging.getLogger(__name__)

# Current schema version - increment when schema changes
# v1: Initial key/value records table
CURRENT_VERSION = 1

SCHEMA_V1 = (
    # Schema version tracking
    """CREATE TABLE IF NOT EXISTS _schema_info (
        version INTEGER PRIMARY KEY,
        applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        description TEXT
    )""",
    # Key/value records, one row per key
    """CREATE TABLE IF NOT EXISTS records (
        key TEXT PRIMARY KEY,
        value BLOB NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )""",
)


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Get current schema version from database."""
    try:
        cursor = conn.execute(
            "SELECT MAX(version) FROM _schema_info"
        )
        result = cursor.fetchone()
        return result[0] if result[0] is not None else 0
    except sqlite3.OperationalError:
        # Table doesn't exist yet
        return 0


def apply_schema(conn: sqlite3.Connection, version: int = CURRENT_VERSION) -> None:
    """
    Apply schema migrations up to the given version.

    Runs under an immediate transaction so concurrent processes opening a
    fresh database apply each migration once. Unlike a rebuildable index,
    records here are the only copy of what the scanners saw, so migrations
    never drop tables.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        current = get_schema_version(conn)
        for migration_version, description, statements in get_migrations():
            if current < migration_version <= version:
                logger.info("Applying schema v%d: %s", migration_version, description)
                for statement in statements:
                    conn.execute(statement)
                conn.execute(
                    "INSERT OR REPLACE INTO _schema_info (version, description) VALUES (?, ?)",
                    (migration_version, description)
                )
        conn.commit()
    except BaseException:
        conn.rollback()
        raise


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Ensure database has current schema, migrating if necessary."""
    current = get_schema_version(conn)

    if current < CURRENT_VERSION:
        apply_schema(conn, CURRENT_VERSION)


def get_migrations() -> List[Tuple[int, str, Sequence[str]]]:
    """
    Get list of migrations.

    Returns:
        List of (version, description, statements) tuples
    """
    return [
        (1, "Initial key/value records table", SCHEMA_V1),
    ]
