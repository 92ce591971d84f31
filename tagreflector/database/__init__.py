"""
Database module for tagreflector.

Provides SQLite-based persistence for scanned image tags.

Key components:
- connection: Database connection management
- schema: Table definitions and schema versioning
- codec: Current and legacy record encodings
- tags: TagStore, the per-repository tag cache
"""

from .connection import (
    get_connection,
    get_db_path,
    Database,
    get_database_info,
    reset_database,
    transaction,
)
from .schema import CURRENT_VERSION, ensure_schema
from .codec import encode_tags, decode_tags
from .tags import TagStore, TAGS_PREFIX, key_for_repo

__all__ = [
    # Connection
    'get_connection',
    'get_db_path',
    'Database',
    'get_database_info',
    'reset_database',
    'transaction',
    # Schema
    'ensure_schema',
    'CURRENT_VERSION',
    # Codec
    'encode_tags',
    'decode_tags',
    # Tags
    'TagStore',
    'TAGS_PREFIX',
    'key_for_repo',
]
