"""
Domain layer for tagreflector.

Contains pure domain objects with no I/O or side effects:
- Tag: An image tag paired with its digest

These objects are immutable and provide serialization methods
for the persisted record format.
"""

from .tag import Tag, tags_from_names, tags_to_names, parse_tag_reference

__all__ = [
    'Tag',
    'tags_from_names',
    'tags_to_names',
    'parse_tag_reference',
]
