"""
Encoding of tag records.

Current format: JSON array of {"Name": ..., "Digest": ...} objects.
Legacy format: JSON array of bare tag names, written before digests were
recorded. Both decode to a list of Tag objects.
"""

import json
import logging
from typing import Iterable, List

from ..domain import Tag, tags_from_names
from ..errors import DecodeError

logger = logging.getLogger(__name__)


def encode_tags(tags: Iterable[Tag]) -> bytes:
    """Serialize tags in the current record format."""
    return json.dumps([tag.to_dict() for tag in tags]).encode('utf-8')


def decode_tags(data: bytes) -> List[Tag]:
    """
    Deserialize a stored record.

    Tries the current format first, then the legacy bare-name format.

    Raises:
        DecodeError: If neither format matches; carries both failures
    """
    try:
        return _decode_current(data)
    except (ValueError, TypeError, KeyError, AttributeError) as first:
        try:
            tags = _decode_legacy(data)
        except (ValueError, TypeError) as second:
            raise DecodeError(first, second) from second
        logger.info("Decoded %d tags from legacy record format", len(tags))
        return tags


def _decode_current(data: bytes) -> List[Tag]:
    items = json.loads(data)
    if items is None:
        return []
    if not isinstance(items, list):
        raise TypeError(f"expected a JSON array, got {type(items).__name__}")
    return [Tag.from_dict(item) for item in items]


def _decode_legacy(data: bytes) -> List[Tag]:
    names = json.loads(data)
    if names is None:
        return []
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise TypeError("expected a JSON array of strings")
    return tags_from_names(names)
