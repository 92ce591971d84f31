"""
Tag domain object for tagreflector.

A tag is a named reference to an image in a registry repository, paired
with the content digest it pointed at when it was scanned:
- Release tags: "v1.2.3", "1.0.0-rc.1"
- Build tags: "1606364286", "build-42"
- Floating tags: "latest", "stable"

Tags are immutable value objects. The digest is opaque and may be empty.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List


@dataclass(frozen=True)
class Tag:
    """
    Image tag with its digest.

    Examples:
        Tag("v1.2.3", "sha256:abc...")
        Tag("latest")                     -> Tag(name="latest", digest="")

    Attributes:
        name: Tag string as it appears in the registry
        digest: Content address of the tagged manifest, or ""
    """

    name: str
    digest: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Tag':
        """
        Build a Tag from its persisted mapping.

        Args:
            data: Mapping with "Name" and "Digest" keys. Keys match
                case-insensitively, an exact match wins, and a missing or
                null field reads as ""

        Returns:
            Tag object
        """
        if not isinstance(data, dict):
            raise TypeError(f"tag record must be an object, got {type(data).__name__}")
        name = _field(data, "Name") or ""
        digest = _field(data, "Digest") or ""
        if not isinstance(name, str) or not isinstance(digest, str):
            raise TypeError(f"tag fields must be strings, got {data!r}")
        return cls(name=name, digest=digest)

    def to_dict(self) -> Dict[str, str]:
        """Convert to the persisted mapping."""
        return {
            'Name': self.name,
            'Digest': self.digest,
        }

    def __str__(self) -> str:
        if self.digest:
            return f"{self.name}@{self.digest}"
        return self.name


def _field(data: Dict[str, Any], key: str) -> Any:
    if key in data:
        return data[key]
    folded = key.casefold()
    for candidate, value in data.items():
        if isinstance(candidate, str) and candidate.casefold() == folded:
            return value
    return None


# =============================================================================
# UTILITY FUNCTIONS (operate on Tag objects)
# =============================================================================

def tags_from_names(names: Iterable[str]) -> List[Tag]:
    """Convert bare tag names to Tag objects with empty digests."""
    return [Tag(name=name) for name in names]


def tags_to_names(tags: Iterable[Tag]) -> List[str]:
    """Convert a list of Tag objects to their names."""
    return [tag.name for tag in tags]


def parse_tag_reference(ref: str) -> Tag:
    """
    Parse a "name[@digest]" reference as typed on the command line.

    Examples:
        parse_tag_reference("v1.0.0")                -> Tag("v1.0.0")
        parse_tag_reference("v1.0.0@sha256:abc")     -> Tag("v1.0.0", "sha256:abc")
    """
    name, sep, digest = ref.strip().partition('@')
    if not name:
        raise ValueError(f"invalid tag reference: {ref!r}")
    return Tag(name=name, digest=digest if sep else "")
