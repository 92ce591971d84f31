"""
Semantic version range policy.

Ranges use npm-style syntax, as read by semantic_version.NpmSpec:
    "1.0.x"          any 1.0 patch release
    "^1.0"           >=1.0.0 <2.0.0
    "~1.0"           >=1.0.0 <1.1.0
    "=1.0.0"         exactly 1.0.0
    ">0,<2.0"        comma (or a space) means AND
    ">= 1.0"         whitespace after an operator is allowed
    "^1.0 || ^2.0"   "||" separates alternatives

Pre-release versions only satisfy a range when one of its comparators
names a pre-release of the same major.minor.patch ("1.0.x" never selects
"1.0.1-rc.1"; ">=1.0.0-0" accepts "1.0.0-rc.1").
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple

import semantic_version

from ..domain import Tag
from ..errors import NoMatchError, PolicyConfigError
from .base import Policer

logger = logging.getLogger(__name__)

# Whitespace between a comparison operator and its version (">= 1.0")
OPERATOR_SPACE = re.compile(r'([<>=~^]+)\s+')


def normalize_clause(clause: str) -> str:
    """Join an operator to its version: ">= 1.0" becomes ">=1.0"."""
    return OPERATOR_SPACE.sub(r'\1', clause.strip())


def parse_range(expression: str) -> List[semantic_version.NpmSpec]:
    """
    Parse a range expression into its alternatives.

    Raises:
        PolicyConfigError: If the expression is blank or any clause is invalid
    """
    alternatives = []
    for alternative in expression.split('||'):
        clauses = [normalize_clause(clause) for clause in alternative.split(',')]
        if not all(clauses):
            raise PolicyConfigError(f"semver range '{expression}' contains an empty constraint")
        try:
            alternatives.append(semantic_version.NpmSpec(' '.join(clauses)))
        except ValueError as exc:
            raise PolicyConfigError(f"semver parse error for range '{expression}': {exc}") from exc
    return alternatives


def parse_version(name: str) -> Optional[semantic_version.Version]:
    """
    Parse a tag name as a strict semantic version.

    A single leading "v" is allowed ("v1.2.3"). Returns None for anything
    that is not major.minor.patch with optional pre-release and build parts.
    """
    candidate = name[1:] if name.startswith('v') else name
    try:
        return semantic_version.Version(candidate)
    except ValueError:
        return None


class SemVer(Policer):
    """
    Selects the highest semantic version inside a range.

    Tags that are not semantic versions are ignored, since registries
    freely mix release tags with "latest", branch names and build ids.
    """

    def __init__(self, range_expression: str):
        self.range = range_expression
        self._alternatives = parse_range(range_expression)

    def matches(self, version: semantic_version.Version) -> bool:
        """Check whether a parsed version satisfies the configured range."""
        return any(spec.match(version) for spec in self._alternatives)

    def latest(self, tags: Sequence[Tag]) -> Tag:
        self._require_tags(tags)

        best: Optional[Tuple[semantic_version.Version, Tag]] = None
        for tag in tags:
            version = parse_version(tag.name)
            if version is None:
                logger.debug("Skipping non-semver tag %r", tag.name)
                continue
            if not self.matches(version):
                continue
            if best is None or version > best[0]:
                best = (version, tag)

        if best is None:
            raise NoMatchError(
                f"unable to determine latest version from provided list for range '{self.range}'"
            )
        return best[1]

    def __repr__(self) -> str:
        return f"SemVer(range={self.range!r})"
