"""
Regular expression pre-filter for policies.

Narrows a tag list to the names matching a pattern and, optionally,
rewrites each matching name from a replacement template before the list
is handed to a policy. The filter remembers which original tag produced
each rewritten name so the policy's choice can be mapped back.

Templates use dollar references to capture groups:
    "$1" or "${1}"        numbered group
    "$ts" or "${ts}"      named group (?P<ts>...)
    "$$"                  a literal "$"

A reference to a group that does not exist or did not participate in the
match expands to "".
"""

import re
from typing import Dict, List, Sequence

from ..domain import Tag
from ..errors import PolicyConfigError

TEMPLATE_REFERENCE = re.compile(r'\$(?:(\$)|\{(\w+)\}|(\w+))', re.ASCII)


def expand_template(match: re.Match, template: str) -> str:
    """Expand a dollar-reference template against a regex match."""

    def substitute(ref: re.Match) -> str:
        if ref.group(1):
            return '$'
        name = ref.group(2) or ref.group(3)
        if name.isdigit():
            index = int(name)
            if index > match.re.groups:
                return ''
            return match.group(index) or ''
        if name not in match.re.groupindex:
            return ''
        return match.group(name) or ''

    return TEMPLATE_REFERENCE.sub(substitute, template)


class RegexFilter:
    """
    Filters and optionally renames tags by regular expression.

    apply() rebuilds the filter's state on every call, so one instance must
    not be shared by concurrent evaluations.

    Example:
        f = RegexFilter(r'^main-[a-f0-9]+-(?P<ts>\\d+)$', '$ts')
        f.apply(tags)
        chosen = policy.latest(f.items())
        original = f.get_original_tag(chosen.name)
    """

    def __init__(self, pattern: str, replace: str = ""):
        try:
            self.regexp = re.compile(pattern)
        except re.error as exc:
            raise PolicyConfigError(f"invalid regular expression pattern '{pattern}': {exc}") from exc
        self.replace = replace
        self._filtered: Dict[str, Tag] = {}

    @property
    def pattern(self) -> str:
        return self.regexp.pattern

    def apply(self, tags: Sequence[Tag]) -> None:
        """Build the filtered set from a list of tags."""
        filtered: Dict[str, Tag] = {}
        for tag in tags:
            match = self.regexp.search(tag.name)
            if match is None:
                continue
            name = tag.name
            if self.replace:
                name = expand_template(match, self.replace)
            filtered[name] = tag
        self._filtered = filtered

    def items(self) -> List[Tag]:
        """Return the filtered tags under their (possibly rewritten) names."""
        return [Tag(name=name, digest=tag.digest) for name, tag in self._filtered.items()]

    def get_original_tag(self, name: str) -> Tag:
        """
        Return the tag that produced a filtered name.

        Returns Tag("", "") if apply() never produced that name.
        """
        return self._filtered.get(name, Tag(name="", digest=""))

    def __repr__(self) -> str:
        return f"RegexFilter(pattern={self.pattern!r}, replace={self.replace!r})"
