"""
Selection service for tagreflector.

Answers "which tag should be deployed now" for a repository: reads the
cached tags, optionally narrows them with a regex filter, asks the
configured policy for the latest one and maps the answer back to the
tag as it exists in the registry.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence
import logging

from ..database import TagStore
from ..domain import Tag
from ..errors import PolicyConfigError
from ..policy import Policer, PolicyChoice, RegexFilter, build_policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterSpec:
    """Pattern and optional replacement template for a RegexFilter."""

    pattern: str
    extract: str = ""

    def build(self) -> RegexFilter:
        return RegexFilter(self.pattern, self.extract)


@dataclass(frozen=True)
class SelectionRule:
    """
    A configured selection: one policy plus an optional tag filter.

    Mapping form (as stored under "policies" in the config file):
        {
            "policy": {"semver": {"range": "^1.0"}},
            "filterTags": {"pattern": "^v(?P<v>.*)$", "extract": "$v"}
        }
    """

    policy: PolicyChoice
    filter_tags: Optional[FilterSpec] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SelectionRule':
        if not isinstance(data, dict) or 'policy' not in data:
            raise PolicyConfigError("selection rule must be a mapping with a 'policy' key")

        filter_spec = None
        filter_data = data.get('filterTags')
        if filter_data:
            if not isinstance(filter_data, dict) or not isinstance(filter_data.get('pattern'), str):
                raise PolicyConfigError("'filterTags' must be a mapping with a 'pattern' string")
            filter_spec = FilterSpec(
                pattern=filter_data['pattern'],
                extract=filter_data.get('extract') or "",
            )

        return cls(policy=PolicyChoice.from_dict(data['policy']), filter_tags=filter_spec)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'policy': self.policy.to_dict()}
        if self.filter_tags:
            result['filterTags'] = {
                'pattern': self.filter_tags.pattern,
                'extract': self.filter_tags.extract,
            }
        return result


def select_latest(
    tags: Sequence[Tag],
    policy: Policer,
    regex_filter: Optional[RegexFilter] = None,
) -> Tag:
    """
    Run a tag list through an optional filter and a policy.

    Args:
        tags: Candidate tags as stored
        policy: Policy choosing the latest tag
        regex_filter: Filter applied first; the chosen name is mapped back
            through it so the result is always an original tag

    Returns:
        The selected tag, with its original name and digest
    """
    if regex_filter is None:
        return policy.latest(tags)

    regex_filter.apply(tags)
    chosen = policy.latest(regex_filter.items())
    return regex_filter.get_original_tag(chosen.name)


class SelectionService:
    """
    Resolves the latest tag for repositories under one selection rule.

    The policy is built once, when the service is created, so a bad rule
    fails here rather than on the first evaluation. A fresh RegexFilter is
    built for every select() call; the service can be shared between
    threads.

    Example:
        rule = SelectionRule.from_dict({"policy": {"semver": {"range": "1.0.x"}}})
        service = SelectionService(TagStore(), rule)
        tag = service.select("library/nginx")
    """

    def __init__(self, store: TagStore, rule: SelectionRule):
        self.store = store
        self.rule = rule
        self.policy = build_policy(rule.policy)
        if rule.filter_tags:
            # Compile once up front to surface a bad pattern early
            rule.filter_tags.build()

    def select(self, repository: str) -> Tag:
        """
        Select the latest tag for a repository.

        Raises:
            EmptyInputError: If no tags are stored, or the filter removed them all
            NoMatchError: If the semver range matched nothing
            TagParseError: If a numerical policy saw a non-numeric name
            DecodeError: If the stored record is unreadable
        """
        tags = self.store.get(repository)
        regex_filter = self.rule.filter_tags.build() if self.rule.filter_tags else None

        selected = select_latest(tags, self.policy, regex_filter)
        logger.debug("Selected %s for %s using %r", selected, repository, self.policy)
        return selected
