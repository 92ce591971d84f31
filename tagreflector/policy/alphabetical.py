"""Alphabetical ordering policy."""

from typing import Dict, Sequence

from ..domain import Tag
from .base import Policer, ORDER_DESC, validate_order


class Alphabetical(Policer):
    """
    Orders tag names as plain strings.

    ASC selects the name that sorts last (e.g. "20.10" over "16.04",
    "zesty" over "artful"); DESC selects the name that sorts first.
    """

    def __init__(self, order: str = ""):
        self.order = validate_order(order)

    def latest(self, tags: Sequence[Tag]) -> Tag:
        self._require_tags(tags)

        tags_by_name: Dict[str, Tag] = {}
        for tag in tags:
            tags_by_name[tag.name] = tag

        if self.order == ORDER_DESC:
            selected = min(tags_by_name)
        else:
            selected = max(tags_by_name)
        return tags_by_name[selected]

    def __repr__(self) -> str:
        return f"Alphabetical(order={self.order!r})"
