"""Numerical ordering policy."""

import math
import re
from typing import List, Sequence, Tuple

from ..domain import Tag
from ..errors import TagParseError
from .base import Policer, ORDER_DESC, validate_order

# Optional sign, integer or decimal digits, optional exponent
NUMBER_PATTERN = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?', re.ASCII)


def parse_number(name: str) -> float:
    """
    Parse a tag name as a real number.

    Accepts integers ("1606364286", "-62") and decimals ("47.40", "1e3").
    Rejects anything else, including "nan", "inf" and names with spaces.

    Raises:
        TagParseError: If the name is not numeric
    """
    if not NUMBER_PATTERN.fullmatch(name):
        raise TagParseError(name)
    value = float(name)
    if math.isinf(value):
        raise TagParseError(name, "value out of range")
    return value


class Numerical(Policer):
    """
    Orders tags by the numeric value of their names.

    Every name must be numeric; a single non-numeric name fails the whole
    evaluation. ASC selects the largest value, DESC the smallest. Among
    equal values the first one in the input wins.
    """

    def __init__(self, order: str = ""):
        self.order = validate_order(order)

    def latest(self, tags: Sequence[Tag]) -> Tag:
        self._require_tags(tags)

        parsed: List[Tuple[float, Tag]] = [(parse_number(tag.name), tag) for tag in tags]

        best_value, best_tag = parsed[0]
        for value, tag in parsed[1:]:
            if self.order == ORDER_DESC:
                better = value < best_value
            else:
                better = value > best_value
            if better:
                best_value, best_tag = value, tag
        return best_tag

    def __repr__(self) -> str:
        return f"Numerical(order={self.order!r})"
