"""
Common policy contract.

A policy picks the single "latest" tag out of a candidate list. Policies
validate their configuration when constructed and hold no state between
calls.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ..domain import Tag
from ..errors import EmptyInputError, PolicyConfigError

# Order keywords shared by the alphabetical and numerical policies
ORDER_ASC = "ASC"
ORDER_DESC = "DESC"


def validate_order(order: str) -> str:
    """
    Normalize an order keyword.

    "" defaults to ORDER_ASC; anything other than ORDER_ASC or ORDER_DESC
    is rejected.
    """
    if order == "":
        return ORDER_ASC
    if order in (ORDER_ASC, ORDER_DESC):
        return order
    raise PolicyConfigError(
        f"invalid order argument provided: '{order}', must be one of: {ORDER_ASC}, {ORDER_DESC}"
    )


class Policer(ABC):
    """Interface implemented by every tag selection policy."""

    @abstractmethod
    def latest(self, tags: Sequence[Tag]) -> Tag:
        """
        Return the latest tag from a non-empty list.

        Raises:
            EmptyInputError: If tags is empty
        """

    @staticmethod
    def _require_tags(tags: Sequence[Tag]) -> None:
        if len(tags) == 0:
            raise EmptyInputError()
