"""
Construction of policies from configuration.

A policy choice names exactly one strategy, in the same shape the image
policy resource uses:

    {"semver": {"range": "^1.0"}}
    {"alphabetical": {"order": "DESC"}}
    {"numerical": {"order": "ASC"}}
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import PolicyConfigError
from .alphabetical import Alphabetical
from .base import Policer
from .numerical import Numerical
from .semver import SemVer

POLICY_KINDS = ('semver', 'alphabetical', 'numerical')


@dataclass(frozen=True)
class PolicyChoice:
    """
    Exactly one of the three policy settings.

    Attributes:
        semver_range: Range expression for the semver policy
        alphabetical_order: Order keyword for the alphabetical policy
        numerical_order: Order keyword for the numerical policy
    """

    semver_range: Optional[str] = None
    alphabetical_order: Optional[str] = None
    numerical_order: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PolicyChoice':
        """
        Parse a policy choice mapping.

        Raises:
            PolicyConfigError: If the mapping has unknown keys or bad shapes
        """
        if not isinstance(data, dict):
            raise PolicyConfigError(f"policy must be a mapping, got {type(data).__name__}")

        unknown = set(data) - set(POLICY_KINDS)
        if unknown:
            raise PolicyConfigError(
                f"unknown policy kind(s): {', '.join(sorted(unknown))}; "
                f"expected one of: {', '.join(POLICY_KINDS)}"
            )

        def setting(kind: str, field: str) -> Optional[str]:
            if kind not in data:
                return None
            block = data[kind] or {}
            if not isinstance(block, dict):
                raise PolicyConfigError(f"'{kind}' policy must be a mapping")
            value = block.get(field, "")
            if not isinstance(value, str):
                raise PolicyConfigError(f"'{kind}.{field}' must be a string")
            return value

        return cls(
            semver_range=setting('semver', 'range'),
            alphabetical_order=setting('alphabetical', 'order'),
            numerical_order=setting('numerical', 'order'),
        )

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        """Convert back to the configuration mapping."""
        result = {}
        if self.semver_range is not None:
            result['semver'] = {'range': self.semver_range}
        if self.alphabetical_order is not None:
            result['alphabetical'] = {'order': self.alphabetical_order}
        if self.numerical_order is not None:
            result['numerical'] = {'order': self.numerical_order}
        return result


def build_policy(choice: PolicyChoice) -> Policer:
    """
    Construct the policy named by a choice.

    Raises:
        PolicyConfigError: If no policy or more than one policy is set, or
            the selected policy rejects its setting
    """
    selected = [
        value is not None
        for value in (choice.semver_range, choice.alphabetical_order, choice.numerical_order)
    ]
    if not any(selected):
        raise PolicyConfigError("no policy given")
    if sum(selected) > 1:
        raise PolicyConfigError("more than one policy given")

    if choice.semver_range is not None:
        return SemVer(choice.semver_range)
    if choice.alphabetical_order is not None:
        return Alphabetical(choice.alphabetical_order)
    return Numerical(choice.numerical_order)
