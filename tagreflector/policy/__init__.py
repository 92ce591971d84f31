"""
Tag selection policies.

Each policy picks the single latest tag from a candidate list:
- Alphabetical: string ordering
- Numerical: numeric ordering of names
- SemVer: highest semantic version inside a range

RegexFilter narrows and renames candidates before a policy sees them.
"""

from .base import Policer, ORDER_ASC, ORDER_DESC, validate_order
from .alphabetical import Alphabetical
from .numerical import Numerical
from .semver import SemVer
from .filter import RegexFilter, expand_template
from .builder import PolicyChoice, build_policy

__all__ = [
    'Policer',
    'ORDER_ASC',
    'ORDER_DESC',
    'validate_order',
    'Alphabetical',
    'Numerical',
    'SemVer',
    'RegexFilter',
    'expand_template',
    'PolicyChoice',
    'build_policy',
]
