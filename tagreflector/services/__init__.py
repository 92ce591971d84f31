"""
Service layer for tagreflector.

Contains the logic that combines the tag store with the policies:
- SelectionService: Latest-tag selection for a repository

Services are the primary API for commands to use.
"""

from .selection_service import (
    FilterSpec,
    SelectionRule,
    SelectionService,
    select_latest,
)

__all__ = [
    'FilterSpec',
    'SelectionRule',
    'SelectionService',
    'select_latest',
]
