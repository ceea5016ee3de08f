"""
Shared data models for the M0 converter.

- entity_types: M0 entity types, declared ranges and schema entries
- conversion: diagnostics accumulated during a conversion run
"""

from .entity_types import (
    EntityType,
    DeclaredRange,
    SchemaEntry,
)
from .conversion import Diagnostics, Issue, IssueKind, ISSUE_LEVELS

__all__ = [
    'EntityType',
    'DeclaredRange',
    'SchemaEntry',
    'Diagnostics',
    'Issue',
    'IssueKind',
    'ISSUE_LEVELS',
]
