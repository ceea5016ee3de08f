"""
CLI command implementations.

- base.py: Base command class
- migrate.py: Migration commands, one per output
"""

from .base import BaseCommand
from .migrate import (
    MigrationCommand,
    OperationsCommand,
    ReportsCommand,
    CodeListsCommand,
    OrganizationsCommand,
    LinksCommand,
    MappingsCommand,
    GeoCommand,
)

__all__ = [
    'BaseCommand',
    'MigrationCommand',
    'OperationsCommand',
    'ReportsCommand',
    'CodeListsCommand',
    'OrganizationsCommand',
    'LinksCommand',
    'MappingsCommand',
    'GeoCommand',
]
