"""
CLI module for the M0 converter.

- commands/: Command implementations
- parsers.py: Argument parsing configuration
- helpers.py: Shared CLI utilities
"""

from .commands import (
    BaseCommand,
    OperationsCommand,
    ReportsCommand,
    CodeListsCommand,
    OrganizationsCommand,
    LinksCommand,
    MappingsCommand,
    GeoCommand,
)

from .parsers import create_argument_parser

from .helpers import (
    load_config,
    get_default_config_path,
    setup_logging,
)

__all__ = [
    'BaseCommand',
    'OperationsCommand',
    'ReportsCommand',
    'CodeListsCommand',
    'OrganizationsCommand',
    'LinksCommand',
    'MappingsCommand',
    'GeoCommand',
    'create_argument_parser',
    'load_config',
    'get_default_config_path',
    'setup_logging',
]
