#!/usr/bin/env python3
"""
M0 to target model converter.

Usage:
    m0-convert operations [--config <config.json>] [--dataset <m0.trig>]
    m0-convert reports --schema <sims.csv> --msd <sims-msd.ttl> [--ids N ...] [--named-graphs]
    m0-convert codelists [--output <codelists.ttl>]
    m0-convert organizations [--output <organizations.ttl>]
    m0-convert links
    m0-convert mappings [--output <uri-mappings.txt>]
    m0-convert geo

Architecture:
    This module only dispatches; the cli/ package holds the commands
    (cli/commands), argument parsing (cli/parsers.py) and shared utilities
    (cli/helpers.py).
"""

import sys

from m0_converter.cli import (
    create_argument_parser,
    OperationsCommand,
    ReportsCommand,
    CodeListsCommand,
    OrganizationsCommand,
    LinksCommand,
    MappingsCommand,
    GeoCommand,
)


# Command mapping from command name to Command class
COMMAND_MAP = {
    'operations': OperationsCommand,
    'reports': ReportsCommand,
    'codelists': CodeListsCommand,
    'organizations': OrganizationsCommand,
    'links': LinksCommand,
    'mappings': MappingsCommand,
    'geo': GeoCommand,
}


def main(argv=None):
    """
    Main entry point for the CLI.

    Parses command-line arguments and dispatches to the command handler.
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    command_class = COMMAND_MAP.get(args.command)

    if command_class is None:
        print(f"Error: Unknown command '{args.command}'")
        parser.print_help()
        sys.exit(1)

    config_path = getattr(args, 'config', None)
    command = command_class(config_path=config_path)

    exit_code = command.execute(args)
    sys.exit(exit_code)


if __name__ == '__main__':
    main()
