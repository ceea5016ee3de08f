"""
Argument parsing configuration for the M0 converter CLI.
"""

import argparse

EPILOG = """
Examples:
  m0-convert operations --dataset m0.trig --output-dir out
  m0-convert reports --dataset m0.trig --schema sims.csv --msd sims-msd.ttl --named-graphs
  m0-convert reports --config config.json --ids 1501 1502
  m0-convert mappings --config config.json --output mappings.txt
"""


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--config', help='Path to configuration file (default: ./config.json)')
    parser.add_argument('--dataset', help='M0 dataset file (TriG or N-Quads)')
    parser.add_argument('--output-dir', dest='output_dir', help='Directory receiving the output files')
    parser.add_argument('--force-memory', dest='force_memory', action='store_true',
                        help='Skip the memory check before loading the dataset')


def _add_output_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--output', '-o', help='Output file (default: in the output directory)')


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser with one subcommand per migration step."""
    parser = argparse.ArgumentParser(
        prog='m0-convert',
        description='Migrate the M0 metadata graph to the SKOS/ORG/PROV/SIMS target model',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    operations_parser = subparsers.add_parser(
        'operations', help='Convert families, series, operations and indicators'
    )
    _add_common_arguments(operations_parser)

    reports_parser = subparsers.add_parser('reports', help='Convert metadata reports')
    _add_common_arguments(reports_parser)
    _add_output_argument(reports_parser)
    reports_parser.add_argument('--schema', help='CSV of report attributes (code;predicate)')
    reports_parser.add_argument('--msd', help='Turtle file declaring the attribute ranges')
    reports_parser.add_argument('--ids', type=int, nargs='+', help='Convert only these documentation numbers')
    reports_parser.add_argument('--named-graphs', dest='named_graphs', action='store_true',
                                help='Write each report in its own named graph')

    for name, help_text in (
        ('codelists', 'Convert code lists to SKOS concept schemes'),
        ('organizations', 'Convert organizations'),
        ('mappings', 'Export the M0 to target URI mapping'),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        _add_common_arguments(command_parser)
        _add_output_argument(command_parser)

    links_parser = subparsers.add_parser('links', help='Convert links and documents')
    _add_common_arguments(links_parser)

    geo_parser = subparsers.add_parser(
        'geo', help='Create geographic features and match the geographic code list'
    )
    _add_common_arguments(geo_parser)

    return parser
