"""
Base command class for CLI commands.

Commands load the JSON configuration once, configure logging from it, and
share the loading of the M0 dataset and of the run context.
"""

import argparse
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from rdflib import Graph

from ...config import ConverterConfig
from ...formats.rdf import M0Store, RDFGraphParser
from ...migration import MigrationContext
from ...shared.models import Diagnostics
from ..helpers import load_config, get_default_config_path, setup_logging, print_header, print_footer

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """
    Base class for all CLI commands.

    Subclasses implement ``execute`` and return a process exit code.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self._config: Optional[Dict[str, Any]] = None
        self.diagnostics = Diagnostics()

    @property
    def config(self) -> Dict[str, Any]:
        """Configuration dictionary; empty when no file is given and no default exists."""
        if self._config is None:
            path = self.config_path
            if path is None and Path(get_default_config_path()).is_file():
                path = get_default_config_path()
            self._config = load_config(path) if path else {}
        return self._config

    def setup_logging_from_config(self) -> None:
        log_config = self.config.get('logging', {})
        setup_logging(log_config.get('level', 'INFO'), log_config.get('file'))

    def converter_config(self, args: argparse.Namespace) -> ConverterConfig:
        """Configuration dataclass, with command line paths taking precedence."""
        converter_config = ConverterConfig.from_dict(self.config)
        for arg_name, field_name in (
            ('dataset', 'dataset_path'),
            ('output_dir', 'output_dir'),
            ('schema', 'schema_path'),
            ('msd', 'msd_path'),
        ):
            value = getattr(args, arg_name, None)
            if value:
                setattr(converter_config, field_name, value)
        return converter_config

    def load_store(self, converter_config: ConverterConfig, args: argparse.Namespace) -> M0Store:
        """
        Load the M0 dataset.

        Raises:
            ValueError: If no dataset is configured or its content is invalid.
            FileNotFoundError: If the dataset file does not exist.
            MemoryError: If the file is too large for the available memory.
        """
        if not converter_config.dataset_path:
            raise ValueError("No M0 dataset given: use --dataset or 'source.dataset' in the configuration")
        dataset, quad_count = RDFGraphParser.parse_dataset_file(
            converter_config.dataset_path,
            force_large_file=getattr(args, 'force_memory', False),
        )
        print(f"✓ Loaded {quad_count} statements from {converter_config.dataset_path}")
        return M0Store(dataset)

    @staticmethod
    def load_optional_graph(path: Optional[str], description: str) -> Optional[Graph]:
        """Load an optional auxiliary graph; failures are reported and give None."""
        if not path:
            return None
        try:
            return RDFGraphParser.parse_graph_file(path)
        except (FileNotFoundError, ValueError) as e:
            logger.warning(f"Error while reading the {description} - {e}")
            return None

    def build_context(self, converter_config: ConverterConfig, store: M0Store) -> MigrationContext:
        return MigrationContext.build(
            store,
            converter_config,
            self.diagnostics,
            code_list_graph=self.load_optional_graph(converter_config.code_list_graph_path, "target code lists"),
            target_organizations=self.load_optional_graph(
                converter_config.target_organizations_path, "target organization model"
            ),
        )

    def output_path(self, converter_config: ConverterConfig, args: argparse.Namespace, default_name: str) -> Path:
        output = getattr(args, 'output', None)
        return Path(output) if output else Path(converter_config.output_dir) / default_name

    def print_diagnostics(self) -> None:
        print_header("CONVERSION SUMMARY")
        print(self.diagnostics.get_summary())
        print_footer()

    @abstractmethod
    def execute(self, args: argparse.Namespace) -> int:
        """Run the command and return the exit code."""
