"""
Migration commands.

Each command loads the M0 dataset, runs one extraction and writes its
output graph(s) under the output directory:

    operations     families, series, operations (operations.ttl) and indicators (indicators.ttl)
    reports        metadata reports (reports.trig)
    codelists      code lists as SKOS concept schemes (codelists.ttl)
    organizations  organizations (organizations.ttl)
    links          links (links.ttl) and documents (documents.ttl)
    mappings       M0 URI -> target URI table (uri-mappings.txt)
    geo            geographic features and code correspondences
"""

import argparse
import logging
from abc import abstractmethod
from pathlib import Path
from typing import List, Optional

from ...common.id_generator import MappingConflictError, PoolExhaustedError
from ...config import ConverterConfig
from ...converters.codelist_extractor import CodeListExtractor
from ...converters.geo_features import GeoFeatureModelMaker
from ...converters.link_converter import LinkConverter
from ...converters.organization_extractor import OrganizationExtractor
from ...core.http_client import GeoAPIError, GeoFeatureClient
from ...formats.rdf import M0Store, write_dataset, write_graph, write_lines
from ...formats.schema import SchemaReader, SchemaResourceError
from ...migration import MigrationContext, OperationMigrator, build_report_converter
from .base import BaseCommand

logger = logging.getLogger(__name__)


class MigrationCommand(BaseCommand):
    """
    Template for the migration commands: configuration, dataset loading,
    optional context building, then ``run``.
    """

    needs_context = True

    def execute(self, args: argparse.Namespace) -> int:
        try:
            self.setup_logging_from_config()
            converter_config = self.converter_config(args)
        except (ValueError, FileNotFoundError, IOError) as e:
            print(f"✗ Configuration error: {e}")
            return 1

        try:
            store = self.load_store(converter_config, args)
            context = self.build_context(converter_config, store) if self.needs_context else None
        except (ValueError, FileNotFoundError) as e:
            print(f"✗ Cannot load M0 dataset: {e}")
            return 1
        except MemoryError as e:
            print(f"✗ {e}\n\nTip: Use --force-memory to skip the memory check.")
            return 1
        except (PoolExhaustedError, MappingConflictError) as e:
            print(f"✗ Identifier allocation failed: {e}")
            return 1

        try:
            written = self.run(args, converter_config, store, context)
        except SchemaResourceError as e:
            print(f"✗ Report schema error: {e}")
            return 1
        except GeoAPIError as e:
            print(f"✗ Geographic API error: {e}")
            return 1
        except OSError as e:
            print(f"✗ Error writing output: {e}")
            return 1

        for path in written:
            print(f"✓ Saved to: {path}")
        self.print_diagnostics()
        return 0

    @abstractmethod
    def run(
        self,
        args: argparse.Namespace,
        converter_config: ConverterConfig,
        store: M0Store,
        context: Optional[MigrationContext],
    ) -> List[Path]:
        """Run the extraction and return the written files."""


class OperationsCommand(MigrationCommand):
    """Families, series and operations with their relations, and indicators."""

    def run(self, args, converter_config, store, context) -> List[Path]:
        migrator = OperationMigrator(context)
        output_dir = Path(converter_config.output_dir)
        operations = migrator.extract_all_operations()
        indicators = migrator.extract_indicators()
        print(f"✓ {len(operations)} statements on operations, {len(indicators)} on indicators")
        return [
            write_graph(operations, output_dir / "operations.ttl"),
            write_graph(indicators, output_dir / "indicators.ttl"),
        ]


class ReportsCommand(MigrationCommand):
    """Metadata reports, in the default graph or one named graph per report."""

    def run(self, args, converter_config, store, context) -> List[Path]:
        if not converter_config.schema_path or not converter_config.msd_path:
            raise SchemaResourceError("Both the report schema and the MSD are required (--schema, --msd)")
        schema = SchemaReader.read(converter_config.schema_path, converter_config.msd_path)
        converter = build_report_converter(context, schema)
        dataset = converter.convert_reports(
            ids=getattr(args, 'ids', None) or None,
            named_graphs=getattr(args, 'named_graphs', False),
        )
        return [write_dataset(dataset, self.output_path(converter_config, args, "reports.trig"))]


class CodeListsCommand(MigrationCommand):
    needs_context = False

    def run(self, args, converter_config, store, context) -> List[Path]:
        graph = CodeListExtractor(store, self.diagnostics).extract()
        return [write_graph(graph, self.output_path(converter_config, args, "codelists.ttl"))]


class OrganizationsCommand(MigrationCommand):
    needs_context = False

    def run(self, args, converter_config, store, context) -> List[Path]:
        target = self.load_optional_graph(converter_config.target_organizations_path, "target organization model")
        graph = OrganizationExtractor(store, converter_config, self.diagnostics, target).extract()
        return [write_graph(graph, self.output_path(converter_config, args, "organizations.ttl"))]


class LinksCommand(MigrationCommand):
    needs_context = False

    def run(self, args, converter_config, store, context) -> List[Path]:
        converter = LinkConverter(store, converter_config, self.diagnostics)
        output_dir = Path(converter_config.output_dir)
        return [
            write_graph(converter.convert_links(), output_dir / "links.ttl"),
            write_graph(converter.convert_documents(), output_dir / "documents.ttl"),
        ]


class MappingsCommand(MigrationCommand):
    """Export the target URI mapping as 'M0 URI;target URI' lines."""

    def run(self, args, converter_config, store, context) -> List[Path]:
        lines = context.mapping_lines()
        print(f"✓ {len(lines)} URI mappings")
        return [write_lines(lines, self.output_path(converter_config, args, "uri-mappings.txt"))]


class GeoCommand(MigrationCommand):
    """Geographic features and their correspondence with the M0 geographic code list."""

    needs_context = False

    def run(self, args, converter_config, store, context) -> List[Path]:
        if not converter_config.geo_api_url:
            raise GeoAPIError(0, 'NoApiUrl', "No geographic API URL configured ('geo.api_url')")
        client = GeoFeatureClient(converter_config.geo_api_url, timeout=converter_config.geo_timeout)
        maker = GeoFeatureModelMaker(client, converter_config)
        features = maker.create_features()
        print(f"✓ {len(maker.label_index)} geographic features")
        code_lists = CodeListExtractor(store, self.diagnostics).extract()
        matched, unresolved = maker.correspondences(code_lists)
        output_dir = Path(converter_config.output_dir)
        return [
            write_graph(features, output_dir / "geo-features.ttl"),
            write_lines(matched.items(), output_dir / "geo-correspondences.txt"),
            write_lines(unresolved, output_dir / "geo-to-create.txt"),
        ]
