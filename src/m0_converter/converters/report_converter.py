"""
Report Converter - M0 documentation records to metadata reports.

Each M0 'documentation' record becomes one ``sdmx-mm:MetadataReport``.
The report schema lists the attributes in order; for each of them the
single raw value of the record is converted according to the declared
range of the attribute predicate, with one handler per range variant.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING

from rdflib import RDF, RDFS, XSD, BNode, Dataset, Graph, Literal, URIRef
from tqdm import tqdm

from ..constants import METADATA_REPORT, PRIMARY_LANGUAGE, SDMX_MM, SECONDARY_LANGUAGE, SIMS_REPORTED_ATTRIBUTE
from ..shared.models import DeclaredRange, Diagnostics, EntityType, IssueKind, SchemaEntry
from .uri_utils import M0Reference, M0URIUtils, uncapitalize

if TYPE_CHECKING:
    from ..config import ConverterConfig
    from ..formats.rdf.m0_store import M0Store

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

# (graph, report, entry, attribute reference, trimmed value)
RangeHandler = Callable[[Graph, URIRef, SchemaEntry, M0Reference, str], None]


class ReportConverter:
    """
    Converts documentation records into metadata report graphs.

    Args:
        store: The M0 store.
        schema: Report attributes, in report order.
        config: Supplies the report, code and link base URIs.
        diagnostics: Issue accumulator.
        targets: Documentation number -> target URI of the documented
            series, operation or indicator.
        link_relations: Documentation number -> {attribute code -> [link
            numbers]}, for the references of free text attributes.

    Example:
        >>> converter = ReportConverter(store, schema, config)
        >>> dataset = converter.convert_reports([1580], named_graphs=True)
    """

    def __init__(
        self,
        store: 'M0Store',
        schema: List[SchemaEntry],
        config: 'ConverterConfig',
        diagnostics: Optional[Diagnostics] = None,
        targets: Optional[Mapping[int, str]] = None,
        link_relations: Optional[Mapping[int, Mapping[str, List[int]]]] = None,
    ):
        self._store = store
        self._schema = list(schema)
        self._config = config
        self._diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self._targets = dict(targets or {})
        self._link_relations = link_relations or {}
        self._handlers: Dict[DeclaredRange, RangeHandler] = {
            DeclaredRange.NONE: self._convert_text_with_links,
            DeclaredRange.REPORTED_ATTRIBUTE: self._convert_reported_attribute,
            DeclaredRange.PLAIN_STRING: self._convert_plain_string,
            DeclaredRange.DATE: self._convert_date,
            DeclaredRange.QUALITY_MEASUREMENT: self._convert_quality_measurement,
            DeclaredRange.CODED_REFERENCE: self._convert_coded_reference,
        }

    @property
    def diagnostics(self) -> Diagnostics:
        return self._diagnostics

    def convert_report(self, number: int) -> Graph:
        """
        Convert one documentation record.

        Args:
            number: The M0 documentation number.

        Returns:
            A graph holding the report and its properties.
        """
        graph = Graph()
        report = URIRef(self._config.report_uri(number))
        graph.add((report, RDF.type, METADATA_REPORT))
        graph.add((report, RDFS.label, Literal(f"Metadata report {number}", lang=SECONDARY_LANGUAGE)))
        graph.add((report, RDFS.label, Literal(f"Rapport de métadonnées {number}", lang=PRIMARY_LANGUAGE)))
        if number in self._targets:
            graph.add((report, SDMX_MM.target, URIRef(self._targets[number])))
        logger.debug(f"Metadata report resource created: {report}")

        for entry in self._schema:
            attribute_ref = M0Reference(EntityType.DOCUMENTATION, number, entry.code)
            value = self._entry_value(attribute_ref)
            if value is None:
                continue
            self._handlers[entry.declared_range](graph, report, entry, attribute_ref, value)
        return graph

    def _entry_value(self, attribute_ref: M0Reference, english: bool = False) -> Optional[str]:
        attribute_uri = attribute_ref.uri
        values = self._store.values(EntityType.DOCUMENTATION, attribute_uri, english=english)
        if not values:
            self._diagnostics.record(
                IssueKind.MISSING_VALUE, attribute_uri,
                f"No value found for attribute {attribute_ref.attribute}", logger,
            )
            return None
        if len(values) > 1:
            self._diagnostics.record(
                IssueKind.AMBIGUOUS_VALUE, attribute_uri,
                f"Multiple values found for attribute {attribute_ref.attribute} in {attribute_uri}", logger,
            )
            return None
        # Many M0 values are made of new line characters only
        value = str(values[0]).lstrip("\n").strip()
        if not value:
            self._diagnostics.record(
                IssueKind.EMPTY_VALUE, attribute_uri,
                f"Empty value found for attribute {attribute_ref.attribute}, ignoring", logger,
            )
            return None
        return value

    # Handlers, one per declared range

    def _convert_text_with_links(self, graph, report, entry, attribute_ref, value) -> None:
        text = BNode()
        graph.add((text, RDF.value, Literal(value, lang=PRIMARY_LANGUAGE)))
        for link_number in self._link_relations.get(attribute_ref.number, {}).get(entry.code, []):
            graph.add((text, RDFS.seeAlso, URIRef(self._config.link_uri(link_number))))
        graph.add((report, URIRef(entry.predicate), text))

    def _convert_reported_attribute(self, graph, report, entry, attribute_ref, value) -> None:
        # Placeholder: no reported attribute hierarchy is built
        graph.add((report, URIRef(entry.predicate), SIMS_REPORTED_ATTRIBUTE))

    def _convert_plain_string(self, graph, report, entry, attribute_ref, value) -> None:
        predicate = URIRef(entry.predicate)
        graph.add((report, predicate, Literal(value, lang=PRIMARY_LANGUAGE)))
        if self._store.values(EntityType.DOCUMENTATION, attribute_ref.uri, english=True):
            english = self._entry_value(attribute_ref, english=True)
            if english is not None:
                graph.add((report, predicate, Literal(english, lang=SECONDARY_LANGUAGE)))

    def _convert_date(self, graph, report, entry, attribute_ref, value) -> None:
        try:
            parsed = datetime.strptime(value, DATE_FORMAT).date()
        except ValueError:
            self._diagnostics.record(
                IssueKind.UNPARSEABLE_DATE, attribute_ref.uri,
                f"Unparseable date value {value} for M0 resource {attribute_ref.uri}", logger,
            )
            return
        graph.add((report, URIRef(entry.predicate), Literal(parsed, datatype=XSD.date)))

    def _convert_quality_measurement(self, graph, report, entry, attribute_ref, value) -> None:
        # Quality indicators are not part of the report structure
        self._diagnostics.record(
            IssueKind.UNKNOWN_DECLARED_RANGE, attribute_ref.uri,
            f"Property range of {entry.predicate} should not be a quality measurement", logger,
        )

    def _convert_coded_reference(self, graph, report, entry, attribute_ref, value) -> None:
        range_uri = entry.range_uri or ""
        if not range_uri.startswith(self._config.code_concepts_base):
            self._diagnostics.record(
                IssueKind.UNKNOWN_DECLARED_RANGE, attribute_ref.uri,
                f"Unrecognized property range: {range_uri}", logger,
            )
            return
        # The code itself is not checked, only reduced to its first word
        code = value.split()[0]
        code_uri = f"{self._config.codes_base}{uncapitalize(M0URIUtils.local_name(range_uri))}/{code}"
        graph.add((report, URIRef(entry.predicate), URIRef(code_uri)))
        logger.debug(f"Code list value {code_uri} assigned to attribute {entry.code}")

    def documentation_numbers(self, ids: Optional[Iterable[int]] = None) -> List[int]:
        """All documentation numbers of the store, or the given ones deduplicated and sorted."""
        if ids is None:
            numbers = self._store.numbers(EntityType.DOCUMENTATION)
            logger.debug(f"Converting all M0 documentations ({len(numbers)} records)")
            return numbers
        numbers = sorted(set(ids))
        logger.debug(f"Converting a list of M0 documentations ({len(numbers)} records)")
        return numbers

    def convert_reports(self, ids: Optional[Iterable[int]] = None, named_graphs: bool = False) -> Dataset:
        """
        Convert several documentation records into a dataset.

        Args:
            ids: Documentation numbers; None converts every record found.
            named_graphs: One named graph per report instead of the default graph.

        Returns:
            The dataset of reports.
        """
        dataset = Dataset()
        numbers = self.documentation_numbers(ids)
        for number in tqdm(numbers, desc="Converting reports", unit="report", disable=len(numbers) < 10):
            report_graph = self.convert_report(number)
            if named_graphs:
                named = dataset.graph(URIRef(self._config.report_graph_uri(number)))
                named += report_graph
            else:
                for triple in report_graph:
                    dataset.add(triple)
        logger.info(f"{len(numbers)} metadata reports converted")
        return dataset
