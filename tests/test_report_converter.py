"""
Tests for the conversion of documentation records to metadata reports.
"""

import pytest
from rdflib import RDF, RDFS, XSD, BNode, Literal, URIRef

from m0_converter.constants import METADATA_REPORT, SDMX_MM, SIMS_REPORTED_ATTRIBUTE
from m0_converter.converters.report_converter import ReportConverter
from m0_converter.formats.schema import SchemaReader
from m0_converter.shared.models import DeclaredRange, EntityType, IssueKind, SchemaEntry

ATTRIBUTE_BASE = "http://id.insee.fr/qualite/simsv2fr/attribut/"
REPORT = URIRef("http://id.insee.fr/qualite/rapport/1580")


def attribute(code):
    return URIRef(ATTRIBUTE_BASE + code)


def entry(code, declared_range, range_uri=None):
    return SchemaEntry(code, ATTRIBUTE_BASE + code, declared_range, range_uri)


@pytest.fixture
def schema(schema_files):
    return SchemaReader.read(*schema_files)


@pytest.fixture
def converter(m0_store, schema, config, diagnostics):
    return ReportConverter(
        m0_store, schema, config, diagnostics,
        targets={1580: "http://id.insee.fr/operations/serie/s1001"},
        link_relations={1580: {"S.1.1": [54]}},
    )


def single_report_converter(builder, config, diagnostics, values, schema, english=None):
    builder.resource(EntityType.DOCUMENTATION, 1, values, english)
    return ReportConverter(builder.store(), schema, config, diagnostics)


@pytest.mark.unit
class TestConvertReport:

    def test_report_resource(self, converter):
        graph = converter.convert_report(1580)
        assert (REPORT, RDF.type, METADATA_REPORT) in graph
        assert (REPORT, RDFS.label, Literal("Rapport de métadonnées 1580", lang="fr")) in graph
        assert (REPORT, RDFS.label, Literal("Metadata report 1580", lang="en")) in graph
        assert (REPORT, SDMX_MM.target, URIRef("http://id.insee.fr/operations/serie/s1001")) in graph

    def test_report_without_target(self, m0_store, schema, config):
        graph = ReportConverter(m0_store, schema, config).convert_report(1580)
        assert (REPORT, SDMX_MM.target, None) not in graph

    def test_text_with_links(self, converter):
        graph = converter.convert_report(1580)
        text = graph.value(REPORT, attribute("S.1.1"))
        assert isinstance(text, BNode)
        assert (text, RDF.value, Literal("Texte libre", lang="fr")) in graph
        assert (text, RDFS.seeAlso, URIRef("http://id.insee.fr/qualite/document/54")) in graph

    def test_plain_string_in_both_languages(self, converter):
        graph = converter.convert_report(1580)
        assert set(graph.objects(REPORT, attribute("S.2.1"))) == {
            Literal("Titre", lang="fr"),
            Literal("Title", lang="en"),
        }

    def test_date(self, converter):
        graph = converter.convert_report(1580)
        assert (REPORT, attribute("S.3.1"), Literal("2019-01-15", datatype=XSD.date)) in graph

    def test_unparseable_date(self, converter, diagnostics):
        graph = converter.convert_report(1580)
        assert (REPORT, attribute("S.3.2"), None) not in graph
        issues = diagnostics.of_kind(IssueKind.UNPARSEABLE_DATE)
        assert [issue.subject for issue in issues] == [
            "http://baseUri/documentations/documentation/1580/S.3.2"
        ]

    def test_new_line_only_value_is_skipped(self, converter, diagnostics):
        graph = converter.convert_report(1580)
        assert (REPORT, attribute("S.4.1"), None) not in graph
        assert len(diagnostics.of_kind(IssueKind.EMPTY_VALUE)) == 1

    def test_several_values_are_skipped(self, converter, diagnostics):
        graph = converter.convert_report(1580)
        assert (REPORT, attribute("S.5.1"), None) not in graph
        assert len(diagnostics.of_kind(IssueKind.AMBIGUOUS_VALUE)) == 1

    def test_coded_reference(self, converter):
        graph = converter.convert_report(1580)
        assert (REPORT, attribute("S.6.1"), URIRef("http://id.insee.fr/codes/frequence/A")) in graph

    def test_missing_attributes_are_recorded(self, m0_store, schema, config, diagnostics):
        ReportConverter(m0_store, schema, config, diagnostics).convert_report(1581)
        assert len(diagnostics.of_kind(IssueKind.MISSING_VALUE)) == len(schema)


@pytest.mark.unit
class TestDeclaredRanges:
    """One handler per declared range."""

    @pytest.mark.parametrize("value,accepted", [
        ("2024-02-29", True),
        ("2024-02-30", False),
        ("2023-02-29", False),
        ("15/01/2019", False),
        ("  2019-01-15  ", True),
    ])
    def test_dates(self, builder, config, diagnostics, value, accepted):
        converter = single_report_converter(
            builder, config, diagnostics, {"D": value}, [entry("D", DeclaredRange.DATE)]
        )
        graph = converter.convert_report(1)
        found = list(graph.objects(URIRef(config.report_uri(1)), attribute("D")))
        assert bool(found) == accepted
        assert bool(diagnostics.of_kind(IssueKind.UNPARSEABLE_DATE)) != accepted

    def test_leading_new_lines_are_removed(self, builder, config, diagnostics):
        converter = single_report_converter(
            builder, config, diagnostics, {"T": "\n\nPrésentation"}, [entry("T", DeclaredRange.PLAIN_STRING)]
        )
        graph = converter.convert_report(1)
        assert list(graph.objects(URIRef(config.report_uri(1)), attribute("T"))) == [
            Literal("Présentation", lang="fr")
        ]

    def test_blank_english_value_is_skipped(self, builder, config, diagnostics):
        converter = single_report_converter(
            builder, config, diagnostics, {"T": "Titre"}, [entry("T", DeclaredRange.PLAIN_STRING)],
            english={"T": "  "},
        )
        graph = converter.convert_report(1)
        assert list(graph.objects(URIRef(config.report_uri(1)), attribute("T"))) == [Literal("Titre", lang="fr")]

    def test_reported_attribute(self, builder, config, diagnostics):
        converter = single_report_converter(
            builder, config, diagnostics, {"R": "x"}, [entry("R", DeclaredRange.REPORTED_ATTRIBUTE)]
        )
        graph = converter.convert_report(1)
        assert (URIRef(config.report_uri(1)), attribute("R"), SIMS_REPORTED_ATTRIBUTE) in graph

    def test_quality_measurement_is_not_converted(self, builder, config, diagnostics):
        converter = single_report_converter(
            builder, config, diagnostics, {"Q": "x"}, [entry("Q", DeclaredRange.QUALITY_MEASUREMENT)]
        )
        graph = converter.convert_report(1)
        assert (None, attribute("Q"), None) not in graph
        assert len(diagnostics.of_kind(IssueKind.UNKNOWN_DECLARED_RANGE)) == 1

    def test_unrecognized_coded_range(self, builder, config, diagnostics):
        converter = single_report_converter(
            builder, config, diagnostics, {"C": "A"},
            [entry("C", DeclaredRange.CODED_REFERENCE, "http://example.org/Unknown")],
        )
        graph = converter.convert_report(1)
        assert (None, attribute("C"), None) not in graph
        issues = diagnostics.of_kind(IssueKind.UNKNOWN_DECLARED_RANGE)
        assert issues[0].message == "Unrecognized property range: http://example.org/Unknown"


@pytest.mark.unit
class TestConvertReports:

    def test_default_graph(self, converter):
        dataset = converter.convert_reports()
        assert (REPORT, RDF.type, METADATA_REPORT) in dataset
        assert (REPORT, RDF.type, METADATA_REPORT) in dataset.default_context

    def test_named_graphs(self, converter, config):
        dataset = converter.convert_reports(named_graphs=True)
        named = dataset.graph(URIRef(config.report_graph_uri(1580)))
        assert (REPORT, RDF.type, METADATA_REPORT) in named
        assert (REPORT, RDF.type, METADATA_REPORT) not in dataset.default_context

    def test_selected_ids(self, converter):
        assert converter.documentation_numbers([1581, 1580, 1580]) == [1580, 1581]
        assert converter.documentation_numbers() == [1580]
