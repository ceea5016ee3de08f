"""
Tests for descriptive properties of families, series, operations and indicators.
"""

import pytest
from rdflib import DCTERMS, RDF, SKOS, Graph, Literal, URIRef

from m0_converter.converters.attribute_mapper import AttributeMapper, CodeListLookup
from m0_converter.converters.uri_utils import M0Reference
from m0_converter.shared.models import EntityType, IssueKind

CODES_BASE = "http://id.insee.fr/codes/"
TARGET = URIRef("http://id.insee.fr/operations/serie/s1001")


@pytest.fixture
def mapper(m0_store, diagnostics):
    return AttributeMapper(m0_store, CodeListLookup(CODES_BASE), diagnostics)


@pytest.fixture
def code_list_graph():
    graph = Graph()
    scheme = URIRef("http://id.insee.fr/codes/frequences")
    concept = URIRef("http://id.insee.fr/codes/frequence/A")
    graph.add((scheme, RDF.type, SKOS.ConceptScheme))
    graph.add((scheme, SKOS.prefLabel, Literal("Fréquence", lang="fr")))
    graph.add((concept, SKOS.inScheme, scheme))
    graph.add((concept, SKOS.notation, Literal("A")))
    return graph


@pytest.mark.unit
class TestReadValue:

    def test_single_value(self, mapper):
        assert mapper.read_value(M0Reference(EntityType.SERIES, 12, "TITLE")) == "Enquête Logement"

    def test_missing_value(self, mapper, diagnostics):
        assert mapper.read_value(M0Reference(EntityType.SERIES, 13, "SUMMARY")) is None
        assert diagnostics.of_kind(IssueKind.MISSING_VALUE)[0].subject == "http://baseUri/series/serie/13/SUMMARY"

    def test_blank_value(self, mapper, diagnostics):
        assert mapper.read_value(M0Reference(EntityType.SERIES, 12, "SUMMARY")) is None
        assert len(diagnostics.of_kind(IssueKind.EMPTY_VALUE)) == 1

    def test_several_values(self, mapper, diagnostics):
        assert mapper.read_value(M0Reference(EntityType.SERIES, 12, "HISTORY")) is None
        assert len(diagnostics.of_kind(IssueKind.AMBIGUOUS_VALUE)) == 1


@pytest.mark.unit
class TestFillLiteralProperties:

    def test_single_french_label(self, builder, diagnostics):
        builder.resource(EntityType.SERIES, 1, {"TITLE": "Enquête Logement"})
        mapper = AttributeMapper(builder.store(), CodeListLookup(CODES_BASE), diagnostics)
        graph = Graph()

        added = mapper.fill_literal_properties(graph, TARGET, M0Reference(EntityType.SERIES, 1))

        assert added == 1
        assert list(graph) == [(TARGET, SKOS.prefLabel, Literal("Enquête Logement", lang="fr"))]

    def test_bilingual_label(self, mapper):
        graph = Graph()
        mapper.fill_literal_properties(graph, TARGET, M0Reference(EntityType.SERIES, 12))
        assert set(graph.objects(TARGET, SKOS.prefLabel)) == {
            Literal("Enquête Logement", lang="fr"),
            Literal("Housing survey", lang="en"),
        }

    def test_alternative_label_is_untagged(self, mapper):
        graph = Graph()
        mapper.fill_literal_properties(graph, TARGET, M0Reference(EntityType.SERIES, 12))
        assert list(graph.objects(TARGET, SKOS.altLabel)) == [Literal("EL")]

    def test_alternative_label_english_ignored_after_french(self, builder, diagnostics):
        builder.resource(EntityType.SERIES, 1, {"ALT_LABEL": "EL"}, {"ALT_LABEL": "HS"})
        mapper = AttributeMapper(builder.store(), CodeListLookup(CODES_BASE), diagnostics)
        graph = Graph()
        mapper.fill_literal_properties(graph, TARGET, M0Reference(EntityType.SERIES, 1))
        assert list(graph.objects(TARGET, SKOS.altLabel)) == [Literal("EL")]

    def test_alternative_label_english_only(self, builder, diagnostics):
        builder.resource(EntityType.SERIES, 1, {"TITLE": "Enquête"}, {"ALT_LABEL": "HS"})
        mapper = AttributeMapper(builder.store(), CodeListLookup(CODES_BASE), diagnostics)
        graph = Graph()
        mapper.fill_literal_properties(graph, TARGET, M0Reference(EntityType.SERIES, 1))
        assert list(graph.objects(TARGET, SKOS.altLabel)) == [Literal("HS", lang="en")]

    def test_blank_and_ambiguous_values_are_skipped(self, mapper):
        graph = Graph()
        mapper.fill_literal_properties(graph, TARGET, M0Reference(EntityType.SERIES, 12))
        assert (TARGET, DCTERMS.abstract, None) not in graph
        assert (TARGET, SKOS.historyNote, None) not in graph

    def test_coded_values_without_code_list_graph(self, mapper):
        graph = Graph()
        mapper.fill_literal_properties(graph, TARGET, M0Reference(EntityType.SERIES, 12))
        assert (TARGET, DCTERMS.type, URIRef("http://id.insee.fr/codes/categoriesSource/S")) in graph
        assert (TARGET, DCTERMS.accrualPeriodicity, URIRef("http://id.insee.fr/codes/frequences/A")) in graph

    def test_coded_values_with_code_list_graph(self, m0_store, diagnostics, code_list_graph):
        mapper = AttributeMapper(m0_store, CodeListLookup(CODES_BASE, code_list_graph), diagnostics)
        graph = Graph()
        mapper.fill_literal_properties(graph, TARGET, M0Reference(EntityType.SERIES, 12))

        assert (TARGET, DCTERMS.accrualPeriodicity, URIRef("http://id.insee.fr/codes/frequence/A")) in graph
        # No 'Catégorie de source' scheme in the graph
        assert (TARGET, DCTERMS.type, None) not in graph
        unresolved = diagnostics.of_kind(IssueKind.UNRESOLVED_REFERENCE)
        assert [issue.subject for issue in unresolved] == ["http://baseUri/series/serie/12/SOURCE_CATEGORY"]


@pytest.mark.unit
class TestValidity:

    def test_year(self, mapper):
        graph = Graph()
        assert mapper.fill_validity(graph, TARGET, M0Reference(EntityType.OPERATION, 7)) == 1
        assert (TARGET, DCTERMS.valid, Literal("2020")) in graph

    def test_invalid_year(self, mapper, diagnostics):
        graph = Graph()
        assert mapper.fill_validity(graph, TARGET, M0Reference(EntityType.OPERATION, 5)) == 0
        assert len(diagnostics.of_kind(IssueKind.INVALID_VALUE)) == 1

    def test_alternative_spelling(self, builder, diagnostics):
        builder.resource(EntityType.OPERATION, 1, {"MILESSIME": "2015"})
        mapper = AttributeMapper(builder.store(), CodeListLookup(CODES_BASE), diagnostics)
        graph = Graph()
        mapper.fill_validity(graph, TARGET, M0Reference(EntityType.OPERATION, 1))
        assert (TARGET, DCTERMS.valid, Literal("2015")) in graph


@pytest.mark.unit
class TestCodeListLookup:

    def test_derived_uri(self):
        assert CodeListLookup(CODES_BASE).code_uri("A", "Fréquence") == "http://id.insee.fr/codes/frequences/A"

    def test_graph_lookup(self, code_list_graph):
        lookup = CodeListLookup(CODES_BASE, code_list_graph)
        assert lookup.code_uri("A", "Fréquence") == "http://id.insee.fr/codes/frequence/A"
        assert lookup.code_uri("Z", "Fréquence") is None
        assert lookup.code_uri("A", "Inconnue") is None
