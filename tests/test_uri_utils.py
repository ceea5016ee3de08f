"""
Tests for M0 URI parsing and label helpers.
"""

import pytest
from rdflib import URIRef

from m0_converter.converters.uri_utils import (
    M0Reference,
    M0URIUtils,
    camel_case,
    strip_accents,
    uncapitalize,
)
from m0_converter.shared.models import EntityType


@pytest.mark.unit
class TestM0URIUtils:
    """Building and parsing M0 URIs."""

    def test_resource_uri(self):
        assert M0URIUtils.resource_uri(EntityType.SERIES, 12) == "http://baseUri/series/serie/12"
        assert (
            M0URIUtils.resource_uri(EntityType.SERIES, 12, "REPLACES")
            == "http://baseUri/series/serie/12/REPLACES"
        )

    def test_graph_uri(self):
        assert M0URIUtils.graph_uri(EntityType.FAMILY) == URIRef("http://rdf.insee.fr/graphe/familles")
        assert M0URIUtils.graph_uri("associations") == URIRef("http://rdf.insee.fr/graphe/associations")

    def test_sequence_uri(self):
        assert M0URIUtils.sequence_uri(EntityType.OPERATION) == "http://baseUri/operations/operation/sequence"

    def test_parse_attribute_uri(self):
        reference = M0URIUtils.parse(URIRef("http://baseUri/documentations/documentation/1580/S.1.1"))
        assert reference == M0Reference(EntityType.DOCUMENTATION, 1580, "S.1.1")
        assert reference.base == M0Reference(EntityType.DOCUMENTATION, 1580)

    def test_parse_round_trip_of_reference(self):
        reference = M0Reference(EntityType.INDICATOR, 3, "PRODUCED_FROM")
        assert M0URIUtils.parse(reference.uri) == reference
        assert str(reference) == "http://baseUri/indicateurs/indicateur/3/PRODUCED_FROM"

    @pytest.mark.parametrize("uri", [
        None,
        "http://example.org/series/serie/12",
        "http://baseUri/series/serie/sequence",
        "http://baseUri/series/serie/twelve/TITLE",
        "http://baseUri/familles/serie/12",
        "http://baseUri/unknowns/unknown/1",
        "http://baseUri/series",
    ])
    def test_parse_rejects_non_resources(self, uri):
        assert M0URIUtils.parse(uri) is None

    def test_has_suffix(self):
        uri = "http://baseUri/series/serie/12/ASSOCIE_A"
        assert M0URIUtils.has_suffix(uri, "ASSOCIE_A")
        assert not M0URIUtils.has_suffix(uri, "A")

    def test_local_name(self):
        assert M0URIUtils.local_name("http://id.insee.fr/codes/concept/Frequence") == "Frequence"
        assert M0URIUtils.local_name("http://www.w3.org/2001/XMLSchema#date") == "date"


@pytest.mark.unit
class TestLabelHelpers:
    """Camel case names derived from French labels."""

    @pytest.mark.parametrize("label,lower,plural,expected", [
        ("Catégorie de source", True, True, "categoriesSource"),
        ("Fréquence", True, True, "frequences"),
        ("Unité enquêtée", True, True, "unitesEnquetees"),
        ("Statut de l'enquête", True, False, "statutEnquete"),
        ("Mode de collecte", False, False, "ModeCollecte"),
        ("Prix", True, True, "prix"),
    ])
    def test_camel_case(self, label, lower, plural, expected):
        assert camel_case(label, lower=lower, plural=plural) == expected

    def test_camel_case_edge_cases(self):
        assert camel_case(None) is None
        assert camel_case("de la") == ""

    def test_uncapitalize(self):
        assert uncapitalize("Frequence") == "frequence"
        assert uncapitalize("") == ""

    def test_strip_accents(self):
        assert strip_accents("Enquête Emploi à Mayotte") == "Enquete Emploi a Mayotte"
