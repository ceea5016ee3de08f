"""
Pytest configuration and fixtures for the test suite.

Defines markers for selective test execution:
    pytest -m unit          # Fast unit tests
    pytest -m integration   # Command line runs over files
"""

import os
import sys
from typing import Dict, Iterable, Optional, Union

import pytest
from rdflib import RDF, SKOS, Dataset, Literal, URIRef

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from m0_converter.config import ConverterConfig
from m0_converter.constants import M0_ASSOCIATIONS_GRAPH, M0_RELATED_TO, M0_RELATED_TO_EN, M0_SEQUENCE_VALUE, M0_VALUES, M0_VALUES_EN
from m0_converter.converters.uri_utils import M0URIUtils
from m0_converter.formats.rdf.m0_store import M0Store
from m0_converter.shared.models import Diagnostics, EntityType


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Command line runs over files")


AttributeValues = Union[str, Iterable[str]]


class M0DatasetBuilder:
    """
    Builds an in-memory M0 dataset, one named graph per entity type plus
    the 'associations' graph.

    Example:
        >>> builder = M0DatasetBuilder()
        >>> builder.sequence(EntityType.SERIES, 15)
        >>> builder.resource(EntityType.SERIES, 12, {"TITLE": "Enquête Logement"})
        >>> store = builder.store()
    """

    def __init__(self):
        self.dataset = Dataset()

    def _graph(self, name):
        return self.dataset.graph(M0URIUtils.graph_uri(name))

    def sequence(self, entity_type: EntityType, next_value: Union[int, str]) -> 'M0DatasetBuilder':
        self._graph(entity_type).add(
            (URIRef(M0URIUtils.sequence_uri(entity_type)), M0_SEQUENCE_VALUE, Literal(str(next_value)))
        )
        return self

    def resource(
        self,
        entity_type: EntityType,
        number: int,
        values: Optional[Dict[str, AttributeValues]] = None,
        english: Optional[Dict[str, AttributeValues]] = None,
    ) -> 'M0DatasetBuilder':
        """Add a resource typed skos:Concept with its attribute values."""
        graph = self._graph(entity_type)
        graph.add((URIRef(M0URIUtils.resource_uri(entity_type, number)), RDF.type, SKOS.Concept))
        for predicate, attributes in ((M0_VALUES, values or {}), (M0_VALUES_EN, english or {})):
            for attribute, attribute_values in attributes.items():
                subject = URIRef(M0URIUtils.resource_uri(entity_type, number, attribute))
                if isinstance(attribute_values, str):
                    attribute_values = [attribute_values]
                for value in attribute_values:
                    graph.add((subject, predicate, Literal(value)))
        return self

    def associate(
        self,
        start: EntityType, start_number: int, start_attribute: str,
        end: EntityType, end_number: int, end_attribute: Optional[str] = None,
        predicate: URIRef = M0_RELATED_TO,
    ) -> 'M0DatasetBuilder':
        self._graph(M0_ASSOCIATIONS_GRAPH).add((
            URIRef(M0URIUtils.resource_uri(start, start_number, start_attribute)),
            predicate,
            URIRef(M0URIUtils.resource_uri(end, end_number, end_attribute or start_attribute)),
        ))
        return self

    def both_ways(self, start: EntityType, start_number: int, end: EntityType, end_number: int,
                  attribute: str) -> 'M0DatasetBuilder':
        self.associate(start, start_number, attribute, end, end_number)
        return self.associate(end, end_number, attribute, start, start_number)

    def store(self) -> M0Store:
        return M0Store(self.dataset)


def build_sample_dataset() -> M0DatasetBuilder:
    """
    A small but complete M0 snapshot.

    Families 1-2, series 12-14, operations 5 and 7, indicator 3,
    organizations 1 (internal unit D130) and 2 (Ined), documentation 1580,
    code list 1 with codes 10 and 11, links 54-55 and documents 60-61.
    """
    b = M0DatasetBuilder()
    b.sequence(EntityType.FAMILY, 3)
    b.resource(EntityType.FAMILY, 1, {"TITLE": "Logement"}, {"TITLE": "Housing"})
    b.resource(EntityType.FAMILY, 2, {"TITLE": "Emploi"})

    b.sequence(EntityType.SERIES, 15)
    b.resource(
        EntityType.SERIES, 12,
        {
            "TITLE": "Enquête Logement",
            "ALT_LABEL": "EL",
            "SUMMARY": "\n",
            "HISTORY": ["Première version", "Seconde version"],
            "SOURCE_CATEGORY": "S",
            "FREQ_COLL": "A",
        },
        {"TITLE": "Housing survey"},
    )
    b.resource(EntityType.SERIES, 13, {"TITLE": "Enquête Logement 2013"})
    b.resource(EntityType.SERIES, 14, {"TITLE": "Emploi en continu"})

    b.sequence(EntityType.OPERATION, 8)
    b.resource(EntityType.OPERATION, 5, {"TITLE": "Opération 5", "MILLESIME": "20a0"})
    b.resource(EntityType.OPERATION, 7, {"TITLE": "Enquête Logement 2020", "MILLESIME": "2020"})

    b.sequence(EntityType.INDICATOR, 4)
    b.resource(EntityType.INDICATOR, 3, {"TITLE": "Indice des loyers"})

    b.sequence(EntityType.ORGANIZATION, 3)
    b.resource(EntityType.ORGANIZATION, 1, {"ID_CODE": "D130", "TITLE": "Direction 130"})
    b.resource(EntityType.ORGANIZATION, 2, {"ID_CODE": "Ined", "TITLE": "Institut national d'études démographiques"})

    b.sequence(EntityType.DOCUMENTATION, 1581)
    b.resource(EntityType.DOCUMENTATION, 1580, {
        "S.1.1": "Texte libre",
        "S.2.1": "Titre",
        "S.3.1": "2019-01-15",
        "S.3.2": "15/01/2019",
        "S.4.1": "\n",
        "S.5.1": ["X", "Y"],
        "S.6.1": "A annuelle",
    }, {"S.2.1": "Title"})

    b.sequence(EntityType.CODELIST, 4)
    b.resource(EntityType.CODELIST, 1, {"CODE_VALUE": "CL_FREQ", "ID_METIER": "CL_FREQ", "TITLE": "Fréquence"})
    b.sequence(EntityType.CODE, 12)
    b.resource(EntityType.CODE, 10, {"CODE_VALUE": "A", "ID_METIER": "A", "TITLE": "Annuelle"}, {"TITLE": "Annual"})
    b.resource(EntityType.CODE, 11, {"CODE_VALUE": "M", "ID_METIER": "M", "TITLE": "Mensuelle"})

    b.resource(EntityType.LINK, 54, {"TITLE": "Page Insee", "TYPE": "web", "URI": " http://www.insee.fr "})
    b.resource(EntityType.LINK, 55, {"TITLE": "Insee page"})
    b.resource(EntityType.DOCUMENT, 60, {"TITLE": "Rapport", "DATE_PUBLICATION": "15-01-2019"})
    b.resource(EntityType.DOCUMENT, 61, {"TITLE": "Note", "DATE_PUBLICATION": "2019/13/45"})

    # Hierarchies: M0 stores both directions
    for child_type, child, parent_type, parent in (
        (EntityType.SERIES, 12, EntityType.FAMILY, 1),
        (EntityType.SERIES, 13, EntityType.FAMILY, 1),
        (EntityType.SERIES, 14, EntityType.FAMILY, 2),
        (EntityType.OPERATION, 7, EntityType.SERIES, 12),
    ):
        b.both_ways(child_type, child, parent_type, parent, "ASSOCIE_A")

    b.both_ways(EntityType.SERIES, 12, EntityType.SERIES, 14, "RELATED_TO")
    b.both_ways(EntityType.INDICATOR, 3, EntityType.SERIES, 12, "RELATED_TO")
    b.both_ways(EntityType.CODELIST, 1, EntityType.CODE, 10, "RELATED_TO")
    b.both_ways(EntityType.CODELIST, 1, EntityType.CODE, 11, "RELATED_TO")

    b.associate(EntityType.SERIES, 13, "REPLACES", EntityType.SERIES, 12, "REMPLACE_PAR")
    b.associate(EntityType.SERIES, 12, "REMPLACE_PAR", EntityType.SERIES, 13, "REPLACES")

    b.both_ways(EntityType.SERIES, 12, EntityType.ORGANIZATION, 1, "ORGANISATION")
    b.both_ways(EntityType.SERIES, 12, EntityType.ORGANIZATION, 2, "STAKEHOLDERS")

    b.both_ways(EntityType.DOCUMENTATION, 1580, EntityType.SERIES, 12, "ASSOCIE_A")
    b.both_ways(EntityType.INDICATOR, 3, EntityType.SERIES, 12, "PRODUCED_FROM")

    b.associate(EntityType.DOCUMENTATION, 1580, "S.1.1", EntityType.LINK, 54)
    b.associate(EntityType.DOCUMENTATION, 1580, "S.1.1", EntityType.LINK, 55, predicate=M0_RELATED_TO_EN)
    b.associate(EntityType.DOCUMENTATION, 1580, "S.1.1", EntityType.DOCUMENT, 60)
    b.associate(EntityType.DOCUMENTATION, 1580, "S.1.1", EntityType.DOCUMENT, 61)
    return b


@pytest.fixture
def builder():
    """Empty M0 dataset builder."""
    return M0DatasetBuilder()


@pytest.fixture
def sample_builder():
    return build_sample_dataset()


@pytest.fixture
def m0_store(sample_builder):
    """Store over the sample M0 snapshot."""
    return sample_builder.store()


@pytest.fixture
def config(tmp_path):
    """Default configuration writing under a temporary directory."""
    return ConverterConfig(output_dir=str(tmp_path / "output"))


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def sample_trig_file(tmp_path, sample_builder):
    """The sample snapshot serialized as TriG."""
    path = tmp_path / "m0.trig"
    sample_builder.dataset.serialize(destination=str(path), format="trig")
    return path


SCHEMA_CSV = """code;predicate
S.1.1;http://id.insee.fr/qualite/simsv2fr/attribut/S.1.1
S.2.1;http://id.insee.fr/qualite/simsv2fr/attribut/S.2.1
S.3.1;http://id.insee.fr/qualite/simsv2fr/attribut/S.3.1
S.3.2;http://id.insee.fr/qualite/simsv2fr/attribut/S.3.2
S.4.1;http://id.insee.fr/qualite/simsv2fr/attribut/S.4.1
S.5.1;http://id.insee.fr/qualite/simsv2fr/attribut/S.5.1
S.6.1;http://id.insee.fr/qualite/simsv2fr/attribut/S.6.1
"""

MSD_TTL = """
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
@prefix attr: <http://id.insee.fr/qualite/simsv2fr/attribut/> .

attr:S.1.1 rdfs:label "Texte" .
attr:S.2.1 rdfs:range xsd:string .
attr:S.3.1 rdfs:range xsd:date .
attr:S.3.2 rdfs:range xsd:date .
attr:S.4.1 rdfs:range xsd:string .
attr:S.5.1 rdfs:range xsd:string .
attr:S.6.1 rdfs:range <http://id.insee.fr/codes/concept/Frequence> .
"""


@pytest.fixture
def schema_files(tmp_path):
    """Schema listing and MSD files of the sample report structure."""
    schema_path = tmp_path / "sims.csv"
    schema_path.write_text(SCHEMA_CSV, encoding="utf-8")
    msd_path = tmp_path / "sims-msd.ttl"
    msd_path.write_text(MSD_TTL, encoding="utf-8")
    return schema_path, msd_path
