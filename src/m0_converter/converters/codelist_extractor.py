"""
Code List Extractor - M0 code lists as SKOS concept schemes.

Code lists and codes keep their M0 URIs; membership comes from the
'associations' graph (``codelist/{i}/RELATED_TO`` -> ``code/{j}/RELATED_TO``).
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional

from rdflib import RDF, RDFS, SKOS, Graph, Literal, URIRef

from ..constants import PRIMARY_LANGUAGE, SECONDARY_LANGUAGE
from ..shared.models import Diagnostics, EntityType, IssueKind
from .relation_extractor import RelationExtractor
from .uri_utils import M0Reference

if TYPE_CHECKING:
    from ..formats.rdf.m0_store import M0Store

logger = logging.getLogger(__name__)

# 'ID' only repeats the M0 number and is not carried over
CODE_LIST_PROPERTIES: Dict[str, URIRef] = {
    "CODE_VALUE": SKOS.notation,
    "ID_METIER": RDFS.comment,
    "TITLE": SKOS.prefLabel,
}

# Properties whose values are language-tagged
TAGGED_PROPERTIES = frozenset({"ID_METIER", "TITLE"})


class CodeListExtractor:
    """
    Builds the SKOS model of the M0 code lists.

    Example:
        >>> graph = CodeListExtractor(store, diagnostics).extract()
        >>> (URIRef("http://baseUri/codes/code/12"), SKOS.inScheme, URIRef("http://baseUri/codelists/codelist/3")) in graph
        True
    """

    def __init__(self, store: 'M0Store', diagnostics: Optional[Diagnostics] = None):
        self._store = store
        self._diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def extract(self) -> Graph:
        graph = Graph()
        graph.bind("skos", SKOS)

        max_number = self._store.max_sequence(EntityType.CODELIST)
        logger.debug(f"{max_number} code lists found in 'codelists' model")
        memberships = RelationExtractor(self._store, self._diagnostics).extract_code_memberships()

        created = 0
        for list_number in range(1, max_number + 1):
            if not self._store.exists(EntityType.CODELIST, list_number):
                logger.debug(f"No code list with number {list_number}")
                continue
            codes = memberships.get(list_number, [])
            scheme = self._add_resource(graph, M0Reference(EntityType.CODELIST, list_number), SKOS.ConceptScheme)
            logger.info(f"Creating code list {scheme} containing codes {codes}")
            for code_number in codes:
                concept = self._add_resource(graph, M0Reference(EntityType.CODE, code_number), SKOS.Concept)
                graph.add((concept, SKOS.inScheme, scheme))
                graph.add((concept, SKOS.topConceptOf, scheme))
                graph.add((scheme, SKOS.hasTopConcept, concept))
            created += 1

        logger.info(f"{created} code lists extracted")
        return graph

    def _add_resource(self, graph: Graph, reference: M0Reference, rdf_type: URIRef) -> URIRef:
        resource = URIRef(reference.uri)
        graph.add((resource, RDF.type, rdf_type))
        for attribute, predicate in CODE_LIST_PROPERTIES.items():
            attribute_ref = M0Reference(reference.entity_type, reference.number, attribute)
            values = self._store.values(reference.entity_type, attribute_ref.uri)
            if not values:
                self._diagnostics.record(
                    IssueKind.MISSING_VALUE, attribute_ref.uri,
                    f"No value for property {attribute} of {reference.entity_type} {reference.uri}",
                    logger, level=logging.ERROR,
                )
                continue
            if len(values) > 1:
                self._diagnostics.record(
                    IssueKind.AMBIGUOUS_VALUE, attribute_ref.uri,
                    f"Several values for property {attribute} of {reference.entity_type} {reference.uri}",
                    logger,
                )
            graph.add((resource, predicate, self._literal(attribute, str(values[0]), PRIMARY_LANGUAGE)))

            english: List[Literal] = self._store.values(reference.entity_type, attribute_ref.uri, english=True)
            if english:
                graph.add((resource, predicate, self._literal(attribute, str(english[0]), SECONDARY_LANGUAGE)))
        return resource

    @staticmethod
    def _literal(attribute: str, value: str, language: str) -> Literal:
        if attribute in TAGGED_PROPERTIES:
            return Literal(value, lang=language)
        return Literal(value)
