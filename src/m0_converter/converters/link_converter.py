"""
Link Converter - M0 links and documents as FOAF documents.

Links ('liens') and documents ('documents') are SKOS concepts in M0,
referenced by report attributes through the associations graph. Their
language is only known from that reference: the French relation predicate
for French links, the English one for English links.
"""

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

from rdflib import DCTERMS, RDF, RDFS, SKOS, XSD, Graph, Literal, URIRef

from ..constants import DC, FOAF, M0_VALUES, PRIMARY_LANGUAGE, SCHEMA
from ..shared.models import Diagnostics, EntityType, IssueKind
from .relation_extractor import RelationExtractor
from .uri_utils import M0Reference, M0URIUtils

if TYPE_CHECKING:
    from ..config import ConverterConfig
    from ..formats.rdf.m0_store import M0Store

logger = logging.getLogger(__name__)

# SUMMARY is still carried by TYPE in M0
LINK_PROPERTIES: Dict[str, URIRef] = {
    "TITLE": RDFS.label,
    "TYPE": RDFS.comment,
    "URI": SCHEMA.url,
}

# Publication date first, then the generic date
DOCUMENT_DATE_ATTRIBUTES = ("DATE_PUBLICATION", "DATE")
DOCUMENT_DATE_FORMAT = "%d/%m/%Y"


def parse_document_date(value: str) -> Optional[date]:
    """Parse a 'dd/MM/yyyy' date, dashes accepted as separators."""
    try:
        return datetime.strptime(value.strip().replace("-", "/"), DOCUMENT_DATE_FORMAT).date()
    except ValueError:
        return None


class LinkConverter:
    """
    Converts M0 links and documents.

    Example:
        >>> converter = LinkConverter(store, config, diagnostics)
        >>> links = converter.convert_links()
        >>> documents = converter.convert_documents()
    """

    def __init__(self, store: 'M0Store', config: 'ConverterConfig', diagnostics: Optional[Diagnostics] = None):
        self._store = store
        self._config = config
        self._diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def convert_links(self) -> Graph:
        graph, _ = self._convert(EntityType.LINK)
        return graph

    def convert_documents(self) -> Graph:
        """Convert documents, which also carry a publication date."""
        graph, documents = self._convert(EntityType.DOCUMENT)
        for number, document in documents.items():
            self._add_date(graph, document, number)
        return graph

    def _convert(self, entity_type: EntityType) -> Tuple[Graph, Dict[int, URIRef]]:
        graph = Graph()
        graph.bind("foaf", FOAF)
        graph.bind("dc", DC)
        graph.bind("schema", SCHEMA)

        languages = RelationExtractor(self._store, self._diagnostics).link_languages(entity_type)
        unseen: Set[int] = set(languages)

        # First pass: the documents themselves
        created: Dict[int, URIRef] = {}
        for subject, _, _ in self._store.select(entity_type, predicate=RDF.type, obj=SKOS.Concept):
            reference = M0URIUtils.parse(subject)
            if reference is None or reference.attribute is not None:
                self._diagnostics.record(
                    IssueKind.INVALID_VALUE, subject,
                    f"Unparseable URI for an M0 {entity_type} concept: {subject}", logger,
                )
                continue
            logger.info(f"Creating FOAF document for {entity_type} number {reference.number}")
            resource = URIRef(self._config.link_uri(reference.number))
            graph.add((resource, RDF.type, FOAF.Document))
            created[reference.number] = resource
            if reference.number in languages:
                graph.add((resource, DC.language, Literal(languages[reference.number])))
                unseen.discard(reference.number)
            else:
                logger.warning(f"Cannot determine language for {entity_type} number {reference.number}")
        for number in sorted(unseen):
            logger.warning(f"{entity_type} number {number} has a language tag but is missing from model")

        # Second pass: attribute values (there are no English values on links)
        for subject, _, value in self._store.select(entity_type, predicate=M0_VALUES):
            reference = M0URIUtils.parse(subject)
            if reference is None or reference.entity_type != entity_type:
                logger.warning(f"Unexpected subject URI in statement: {subject} {value}")
                continue
            if reference.attribute not in LINK_PROPERTIES:
                continue
            resource = URIRef(self._config.link_uri(reference.number))
            predicate = LINK_PROPERTIES[reference.attribute]
            if reference.attribute == "URI":
                graph.add((resource, predicate, URIRef(str(value).strip())))
            else:
                language = languages.get(reference.number, PRIMARY_LANGUAGE)
                graph.add((resource, predicate, Literal(str(value), lang=language)))

        for resource in sorted(set(graph.subjects())):
            if (resource, RDF.type, FOAF.Document) not in graph:
                logger.warning(f"{entity_type} {resource} not defined as FOAF Document")
        logger.info(f"{len(created)} {entity_type.plural} converted")
        return graph, created

    def _add_date(self, graph: Graph, document: URIRef, number: int) -> None:
        for attribute in DOCUMENT_DATE_ATTRIBUTES:
            attribute_uri = M0Reference(EntityType.DOCUMENT, number, attribute).uri
            values: List[Literal] = self._store.values(EntityType.DOCUMENT, attribute_uri)
            raw = str(values[0]).strip() if values else ""
            if not raw:
                continue
            parsed = parse_document_date(raw)
            if parsed is None:
                self._diagnostics.record(
                    IssueKind.UNPARSEABLE_DATE, attribute_uri,
                    f"Unparseable date value {raw} for M0 resource {attribute_uri}", logger,
                )
                return
            graph.add((document, DCTERMS.date, Literal(parsed, datatype=XSD.date)))
            return
