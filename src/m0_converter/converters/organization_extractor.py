"""
Organization Extractor - M0 organizations in the ORG vocabulary.

M0 organizations are either internal units, identified by one letter and
three digits ('D130'), or external organizations with a free identifier.
"""

import logging
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from rdflib import DCTERMS, RDF, RDFS, Graph, Literal, URIRef

from ..constants import ORG
from ..shared.models import Diagnostics, EntityType, IssueKind
from .uri_utils import M0Reference

if TYPE_CHECKING:
    from ..config import ConverterConfig
    from ..formats.rdf.m0_store import M0Store

logger = logging.getLogger(__name__)

ID_CODE = "ID_CODE"
TITLE = "TITLE"
INTERNAL_UNIT_PREFIX = "DG75-"


def is_internal_unit(identifier: str) -> bool:
    """Internal unit identifiers are four characters ending with three digits."""
    return len(identifier) == 4 and identifier[1:].isdigit()


class OrganizationExtractor:
    """
    Extracts organizations and the M0 -> target organization URI mapping.

    Example:
        >>> extractor = OrganizationExtractor(store, config, target_graph=ssm)
        >>> extractor.organization_uri_mapping()[M0Reference(EntityType.ORGANIZATION, 81)]
        'http://id.insee.fr/organisations/Drees'
    """

    def __init__(
        self,
        store: 'M0Store',
        config: 'ConverterConfig',
        diagnostics: Optional[Diagnostics] = None,
        target_graph: Optional[Graph] = None,
    ):
        """
        Args:
            store: The M0 store.
            config: Supplies organization base URIs and identifier overrides.
            diagnostics: Issue accumulator.
            target_graph: Target organization scheme used for consistency checks.
        """
        self._store = store
        self._config = config
        self._diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self._target_graph = target_graph

    def _identifier(self, number: int) -> Optional[str]:
        values = self._store.values(EntityType.ORGANIZATION, M0Reference(EntityType.ORGANIZATION, number, ID_CODE).uri)
        if not values:
            return None
        return str(values[0]).strip() or None

    def _known_in_target(self, identifier: str) -> bool:
        return any(str(value) == identifier for value in self._target_graph.objects(None, DCTERMS.identifier))

    def extract(self) -> Graph:
        """Build the ORG model of all organizations having an identifier."""
        graph = Graph()
        graph.bind("org", ORG)
        if self._target_graph is None:
            logger.warning("No target organization model, external organizations will not be checked")

        max_number = self._store.max_sequence(EntityType.ORGANIZATION)
        logger.debug(f"{max_number} organizations found in 'organismes' model")
        for number in range(1, max_number + 1):
            reference = M0Reference(EntityType.ORGANIZATION, number)
            identifier = self._identifier(number)
            if identifier is None:
                self._diagnostics.record(
                    IssueKind.MISSING_VALUE, reference.uri,
                    f"No organization for index {number}", logger, level=logging.WARNING,
                )
                continue

            logger.info(f"Creating organization {reference.uri}")
            organization = URIRef(reference.uri)
            graph.add((organization, RDF.type, ORG.Organization))
            graph.add((organization, ORG.identifier, Literal(identifier)))
            titles = self._store.values(EntityType.ORGANIZATION, M0Reference(EntityType.ORGANIZATION, number, TITLE).uri)
            if titles:
                graph.add((organization, RDFS.label, Literal(str(titles[0]).strip())))
            else:
                self._diagnostics.record(
                    IssueKind.MISSING_VALUE, reference.uri,
                    f"No title for organization {identifier}", logger, level=logging.WARNING,
                )

            if is_internal_unit(identifier) or self._target_graph is None:
                continue
            if not self._known_in_target(identifier):
                self._diagnostics.record(
                    IssueKind.UNRESOLVED_REFERENCE, reference.uri,
                    f"Organization {identifier} not found in target model", logger,
                )
        return graph

    def organization_uri_mapping(self, overrides: Optional[Mapping[int, str]] = None) -> Dict[M0Reference, str]:
        """
        M0 organization -> target organization URI.

        Internal units are placed under the units base with the 'DG75-'
        prefix; identifier overrides replace the M0 identifier first.
        """
        overrides = self._config.organization_overrides if overrides is None else overrides
        mapping: Dict[M0Reference, str] = {}
        for number in self._store.numbers(EntityType.ORGANIZATION):
            identifier = overrides.get(number) or self._identifier(number)
            if identifier is None:
                continue
            if is_internal_unit(identifier):
                uri = self._config.unit_uri(INTERNAL_UNIT_PREFIX + identifier)
            else:
                uri = self._config.organization_uri(identifier)
            mapping[M0Reference(EntityType.ORGANIZATION, number)] = uri
        return mapping
