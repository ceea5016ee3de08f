"""
Relation Extractor - structural relations of the M0 'associations' graph.

Every relation of the M0 model is stored in the same way, as a
``relatedTo`` statement between two attribute resources::

    <http://baseUri/series/serie/12/REPLACES> message:relatedTo <http://baseUri/series/serie/13/REMPLACE_PAR>

The kind of relation is only told by the attribute suffixes and the types
of both ends. Each extraction below is one filtered scan through
``M0Store.select``; scans return statements in ascending numeric order so
that first-seen policies are deterministic.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from rdflib import DCTERMS, URIRef
from rdflib.term import Node

from ..constants import (
    ASSOCIATED_WITH,
    M0_ASSOCIATIONS_GRAPH,
    M0_RELATED_TO,
    M0_RELATED_TO_EN,
    PRIMARY_LANGUAGE,
    PRODUCED_FROM,
    RELATED_TO,
    REPLACED_BY,
    REPLACES,
    SECONDARY_LANGUAGE,
)
from ..shared.models import Diagnostics, EntityType, IssueKind
from .uri_utils import M0Reference, M0URIUtils

if TYPE_CHECKING:
    from ..formats.rdf.m0_store import M0Store

logger = logging.getLogger(__name__)

ReferencePair = Tuple[M0Reference, M0Reference]


class OrganizationRole(str, Enum):
    """Roles of an organization towards a series or operation, valued by their M0 suffix."""
    PRODUCER = "ORGANISATION"
    STAKEHOLDER = "STAKEHOLDERS"

    def __str__(self) -> str:
        return self.value


ROLE_PREDICATES: Dict[OrganizationRole, URIRef] = {
    OrganizationRole.PRODUCER: DCTERMS.creator,
    OrganizationRole.STAKEHOLDER: DCTERMS.contributor,
}

# Allowed (child, parent) type pairs in hierarchies
HIERARCHY_PAIRS: FrozenSet[Tuple[EntityType, EntityType]] = frozenset({
    (EntityType.SERIES, EntityType.FAMILY),
    (EntityType.OPERATION, EntityType.SERIES),
})

CODE_TYPES = frozenset({EntityType.CODE, EntityType.CODELIST})


class RelationExtractor:
    """
    Extracts relation maps from the associations graph.

    All maps are keyed and valued by base ``M0Reference`` (attribute part
    removed), except the link relations which work on numbers.

    Example:
        >>> extractor = RelationExtractor(store, diagnostics)
        >>> extractor.extract_replacements()
        {M0Reference(SERIES, 12): [M0Reference(SERIES, 13)]}
    """

    def __init__(self, store: 'M0Store', diagnostics: Optional[Diagnostics] = None):
        self._store = store
        self._diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    @property
    def diagnostics(self) -> Diagnostics:
        return self._diagnostics

    def _scan(
        self,
        accept: Callable[[M0Reference, M0Reference], bool],
        predicate: URIRef = M0_RELATED_TO,
    ) -> List[ReferencePair]:
        """
        Select association statements whose both ends are M0 references
        accepted by ``accept``.
        """
        def where(subject: Node, _predicate: Node, obj: Node) -> bool:
            if not isinstance(obj, URIRef):
                return False
            start, end = M0URIUtils.parse(subject), M0URIUtils.parse(obj)
            return start is not None and end is not None and accept(start, end)

        return [
            (M0URIUtils.parse(subject), M0URIUtils.parse(obj))
            for subject, _, obj in self._store.select(M0_ASSOCIATIONS_GRAPH, predicate=predicate, where=where)
        ]

    @staticmethod
    def _group(pairs: Iterable[ReferencePair]) -> Dict[M0Reference, List[M0Reference]]:
        grouped: Dict[M0Reference, List[M0Reference]] = {}
        for start, end in pairs:
            grouped.setdefault(start.base, []).append(end.base)
        return grouped

    def extract_hierarchies(self) -> Dict[M0Reference, M0Reference]:
        """
        Child -> parent for series in families and operations in series.

        A second parent for the same child is logged as a conflict and
        the first one (ascending order) is kept.
        """
        logger.debug("Extracting the information on hierarchies between families, series and operations")
        pairs = self._scan(lambda s, o: (
            s.attribute == ASSOCIATED_WITH and o.attribute == ASSOCIATED_WITH
            and (s.entity_type, o.entity_type) in HIERARCHY_PAIRS
        ))
        hierarchies: Dict[M0Reference, M0Reference] = {}
        for child, parent in pairs:
            child, parent = child.base, parent.base
            if child in hierarchies:
                if hierarchies[child] != parent:
                    self._diagnostics.record(
                        IssueKind.CONFLICTING_PARENT, child,
                        f"Conflicting parents for {child} - {parent} and {hierarchies[child]}",
                        logger,
                    )
                continue
            hierarchies[child] = parent
        return hierarchies

    def extract_relations(self) -> Dict[M0Reference, List[M0Reference]]:
        """
        Peer relations, start -> [ends].

        Each relation is stored once per direction in M0 and both are
        kept. Code list to code memberships use the same suffix and are
        excluded.
        """
        logger.debug("Extracting the information on relations between series, indicators, etc.")
        return self._group(self._scan(lambda s, o: (
            s.attribute == RELATED_TO and o.attribute == RELATED_TO
            and not (s.entity_type in CODE_TYPES and o.entity_type in CODE_TYPES)
        )))

    def extract_replacements(self) -> Dict[M0Reference, List[M0Reference]]:
        """Replacing resource -> [replaced resources]."""
        logger.debug("Extracting the information on replacement relations")
        return self._group(self._scan(
            lambda s, o: s.attribute == REPLACES and o.attribute == REPLACED_BY
        ))

    def extract_organizational_relations(self, role: OrganizationRole) -> Dict[M0Reference, List[M0Reference]]:
        """Series or operation -> [organizations] for one role."""
        logger.debug(f"Type of relationship extracted {role}")
        return self._group(self._scan(lambda s, o: (
            s.attribute == role.value and o.attribute == role.value
            and o.entity_type == EntityType.ORGANIZATION
        )))

    def extract_report_attachments(self, include_indicators: bool = False) -> Dict[M0Reference, M0Reference]:
        """
        Documentation -> documented series, operation (or indicator).

        Both directions should be functional. A target documented twice is
        a warning; a documentation attached twice is an error and its
        first attachment is kept.
        """
        logger.debug("Extracting the information on attachment between metadata reports and series or operations")
        targets = {EntityType.SERIES, EntityType.OPERATION}
        if include_indicators:
            targets.add(EntityType.INDICATOR)
        pairs = self._scan(lambda s, o: (
            s.attribute == ASSOCIATED_WITH and o.attribute == ASSOCIATED_WITH
            and s.entity_type == EntityType.DOCUMENTATION and o.entity_type in targets
        ))
        attachments: Dict[M0Reference, M0Reference] = {}
        for documentation, target in pairs:
            documentation, target = documentation.base, target.base
            if target in attachments.values():
                self._diagnostics.record(
                    IssueKind.DUPLICATE_ATTACHMENT, target,
                    f"Several metadata reports are attached to {target}",
                    logger, level=logging.WARNING,
                )
            if documentation in attachments:
                self._diagnostics.record(
                    IssueKind.DUPLICATE_ATTACHMENT, documentation,
                    f"Metadata report {documentation} is attached to both {target} and {attachments[documentation]}",
                    logger, level=logging.ERROR,
                )
                continue
            attachments[documentation] = target
        return attachments

    def extract_production_relations(self) -> Dict[M0Reference, List[M0Reference]]:
        """Indicator -> [series it is produced from]."""
        logger.debug("Extracting 'PRODUCED_FROM' relations between indicators and series")
        return self._group(self._scan(lambda s, o: (
            s.attribute == PRODUCED_FROM and o.attribute == PRODUCED_FROM
            and s.entity_type == EntityType.INDICATOR and o.entity_type == EntityType.SERIES
        )))

    def extract_code_memberships(self) -> Dict[int, List[int]]:
        """Code list number -> [code numbers]."""
        pairs = self._scan(lambda s, o: (
            s.attribute == RELATED_TO and o.attribute == RELATED_TO
            and s.entity_type == EntityType.CODELIST and o.entity_type == EntityType.CODE
        ))
        memberships: Dict[int, List[int]] = {}
        for code_list, code in pairs:
            memberships.setdefault(code_list.number, []).append(code.number)
        return memberships

    def _documentation_links(self, predicate: URIRef, target_type: EntityType) -> List[Tuple[Node, Node]]:
        documentation_base = M0URIUtils.type_base_uri(EntityType.DOCUMENTATION)
        target_base = M0URIUtils.type_base_uri(target_type)
        return [
            (subject, obj) for subject, _, obj in self._store.select(
                M0_ASSOCIATIONS_GRAPH,
                predicate=predicate,
                where=lambda s, p, o: (
                    str(s).startswith(documentation_base)
                    and isinstance(o, URIRef) and str(o).startswith(target_base)
                ),
            )
        ]

    def extract_link_relations(
        self,
        language: str = PRIMARY_LANGUAGE,
        target_type: EntityType = EntityType.LINK,
    ) -> Dict[int, Dict[str, List[int]]]:
        """
        Documentation number -> {attribute code -> [link numbers]}.

        English links use the English relation predicate. Statements whose
        attribute codes differ on both ends, or whose numbers are not
        integers, are logged and ignored.

        Example:
            {1580: {"SEE_ALSO": [54, 55]}}
        """
        predicate = M0_RELATED_TO_EN if language.lower() == SECONDARY_LANGUAGE else M0_RELATED_TO
        logger.debug(f"Extracting relations between report attributes and {target_type} objects for language '{language}'")
        relations: Dict[int, Dict[str, List[int]]] = {}
        for subject, obj in self._documentation_links(predicate, target_type):
            start, end = M0URIUtils.parse(subject), M0URIUtils.parse(obj)
            if start is None or end is None:
                self._diagnostics.record(
                    IssueKind.INVALID_VALUE, subject,
                    f"Statement ignored (invalid integer): {subject} {obj}", logger,
                )
                continue
            if end.attribute is None or "/" in end.attribute or end.attribute != start.attribute:
                self._diagnostics.record(
                    IssueKind.INVALID_VALUE, subject,
                    f"Unexpected statement ignored: {subject} {obj}", logger,
                )
                continue
            relations.setdefault(start.number, {}).setdefault(end.attribute, []).append(end.number)
        return dict(sorted(
            (number, dict(sorted(attributes.items()))) for number, attributes in relations.items()
        ))

    def link_languages(self, target_type: EntityType = EntityType.LINK) -> Dict[int, str]:
        """
        Link number -> language tag, from the predicate referencing it.

        French references win; a link referenced in both languages is
        reported.
        """
        languages: Dict[int, str] = {}
        for predicate, language in ((M0_RELATED_TO, PRIMARY_LANGUAGE), (M0_RELATED_TO_EN, SECONDARY_LANGUAGE)):
            for subject, obj in self._documentation_links(predicate, target_type):
                end = M0URIUtils.parse(obj)
                if end is None:
                    self._diagnostics.record(
                        IssueKind.INVALID_VALUE, obj,
                        f"Statement ignored (invalid integer): {subject} {obj}", logger,
                    )
                    continue
                if end.number not in languages:
                    languages[end.number] = language
                elif languages[end.number] != language:
                    self._diagnostics.record(
                        IssueKind.INVALID_VALUE, obj,
                        f"{target_type} number {end.number} is both English and French",
                        logger, level=logging.WARNING,
                    )
        return dict(sorted(languages.items()))
