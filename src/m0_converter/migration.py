"""
Migration orchestration.

A run starts by building one ``MigrationContext``: the M0 store, the
configuration, the target URI mapping of operation-like resources and the
organization URI mapping. The context is immutable and handed to every
extraction; nothing is cached at module level.

Usage:
    context = MigrationContext.build(store, config)
    migrator = OperationMigrator(context)
    graph = migrator.extract_all_operations()
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from rdflib import DCTERMS, RDF, RDFS, SKOS, Graph, URIRef
from tqdm import tqdm

from .common.id_generator import IdentifierAllocator, TargetURIMapping
from .config import ConverterConfig
from .constants import INSEE, M0_VALUES, PRIMARY_LANGUAGE, PROV, SECONDARY_LANGUAGE
from .converters.attribute_mapper import AttributeMapper, CodeListLookup
from .converters.organization_extractor import OrganizationExtractor
from .converters.relation_extractor import ROLE_PREDICATES, OrganizationRole, RelationExtractor
from .converters.report_converter import ReportConverter
from .converters.uri_utils import M0Reference, M0URIUtils
from .formats.rdf.m0_store import M0Store
from .shared.models import Diagnostics, EntityType, IssueKind, SchemaEntry

logger = logging.getLogger(__name__)

ID_DDS = "ID_DDS"
DDS_PREFIX = "OPE-"

TARGET_TYPES: Dict[EntityType, URIRef] = {
    EntityType.FAMILY: INSEE.StatisticalOperationFamily,
    EntityType.SERIES: INSEE.StatisticalOperationSeries,
    EntityType.OPERATION: INSEE.StatisticalOperation,
    EntityType.INDICATOR: INSEE.StatisticalIndicator,
}


def collect_fixed_mappings(
    store: M0Store,
    config: ConverterConfig,
    diagnostics: Optional[Diagnostics] = None,
) -> Dict[EntityType, Dict[int, str]]:
    """
    Fixed target URIs per type.

    Operations come from the configured table. Series come from their
    ``ID_DDS`` attribute through the DDS table, completed by the configured
    series table. A series with several DDS identifiers is recorded as
    ambiguous and gets no fixed mapping. Families and indicators have none.
    """
    fixed: Dict[EntityType, Dict[int, str]] = {
        EntityType.FAMILY: {},
        EntityType.SERIES: {},
        EntityType.OPERATION: {
            number: config.operation_resource_uri(legacy_id, EntityType.OPERATION)
            for number, legacy_id in config.operation_fixed_ids.items()
        },
        EntityType.INDICATOR: {},
    }
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    dds_statements = store.select(
        EntityType.SERIES, predicate=M0_VALUES,
        where=lambda s, p, o: M0URIUtils.has_suffix(s, ID_DDS),
    )
    logger.debug(f"Extracted {len(dds_statements)} {ID_DDS} statements from the series graph")
    dds_values: Dict[M0Reference, List[str]] = {}
    for subject, _, value in dds_statements:
        reference = M0URIUtils.parse(subject)
        if reference is not None:
            dds_values.setdefault(reference, []).append(str(value).strip())

    for reference, values in dds_values.items():
        if len(values) > 1:
            diagnostics.record(
                IssueKind.AMBIGUOUS_VALUE, reference.uri,
                f"Several {ID_DDS} values for {reference.base.uri}: {values}", logger,
            )
            continue
        dds_id = values[0]
        if dds_id.startswith(DDS_PREFIX):
            dds_id = dds_id[len(DDS_PREFIX):]
        legacy_id = config.dds_fixed_ids.get(dds_id)
        if legacy_id is None:
            logger.warning(f"No correspondence found for DDS identifier {dds_id} (M0 resource {reference.base.uri})")
            continue
        logger.debug(f"Correspondence found for series with DDS identifier {dds_id}: legacy identifier is {legacy_id}")
        fixed[EntityType.SERIES][reference.number] = config.operation_resource_uri(legacy_id, EntityType.SERIES)

    # Series whose DDS identifier is missing from M0
    for number, legacy_id in config.series_fixed_ids.items():
        fixed[EntityType.SERIES][number] = config.operation_resource_uri(legacy_id, EntityType.SERIES)
    return fixed


def _types_of(tokens) -> List[EntityType]:
    return [EntityType.from_token(token) for token in tokens]


@dataclass(frozen=True)
class MigrationContext:
    """
    Everything shared by the extractions of one run.

    Attributes:
        store: The M0 store.
        config: Run configuration.
        mapping: Target URIs of families, series, operations and indicators.
        organization_mapping: Target URIs of organizations.
        code_lookup: Resolution of coded attribute values.
        diagnostics: Issue accumulator of the run.
    """
    store: M0Store
    config: ConverterConfig
    mapping: TargetURIMapping
    organization_mapping: Mapping[M0Reference, str]
    code_lookup: CodeListLookup
    diagnostics: Diagnostics

    @classmethod
    def build(
        cls,
        store: M0Store,
        config: ConverterConfig,
        diagnostics: Optional[Diagnostics] = None,
        code_list_graph: Optional[Graph] = None,
        target_organizations: Optional[Graph] = None,
    ) -> 'MigrationContext':
        """
        Allocate identifiers and build the context.

        Raises:
            PoolExhaustedError: If the identifier pool is too small.
            MappingConflictError: If two fixed mappings collide.
        """
        diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        logger.info("Starting the creation of all the URI mappings for families, series, operations and indicators")
        allocator = IdentifierAllocator(
            config.target_uri,
            pool_start=config.pool_start,
            pool_end=config.pool_end,
            exempt_types=_types_of(config.exempt_types),
        )
        mapping = allocator.allocate(
            fixed_mappings=collect_fixed_mappings(store, config, diagnostics),
            max_ids={entity_type: store.max_sequence(entity_type) for entity_type in TARGET_TYPES},
            reserved_counts={
                EntityType.from_token(token): count for token, count in config.reserved_counts.items()
            },
            exists=store.exists,
        )
        organizations = OrganizationExtractor(store, config, diagnostics, target_organizations)
        return cls(
            store=store,
            config=config,
            mapping=mapping,
            organization_mapping=MappingProxyType(organizations.organization_uri_mapping()),
            code_lookup=CodeListLookup(config.codes_base, code_list_graph),
            diagnostics=diagnostics,
        )

    def target_of(self, reference: M0Reference) -> Optional[str]:
        """Target URI of an M0 resource, or None when it has none."""
        if reference.entity_type == EntityType.ORGANIZATION:
            return self.organization_mapping.get(reference.base)
        return self.mapping.get(reference.entity_type, reference.number)

    def mapping_lines(self) -> List[Tuple[str, str]]:
        """(M0 URI, target URI) pairs sorted by M0 URI."""
        return list(self.mapping.to_dict(M0URIUtils.resource_uri).items())


class OperationMigrator:
    """
    Builds the target model of families, series, operations and indicators.

    Example:
        >>> migrator = OperationMigrator(context)
        >>> operations = migrator.extract_all_operations()
        >>> indicators = migrator.extract_indicators()
    """

    def __init__(self, context: MigrationContext):
        self._context = context
        self._mapper = AttributeMapper(context.store, context.code_lookup, context.diagnostics)
        self._relations = RelationExtractor(context.store, context.diagnostics)

    def _target(self, reference: M0Reference) -> URIRef:
        uri = self._context.target_of(reference)
        if uri is None:
            uri = self._context.config.target_uri(reference.number, reference.entity_type)
            logger.error(f"No target identifier found for M0 resource {reference.uri}, using M0 identifier for now")
        return URIRef(uri)

    def _extract(self, entity_type: EntityType) -> Graph:
        store = self._context.store
        graph = Graph()
        graph.bind("skos", SKOS)
        graph.bind("dcterms", DCTERMS)
        graph.bind("insee", INSEE)

        max_number = store.max_sequence(entity_type)
        logger.debug(f"Maximum index for type {entity_type} is {max_number}")
        numbers = [n for n in range(1, max_number + 1) if store.exists(entity_type, n)]
        for number in tqdm(numbers, desc=f"Extracting {entity_type.plural}", unit=entity_type.value, disable=len(numbers) < 10):
            reference = M0Reference(entity_type, number)
            target = self._target(reference)
            logger.info(f"Creating target {entity_type} {target} from M0 resource {reference.uri}")
            graph.add((target, RDF.type, TARGET_TYPES[entity_type]))
            self._mapper.fill_literal_properties(graph, target, reference)
            if entity_type == EntityType.OPERATION:
                self._mapper.fill_validity(graph, target, reference)
        logger.info(f"{len(numbers)} {entity_type.plural} extracted")
        return graph

    def extract_families(self) -> Graph:
        return self._extract(EntityType.FAMILY)

    def extract_series(self) -> Graph:
        return self._extract(EntityType.SERIES)

    def extract_operations(self) -> Graph:
        """Operations, with their vintage year as ``dcterms:valid``."""
        return self._extract(EntityType.OPERATION)

    def extract_indicators(self) -> Graph:
        """Indicators, linked to the series they are produced from."""
        graph = self._extract(EntityType.INDICATOR)
        graph.bind("prov", PROV)
        for indicator, series_list in self._relations.extract_production_relations().items():
            for series in series_list:
                self._link(graph, indicator, PROV.wasGeneratedBy, series)
        return graph

    def _link(self, graph: Graph, start: M0Reference, predicate: URIRef, end: M0Reference,
              inverse: Optional[URIRef] = None) -> bool:
        start_uri, end_uri = self._context.target_of(start), self._context.target_of(end)
        for reference, uri in ((start, start_uri), (end, end_uri)):
            if uri is None:
                self._context.diagnostics.record(
                    IssueKind.UNRESOLVED_REFERENCE, reference.uri,
                    f"No target URI for {reference.uri}, relation {predicate} ignored", logger,
                )
                return False
        graph.add((URIRef(start_uri), predicate, URIRef(end_uri)))
        if inverse is not None:
            graph.add((URIRef(end_uri), inverse, URIRef(start_uri)))
        return True

    def extract_all_operations(self) -> Graph:
        """
        Families, series and operations with the relations between them
        and to organizations.
        """
        graph = self.extract_families()
        graph += self.extract_series()
        graph += self.extract_operations()

        for child, parent in self._relations.extract_hierarchies().items():
            if self._link(graph, child, DCTERMS.isPartOf, parent, inverse=DCTERMS.hasPart):
                logger.debug(f"Hierarchy properties created between child {child} and parent {parent}")

        # Relations are returned in both directions
        for start, ends in self._relations.extract_relations().items():
            if start.entity_type == EntityType.INDICATOR:
                continue
            for end in ends:
                self._link(graph, start, RDFS.seeAlso, end)

        for replacing, replaced_list in self._relations.extract_replacements().items():
            for replaced in replaced_list:
                self._link(graph, replacing, DCTERMS.replaces, replaced, inverse=DCTERMS.isReplacedBy)

        for role in OrganizationRole:
            logger.debug(f"Creating organizational relations with role {role}")
            for resource, organizations in self._relations.extract_organizational_relations(role).items():
                for organization in organizations:
                    self._link(graph, resource, ROLE_PREDICATES[role], organization)
        return graph


def build_report_converter(context: MigrationContext, schema: List[SchemaEntry]) -> ReportConverter:
    """
    Report converter knowing the documented resources and the links of the run.
    """
    relations = RelationExtractor(context.store, context.diagnostics)
    targets: Dict[int, str] = {}
    attachments = relations.extract_report_attachments(context.config.include_indicator_attachments)
    for documentation, target in attachments.items():
        uri = context.target_of(target)
        if uri is None:
            context.diagnostics.record(
                IssueKind.UNRESOLVED_REFERENCE, target.uri,
                f"No target URI for {target.uri} documented by {documentation.uri}", logger,
            )
            continue
        targets[documentation.number] = uri

    link_relations: Dict[int, Dict[str, List[int]]] = {}
    for language in (PRIMARY_LANGUAGE, SECONDARY_LANGUAGE):
        for number, attributes in relations.extract_link_relations(language).items():
            for code, links in attributes.items():
                link_relations.setdefault(number, {}).setdefault(code, []).extend(links)

    return ReportConverter(
        context.store, schema, context.config, context.diagnostics,
        targets=targets, link_relations=link_relations,
    )
