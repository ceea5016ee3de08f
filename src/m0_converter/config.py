"""
Converter configuration.

``ConverterConfig`` gathers everything a migration run needs besides the
M0 dataset itself: paths of the schema resources, base URIs of the target
model, the identifier pool and the fixed identifier tables. It is built
from the JSON configuration file via ``from_dict``; every key is optional.

Example config.json::

    {
        "source": {"dataset": "m0.trig", "schema": "sims.csv", "msd": "sims-msd.ttl"},
        "allocation": {"pool_start": 1001, "pool_end": 1999,
                       "reserved": {"serie": 43, "operation": 204}},
        "fixed_mappings": {"operation": {"12": "1010"}, "dds": {"ENQ-LOGEMENT": "1001"}},
        "logging": {"level": "INFO", "file": "m0_converter.log"}
    }
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .shared.models import EntityType

DEFAULT_OPERATIONS_BASE = "http://id.insee.fr/operations/"
DEFAULT_PRODUCTS_BASE = "http://id.insee.fr/produits/"
DEFAULT_REPORT_BASE = "http://id.insee.fr/qualite/rapport/"
DEFAULT_REPORT_GRAPH_BASE = "http://rdf.insee.fr/graphes/qualite/rapport/"
DEFAULT_CODES_BASE = "http://id.insee.fr/codes/"
DEFAULT_CODE_CONCEPTS_BASE = "http://id.insee.fr/codes/concept/"
DEFAULT_LINKS_BASE = "http://id.insee.fr/qualite/document/"
DEFAULT_ORGANIZATIONS_BASE = "http://id.insee.fr/organisations/"
DEFAULT_UNITS_BASE = "http://id.insee.fr/organisations/insee/"
DEFAULT_GEO_FEATURE_BASE = "http://id.insee.fr/geo/"

# Series whose DDS identifier is absent from the M0 dataset
DEFAULT_SERIES_FIXED_IDS = {135: "1241", 136: "1195", 137: "1284"}


@dataclass
class ConverterConfig:
    """Configuration for a migration run.

    Attributes:
        dataset_path: M0 dataset file (TriG or N-Quads).
        schema_path: CSV listing the report attributes (code;predicate).
        msd_path: Turtle file declaring the rdfs:range of each attribute predicate.
        output_dir: Directory receiving the output graphs.
        pool_start: First target number of the shared allocation pool.
        pool_end: Last target number of the shared allocation pool (inclusive).
        reserved_counts: Pool numbers withheld after each type's allocation pass.
        exempt_types: Types that reuse their source number as target number.
        operation_fixed_ids: M0 operation number -> legacy target number.
        series_fixed_ids: M0 series number -> legacy target number.
        dds_fixed_ids: DDS identifier (without 'OPE-') -> legacy target number.
        organization_overrides: M0 organization number -> identifier replacing ID_CODE.
        target_organizations_path: Optional Turtle file of target organizations.
        code_list_graph_path: Optional Turtle file of target code lists.
        geo_api_url: Base URL of the geographic reference API.
        geo_code_list: Number of the M0 code list holding geographic areas.
        include_indicator_attachments: Also attach reports documenting indicators.
    """
    dataset_path: Optional[str] = None
    schema_path: Optional[str] = None
    msd_path: Optional[str] = None
    output_dir: str = "output"
    operations_base: str = DEFAULT_OPERATIONS_BASE
    products_base: str = DEFAULT_PRODUCTS_BASE
    report_base: str = DEFAULT_REPORT_BASE
    report_graph_base: str = DEFAULT_REPORT_GRAPH_BASE
    codes_base: str = DEFAULT_CODES_BASE
    code_concepts_base: str = DEFAULT_CODE_CONCEPTS_BASE
    links_base: str = DEFAULT_LINKS_BASE
    organizations_base: str = DEFAULT_ORGANIZATIONS_BASE
    units_base: str = DEFAULT_UNITS_BASE
    geo_feature_base: str = DEFAULT_GEO_FEATURE_BASE
    pool_start: int = 1001
    pool_end: int = 1999
    reserved_counts: Dict[str, int] = field(
        default_factory=lambda: {EntityType.SERIES.value: 43, EntityType.OPERATION.value: 204}
    )
    exempt_types: List[str] = field(default_factory=lambda: [EntityType.FAMILY.value])
    operation_fixed_ids: Dict[int, str] = field(default_factory=dict)
    series_fixed_ids: Dict[int, str] = field(default_factory=lambda: dict(DEFAULT_SERIES_FIXED_IDS))
    dds_fixed_ids: Dict[str, str] = field(default_factory=dict)
    organization_overrides: Dict[int, str] = field(default_factory=lambda: {81: "Drees"})
    target_organizations_path: Optional[str] = None
    code_list_graph_path: Optional[str] = None
    geo_api_url: Optional[str] = None
    geo_code_list: int = 7
    geo_timeout: int = 30
    include_indicator_attachments: bool = False

    def __post_init__(self):
        """Validate configuration values."""
        if self.pool_start < 1:
            raise ValueError("pool_start must be >= 1")
        if self.pool_end < self.pool_start:
            raise ValueError("pool_end must be >= pool_start")
        for type_token, count in self.reserved_counts.items():
            if EntityType.from_token(type_token) is None:
                raise ValueError(f"Unknown entity type in reserved counts: {type_token}")
            if count < 0:
                raise ValueError(f"Reserved count for {type_token} must be >= 0")
        for type_token in self.exempt_types:
            if EntityType.from_token(type_token) is None:
                raise ValueError(f"Unknown entity type in exempt types: {type_token}")

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> 'ConverterConfig':
        """Create config from the dictionary loaded from config.json.

        Args:
            config_dict: Configuration dictionary (can be None for defaults)

        Returns:
            ConverterConfig instance

        Raises:
            ValueError: If a value has the wrong shape or is out of range.
        """
        if config_dict is None:
            return cls()

        source = config_dict.get('source', {})
        target = config_dict.get('target', {})
        allocation = config_dict.get('allocation', {})
        fixed = config_dict.get('fixed_mappings', {})
        geo = config_dict.get('geo', {})
        defaults = cls()

        try:
            return cls(
                dataset_path=source.get('dataset'),
                schema_path=source.get('schema'),
                msd_path=source.get('msd'),
                target_organizations_path=source.get('target_organizations'),
                code_list_graph_path=source.get('code_lists'),
                output_dir=config_dict.get('output_dir', defaults.output_dir),
                operations_base=target.get('operations_base', DEFAULT_OPERATIONS_BASE),
                products_base=target.get('products_base', DEFAULT_PRODUCTS_BASE),
                report_base=target.get('report_base', DEFAULT_REPORT_BASE),
                report_graph_base=target.get('report_graph_base', DEFAULT_REPORT_GRAPH_BASE),
                codes_base=target.get('codes_base', DEFAULT_CODES_BASE),
                code_concepts_base=target.get('code_concepts_base', DEFAULT_CODE_CONCEPTS_BASE),
                links_base=target.get('links_base', DEFAULT_LINKS_BASE),
                organizations_base=target.get('organizations_base', DEFAULT_ORGANIZATIONS_BASE),
                units_base=target.get('units_base', DEFAULT_UNITS_BASE),
                geo_feature_base=target.get('geo_feature_base', DEFAULT_GEO_FEATURE_BASE),
                pool_start=int(allocation.get('pool_start', defaults.pool_start)),
                pool_end=int(allocation.get('pool_end', defaults.pool_end)),
                reserved_counts={
                    str(k): int(v)
                    for k, v in allocation.get('reserved', defaults.reserved_counts).items()
                },
                exempt_types=list(allocation.get('exempt', defaults.exempt_types)),
                operation_fixed_ids=_int_keys(fixed.get('operation', {})),
                series_fixed_ids=_int_keys(fixed.get('serie', DEFAULT_SERIES_FIXED_IDS)),
                dds_fixed_ids={str(k): str(v) for k, v in fixed.get('dds', {}).items()},
                organization_overrides=_int_keys(
                    config_dict.get('organization_overrides', defaults.organization_overrides)
                ),
                geo_api_url=geo.get('api_url'),
                geo_code_list=int(geo.get('code_list', defaults.geo_code_list)),
                geo_timeout=int(geo.get('timeout', defaults.geo_timeout)),
                include_indicator_attachments=bool(
                    config_dict.get('include_indicator_attachments', False)
                ),
            )
        except (TypeError, AttributeError) as e:
            raise ValueError(f"Invalid configuration structure: {e}")

    # Target URI builders

    def operation_resource_uri(self, number: Any, entity_type: EntityType) -> str:
        """URI of a family, series or operation: {base}{type}/s{n}."""
        return f"{self.operations_base}{entity_type.value}/s{number}"

    def indicator_uri(self, number: Any) -> str:
        return f"{self.products_base}{EntityType.INDICATOR.value}/p{number}"

    def target_uri(self, number: Any, entity_type: EntityType) -> str:
        """URI of any operation-like resource given its target number."""
        if entity_type == EntityType.INDICATOR:
            return self.indicator_uri(number)
        return self.operation_resource_uri(number, entity_type)

    def report_uri(self, report_id: Any) -> str:
        return f"{self.report_base}{report_id}"

    def report_graph_uri(self, report_id: Any) -> str:
        return f"{self.report_graph_base}{report_id}"

    def link_uri(self, number: Any) -> str:
        return f"{self.links_base}{number}"

    def organization_uri(self, identifier: str) -> str:
        return f"{self.organizations_base}{identifier}"

    def unit_uri(self, identifier: str) -> str:
        return f"{self.units_base}{identifier}"

    def geo_feature_uri(self, code: str) -> str:
        return f"{self.geo_feature_base}{code}"


def _int_keys(mapping: Dict[Any, Any]) -> Dict[int, str]:
    """JSON object keys are strings; identifier tables are keyed by number."""
    return {int(k): str(v) for k, v in mapping.items()}
