"""
Converters from the M0 model to the target model.

- uri_utils: M0 URI parsing and label helpers
- type_mapper: declared range classification
- relation_extractor: relations of the associations graph
- attribute_mapper: descriptive properties of operation-like resources
- report_converter: metadata reports
- codelist_extractor, organization_extractor, link_converter, geo_features
"""

from .uri_utils import M0Reference, M0URIUtils, camel_case, uncapitalize
from .type_mapper import TypeMapper
from .relation_extractor import OrganizationRole, ROLE_PREDICATES, RelationExtractor
from .attribute_mapper import AttributeMapper, CodeListLookup, PROPERTY_MAPPINGS
from .report_converter import ReportConverter
from .codelist_extractor import CodeListExtractor
from .organization_extractor import OrganizationExtractor, is_internal_unit
from .link_converter import LinkConverter
from .geo_features import GeoFeatureModelMaker

__all__ = [
    'M0Reference',
    'M0URIUtils',
    'camel_case',
    'uncapitalize',
    'TypeMapper',
    'OrganizationRole',
    'ROLE_PREDICATES',
    'RelationExtractor',
    'AttributeMapper',
    'CodeListLookup',
    'PROPERTY_MAPPINGS',
    'ReportConverter',
    'CodeListExtractor',
    'OrganizationExtractor',
    'is_internal_unit',
    'LinkConverter',
    'GeoFeatureModelMaker',
]
