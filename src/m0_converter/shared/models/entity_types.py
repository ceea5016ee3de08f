"""
M0 entity types and the declared value ranges of metadata attributes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EntityType(str, Enum):
    """Entity types of the M0 model, valued by their URI token."""
    FAMILY = "famille"
    SERIES = "serie"
    OPERATION = "operation"
    INDICATOR = "indicateur"
    ORGANIZATION = "organisme"
    DOCUMENTATION = "documentation"
    CODELIST = "codelist"
    CODE = "code"
    LINK = "lien"
    DOCUMENT = "document"

    def __str__(self) -> str:
        return self.value

    @property
    def plural(self) -> str:
        """Plural token used in graph names and resource paths."""
        return self.value + "s"

    @classmethod
    def from_token(cls, token: str) -> Optional["EntityType"]:
        """Return the type for a singular or plural token, or None."""
        for entity_type in cls:
            if token in (entity_type.value, entity_type.plural):
                return entity_type
        return None


class DeclaredRange(str, Enum):
    """Closed set of value ranges a metadata attribute can declare."""
    NONE = "none"
    REPORTED_ATTRIBUTE = "reported_attribute"
    PLAIN_STRING = "plain_string"
    DATE = "date"
    QUALITY_MEASUREMENT = "quality_measurement"
    CODED_REFERENCE = "coded_reference"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SchemaEntry:
    """
    One metadata attribute of the report structure.

    Attributes:
        code: Attribute code, also the suffix of the M0 attribute resource.
        predicate: Target predicate URI.
        declared_range: Variant derived from the predicate's rdfs:range.
        range_uri: The raw rdfs:range URI, None when no range is declared.
    """
    code: str
    predicate: str
    declared_range: DeclaredRange
    range_uri: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "predicate": self.predicate,
            "declaredRange": self.declared_range.value,
            "rangeUri": self.range_uri,
        }
