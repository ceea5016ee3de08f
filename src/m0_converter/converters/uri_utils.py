"""
URI Utilities - parsing and building of M0 URIs.

M0 resources follow ``http://baseUri/{type}s/{type}/{n}[/{ATTRIBUTE}]`` and
live in named graphs ``http://rdf.insee.fr/graphe/{type}s``. This module
turns those URIs into typed references and back, and holds the string
helpers used to derive target URIs (local names, camel case labels).
"""

import logging
import unicodedata
from typing import NamedTuple, Optional, Union

from rdflib import URIRef

from ..constants import M0_BASE_GRAPH_URI, M0_BASE_URI, M0_SEQUENCE_TOKEN
from ..shared.models import EntityType

logger = logging.getLogger(__name__)

# Words dropped when building camel case names from French labels
STOP_WORDS = {"de", "du", "des", "la", "le", "les", "et", "d", "l"}


class M0Reference(NamedTuple):
    """A numbered M0 resource, optionally narrowed to one of its attributes."""
    entity_type: EntityType
    number: int
    attribute: Optional[str] = None

    @property
    def uri(self) -> str:
        return M0URIUtils.resource_uri(self.entity_type, self.number, self.attribute)

    @property
    def base(self) -> 'M0Reference':
        """The reference without its attribute part."""
        return M0Reference(self.entity_type, self.number)

    def __str__(self) -> str:
        return self.uri


class M0URIUtils:
    """
    Utility class for M0 URI handling.

    Example:
        >>> M0URIUtils.resource_uri(EntityType.SERIES, 12, "REPLACES")
        'http://baseUri/series/serie/12/REPLACES'
        >>> M0URIUtils.parse("http://baseUri/series/serie/12/REPLACES")
        M0Reference(entity_type=<EntityType.SERIES: 'serie'>, number=12, attribute='REPLACES')
    """

    @staticmethod
    def graph_uri(entity_type: Union[EntityType, str]) -> URIRef:
        """Name of the M0 graph holding a type (or a plain graph token such as 'associations')."""
        if isinstance(entity_type, EntityType):
            return URIRef(M0_BASE_GRAPH_URI + entity_type.plural)
        return URIRef(M0_BASE_GRAPH_URI + entity_type)

    @staticmethod
    def type_base_uri(entity_type: EntityType) -> str:
        """Common prefix of all resources of a type, with trailing slash."""
        return f"{M0_BASE_URI}{entity_type.plural}/{entity_type.value}/"

    @staticmethod
    def resource_uri(entity_type: EntityType, number: Union[int, str], attribute: Optional[str] = None) -> str:
        uri = f"{M0URIUtils.type_base_uri(entity_type)}{number}"
        if attribute:
            uri += "/" + attribute
        return uri

    @staticmethod
    def sequence_uri(entity_type: EntityType) -> str:
        return M0URIUtils.type_base_uri(entity_type) + M0_SEQUENCE_TOKEN

    @staticmethod
    def parse(uri: Optional[Union[str, URIRef]]) -> Optional[M0Reference]:
        """
        Parse an M0 resource or attribute URI.

        Args:
            uri: The URI to parse.

        Returns:
            The reference, or None when the URI is not a numbered M0
            resource (other base, unknown type, sequence resource...).
        """
        if uri is None:
            return None
        uri_str = str(uri)
        if not uri_str.startswith(M0_BASE_URI):
            return None

        parts = uri_str[len(M0_BASE_URI):].split("/")
        if len(parts) < 3:
            return None
        entity_type = EntityType.from_token(parts[1])
        if entity_type is None or parts[0] != entity_type.plural:
            return None
        if not parts[2].isdigit():
            return None

        attribute = "/".join(parts[3:]) or None
        return M0Reference(entity_type, int(parts[2]), attribute)

    @staticmethod
    def has_suffix(uri: Union[str, URIRef], suffix: str) -> bool:
        return str(uri).endswith("/" + suffix)

    @staticmethod
    def local_name(uri: Union[str, URIRef]) -> str:
        """Last segment of a URI, after '#' or '/'."""
        uri_str = str(uri)
        if '#' in uri_str:
            return uri_str.rsplit('#', 1)[-1]
        return uri_str.rstrip('/').rsplit('/', 1)[-1]


def uncapitalize(text: str) -> str:
    """Lower the first character only."""
    if not text:
        return text
    return text[0].lower() + text[1:]


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")


def _pluralize(word: str) -> str:
    if word.endswith(("s", "x", "z")):
        return word
    return word + "s"


def camel_case(label: Optional[str], lower: bool = True, plural: bool = False) -> Optional[str]:
    """
    Build a camel case name from a (French) label.

    Accents and stop words (articles, 'de', elided 'l'' and 'd'') are
    removed. In plural mode the first word is pluralized, together with
    the past participles agreeing with it ('Unité enquêtée' gives
    'unitesEnquetees').

    Args:
        label: The label, None is returned unchanged.
        lower: Start with a lower case letter.
        plural: Pluralize the head noun.

    Example:
        >>> camel_case("Catégorie de source", lower=True, plural=True)
        'categoriesSource'
    """
    if label is None:
        return None

    words = []
    for raw_word in label.replace("'", "' ").replace("’", "' ").split():
        word = raw_word.rstrip("'")
        if not word or word.lower() in STOP_WORDS:
            continue
        words.append(word)

    if not words:
        return ""

    if plural:
        words[0] = _pluralize(words[0])
        for index in range(1, len(words)):
            if not words[index].lower().endswith(("é", "ée")):
                break
            words[index] = _pluralize(words[index])

    pieces = []
    for index, word in enumerate(words):
        plain = strip_accents(word).lower()
        if index == 0 and lower:
            pieces.append(plain)
        else:
            pieces.append(plain[:1].upper() + plain[1:])
    return "".join(pieces)
