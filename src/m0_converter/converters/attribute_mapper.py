"""
Attribute Mapper - literal and coded properties of operation-like resources.

Families, series, operations and indicators share the same descriptive
attributes. Each attribute of the property table is read from the M0
attribute sub-resource and attached to the target resource:

- string attributes become language-tagged literals (French, plus English
  when an English value exists);
- coded attributes become references to code concepts, resolved through
  a ``CodeListLookup``.
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from rdflib import DCTERMS, RDF, SKOS, Graph, Literal, URIRef

from ..constants import PRIMARY_LANGUAGE, SECONDARY_LANGUAGE
from ..shared.models import Diagnostics, IssueKind
from .uri_utils import M0Reference, camel_case

if TYPE_CHECKING:
    from ..formats.rdf.m0_store import M0Store

logger = logging.getLogger(__name__)

PROPERTY_MAPPINGS: Dict[str, URIRef] = {
    "TITLE": SKOS.prefLabel,
    "ALT_LABEL": SKOS.altLabel,
    "SUMMARY": DCTERMS.abstract,
    "HISTORY": SKOS.historyNote,
    "SOURCE_CATEGORY": DCTERMS.type,
    "FREQ_COLL": DCTERMS.accrualPeriodicity,
}

STRING_PROPERTIES = ("TITLE", "ALT_LABEL", "SUMMARY", "HISTORY")

# Plain literal; the English value is only used when there is no French one
UNTAGGED_PROPERTIES = frozenset({"ALT_LABEL"})

# Coded attribute -> French label of its code list
CODED_PROPERTIES: Dict[str, str] = {
    "SOURCE_CATEGORY": "Catégorie de source",
    "FREQ_COLL": "Fréquence",
}

# Both spellings exist in M0
YEAR_PROPERTIES = ("MILLESIME", "MILESSIME")


class CodeListLookup:
    """
    Resolves a code value of a code list to a code concept URI.

    With a target code-list graph, the scheme is found by its French
    ``skos:prefLabel`` and the concept by its ``skos:notation``. Without
    one, the URI is derived from the code list label:
    ``{codes_base}{camelCase(label, plural)}/{value}``.

    Example:
        >>> CodeListLookup("http://id.insee.fr/codes/").code_uri("A", "Fréquence")
        'http://id.insee.fr/codes/frequences/A'
    """

    def __init__(self, codes_base: str, code_list_graph: Optional[Graph] = None):
        self._codes_base = codes_base
        self._graph = code_list_graph
        self._schemes: Dict[str, Optional[URIRef]] = {}

    def _scheme(self, label: str) -> Optional[URIRef]:
        if label not in self._schemes:
            found = None
            for scheme in sorted(self._graph.subjects(SKOS.prefLabel, Literal(label, lang=PRIMARY_LANGUAGE))):
                if (scheme, RDF.type, SKOS.ConceptScheme) in self._graph:
                    found = scheme
                    break
            self._schemes[label] = found
        return self._schemes[label]

    def code_uri(self, value: str, label: str) -> Optional[str]:
        """
        URI of the code with notation ``value`` in the code list ``label``.

        Returns:
            The concept URI, or None when the code list graph does not
            contain it.
        """
        if self._graph is None:
            return f"{self._codes_base}{camel_case(label, lower=True, plural=True)}/{value}"

        scheme = self._scheme(label)
        if scheme is None:
            logger.warning(f"No code list with label '{label}' in the code list graph")
            return None
        for concept in sorted(self._graph.subjects(SKOS.inScheme, scheme)):
            notations = [str(n) for n in self._graph.objects(concept, SKOS.notation)]
            if value in notations:
                return str(concept)
        return None


class AttributeMapper:
    """
    Fills the descriptive properties of operation-like target resources.

    Example:
        >>> mapper = AttributeMapper(store, CodeListLookup(config.codes_base), diagnostics)
        >>> mapper.fill_literal_properties(graph, URIRef(target), M0Reference(EntityType.OPERATION, 7))
    """

    def __init__(
        self,
        store: 'M0Store',
        code_lookup: CodeListLookup,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self._store = store
        self._code_lookup = code_lookup
        self._diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def read_value(self, reference: M0Reference, english: bool = False) -> Optional[str]:
        """
        Single trimmed value of an attribute sub-resource.

        Absent, multiple and blank values are recorded and give None.
        """
        attribute_uri = reference.uri
        values = self._store.values(reference.entity_type, attribute_uri, english=english)
        if not values:
            self._diagnostics.record(IssueKind.MISSING_VALUE, attribute_uri, f"No value for {attribute_uri}", logger)
            return None
        if len(values) > 1:
            self._diagnostics.record(
                IssueKind.AMBIGUOUS_VALUE, attribute_uri,
                f"Several values for {attribute_uri}: {[str(v) for v in values]}", logger,
            )
            return None
        value = str(values[0]).strip()
        if not value:
            self._diagnostics.record(IssueKind.EMPTY_VALUE, attribute_uri, f"Empty value for {attribute_uri}", logger)
            return None
        return value

    def fill_literal_properties(self, target: Graph, target_uri: URIRef, reference: M0Reference) -> int:
        """
        Add the table properties of an M0 resource to a target resource.

        Args:
            target: Graph receiving the statements.
            target_uri: The target resource.
            reference: The M0 resource (without attribute).

        Returns:
            Number of statements added.
        """
        added = 0
        for attribute, predicate in PROPERTY_MAPPINGS.items():
            attribute_ref = M0Reference(reference.entity_type, reference.number, attribute)

            if attribute in STRING_PROPERTIES:
                for statement in self._string_statements(attribute_ref, predicate):
                    target.add((target_uri, *statement))
                    added += 1
            elif attribute in CODED_PROPERTIES:
                value = self.read_value(attribute_ref)
                if value is None:
                    continue
                code_uri = self._code_lookup.code_uri(value, CODED_PROPERTIES[attribute])
                if code_uri is None:
                    self._diagnostics.record(
                        IssueKind.UNRESOLVED_REFERENCE, attribute_ref.uri,
                        f"Code '{value}' not found in code list '{CODED_PROPERTIES[attribute]}'", logger,
                    )
                    continue
                target.add((target_uri, predicate, URIRef(code_uri)))
                added += 1
        return added

    def _string_statements(self, attribute_ref: M0Reference, predicate: URIRef) -> List[Tuple[URIRef, Literal]]:
        statements = []
        value = self.read_value(attribute_ref)
        if value is not None:
            if attribute_ref.attribute in UNTAGGED_PROPERTIES:
                return [(predicate, Literal(value))]
            statements.append((predicate, Literal(value, lang=PRIMARY_LANGUAGE)))
        # English values are optional, absent ones are not worth a record
        if self._store.values(attribute_ref.entity_type, attribute_ref.uri, english=True):
            english = self.read_value(attribute_ref, english=True)
            if english is not None:
                statements.append((predicate, Literal(english, lang=SECONDARY_LANGUAGE)))
        return statements

    def fill_validity(self, target: Graph, target_uri: URIRef, reference: M0Reference) -> int:
        """Add ``dcterms:valid`` from the vintage year of an operation."""
        added = 0
        for attribute in YEAR_PROPERTIES:
            attribute_ref = M0Reference(reference.entity_type, reference.number, attribute)
            if not self._store.values(reference.entity_type, attribute_ref.uri):
                continue
            year = self.read_value(attribute_ref)
            if year is None:
                continue
            if len(year) != 4 or not year.isdigit():
                self._diagnostics.record(
                    IssueKind.INVALID_VALUE, attribute_ref.uri,
                    f"Invalid year value for resource {reference.uri}: {year}", logger,
                )
                continue
            target.add((target_uri, DCTERMS.valid, Literal(year)))
            added += 1
        return added
