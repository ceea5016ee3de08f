"""
M0 store accessor.

Read-only view over the M0 dataset: named sub-graphs by entity type,
filtered statement iteration through a single higher-order ``select``,
and the handful of lookups every extractor needs (sequence numbers,
existence checks, attribute values).
"""

import logging
from typing import Callable, List, Optional, Set, Tuple, Union

from rdflib import Dataset, Graph, Literal, URIRef
from rdflib.term import Node

from ...constants import M0_SEQUENCE_TOKEN, M0_SEQUENCE_VALUE, M0_VALUES, M0_VALUES_EN
from ...converters.uri_utils import M0URIUtils
from ...shared.models import EntityType

logger = logging.getLogger(__name__)

Triple = Tuple[Node, Node, Node]
TriplePredicate = Callable[[Node, Node, Node], bool]
GraphName = Union[EntityType, str]


def node_sort_key(node: Node) -> Tuple[str, int, str]:
    """Order M0 nodes by type token then number; other nodes by their string form."""
    reference = M0URIUtils.parse(node)
    if reference is None:
        return ("~", 0, str(node))
    return (reference.entity_type.value, reference.number, reference.attribute or "")


def triple_sort_key(triple: Triple) -> Tuple[Tuple[str, int, str], Tuple[str, int, str]]:
    return node_sort_key(triple[0]), node_sort_key(triple[2])


class M0Store:
    """
    Accessor over the M0 dataset.

    The dataset is never modified: graphs missing from the dataset are
    served as empty graphs without being added to it.

    Example:
        >>> store = M0Store(dataset)
        >>> store.max_sequence(EntityType.SERIES)
        142
        >>> store.values(EntityType.SERIES, "http://baseUri/series/serie/12/TITLE")
        [rdflib.term.Literal('Enquête Logement')]
    """

    def __init__(self, dataset: Dataset):
        self._dataset = dataset
        self._graph_names: Set[str] = {str(context.identifier) for context in dataset.graphs()}

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    def graph(self, name: GraphName) -> Graph:
        """
        Return the named M0 graph for an entity type or graph token.

        Args:
            name: An EntityType, or a token such as 'associations'.
        """
        identifier = M0URIUtils.graph_uri(name)
        if str(identifier) not in self._graph_names:
            logger.debug(f"Graph {identifier} not found in dataset, using an empty graph")
            return Graph(identifier=identifier)
        return self._dataset.graph(identifier)

    def select(
        self,
        name: GraphName,
        subject: Optional[Node] = None,
        predicate: Optional[Node] = None,
        obj: Optional[Node] = None,
        where: Optional[TriplePredicate] = None,
    ) -> List[Triple]:
        """
        Pattern-filtered statement iteration.

        Statements matching the (subject, predicate, object) pattern, where
        None is a wildcard, are kept if ``where`` accepts them. The result
        is sorted by the numeric order of subject then object so that it
        never depends on the store's iteration order.

        Args:
            name: Graph to scan.
            subject: Subject pattern or None.
            predicate: Predicate pattern or None.
            obj: Object pattern or None.
            where: Optional filter over (subject, predicate, object).

        Returns:
            The matching triples in ascending order.
        """
        graph = self.graph(name)
        matched = [
            triple for triple in graph.triples((subject, predicate, obj))
            if where is None or where(*triple)
        ]
        matched.sort(key=triple_sort_key)
        return matched

    def max_sequence(self, entity_type: EntityType) -> int:
        """
        Highest number a resource of the type can have.

        The sequence resource holds the next number to attribute, so the
        maximum is its value minus one. A missing or non-literal sequence
        yields 0.
        """
        graph = self.graph(entity_type)
        value = next(graph.objects(None, M0_SEQUENCE_VALUE), None)
        if value is None or not isinstance(value, Literal):
            logger.warning(f"No sequence value found for type {entity_type}")
            return 0
        try:
            return int(str(value).strip()) - 1
        except ValueError:
            logger.error(f"Invalid sequence value for type {entity_type}: {value}")
            return 0

    def exists(self, entity_type: EntityType, number: int) -> bool:
        """True when the resource is the subject of at least one statement."""
        subject = URIRef(M0URIUtils.resource_uri(entity_type, number))
        return next(iter(self.graph(entity_type).triples((subject, None, None))), None) is not None

    def values(self, name: GraphName, subject: Union[str, URIRef], english: bool = False) -> List[Literal]:
        """
        Literal values of an attribute resource.

        Args:
            name: Graph to look in.
            subject: The attribute resource URI.
            english: Read the English value predicate instead of the primary one.

        Returns:
            The values, sorted by lexical form.
        """
        predicate = M0_VALUES_EN if english else M0_VALUES
        found = [
            value for value in self.graph(name).objects(URIRef(str(subject)), predicate)
            if isinstance(value, Literal)
        ]
        return sorted(found, key=str)

    def numbers(self, entity_type: EntityType) -> List[int]:
        """
        Numbers of all resources of a type appearing as subjects.

        The sequence resource is ignored; other unparseable subjects are
        logged at error level.
        """
        base = M0URIUtils.type_base_uri(entity_type)
        found: Set[int] = set()
        for subject in set(self.graph(entity_type).subjects()):
            subject_str = str(subject)
            token = subject_str[len(base):].split("/")[0] if subject_str.startswith(base) else ""
            if token.isdigit():
                found.add(int(token))
            elif token != M0_SEQUENCE_TOKEN:
                logger.error(f"Invalid {entity_type} URI: {subject_str}")
        return sorted(found)
