"""
Geographic features and their correspondence with the M0 geographic code list.
"""

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from rdflib import OWL, RDF, RDFS, SKOS, Graph, Literal, URIRef

from ..constants import GEO, PRIMARY_LANGUAGE
from ..shared.models import EntityType
from .uri_utils import M0URIUtils

if TYPE_CHECKING:
    from ..config import ConverterConfig
    from ..core.http_client import GeoFeatureClient, GeoItem

logger = logging.getLogger(__name__)

FRANCE_CODE = "FR"
FRANCE_LABEL = "France"
# M0 labels France in capitals
FRANCE_KEY = "FRANCE"


class GeoFeatureModelMaker:
    """
    Builds ``geo:Feature`` resources for regions, departements and France,
    indexed by label.

    Example:
        >>> maker = GeoFeatureModelMaker(GeoFeatureClient(api_url), config)
        >>> features = maker.create_features()
        >>> found, unresolved = maker.correspondences(code_lists)
    """

    def __init__(self, client: 'GeoFeatureClient', config: 'ConverterConfig'):
        self._client = client
        self._config = config
        self._label_index: Dict[str, str] = {}

    @property
    def label_index(self) -> Dict[str, str]:
        """Feature label -> feature URI."""
        return dict(self._label_index)

    def create_features(self) -> Graph:
        """
        Fetch regions and departements and build the feature model.

        Raises:
            GeoAPIError: If the API cannot be read.
        """
        graph = Graph()
        graph.bind("geo", GEO)
        self._add_items(graph, self._client.get_regions())
        self._add_items(graph, self._client.get_departements())

        france = URIRef(self._config.geo_feature_uri(FRANCE_CODE))
        graph.add((france, RDF.type, GEO.Feature))
        graph.add((france, RDFS.label, Literal(FRANCE_LABEL)))
        self._label_index[FRANCE_KEY] = str(france)

        logger.info(f"{len(self._label_index)} geographic features created")
        return graph

    def _add_items(self, graph: Graph, items: List['GeoItem']) -> None:
        for item in items:
            feature = URIRef(self._config.geo_feature_uri(item["code"]))
            graph.add((feature, RDF.type, GEO.Feature))
            graph.add((feature, RDFS.label, Literal(item["intitule"])))
            graph.add((feature, OWL.sameAs, URIRef(item["uri"])))
            self._label_index[item["intitule"]] = str(feature)

    def correspondences(
        self,
        code_list_graph: Graph,
        code_list_number: Optional[int] = None,
    ) -> Tuple[Dict[str, str], List[Tuple[str, str]]]:
        """
        Match the codes of the M0 geographic code list with features.

        Codes are matched by their French label, trimmed.

        Args:
            code_list_graph: SKOS model of the M0 code lists.
            code_list_number: The geographic code list, defaults to the configured one.

        Returns:
            (code -> feature URI, unresolved (code, label) pairs), both
            ordered by code.
        """
        if not self._label_index:
            self.create_features()
        number = self._config.geo_code_list if code_list_number is None else code_list_number
        scheme = URIRef(M0URIUtils.resource_uri(EntityType.CODELIST, number))

        matched: Dict[str, str] = {}
        unresolved: List[Tuple[str, str]] = []
        for concept in sorted(code_list_graph.subjects(SKOS.inScheme, scheme)):
            code = code_list_graph.value(concept, SKOS.notation)
            labels = [
                label for label in code_list_graph.objects(concept, SKOS.prefLabel)
                if isinstance(label, Literal) and label.language == PRIMARY_LANGUAGE
            ]
            if code is None or not labels:
                logger.warning(f"Code {concept} has no notation or no French label")
                continue
            label = str(labels[0])
            feature = self._label_index.get(label.strip())
            if feature is None:
                unresolved.append((str(code), label))
            else:
                matched[str(code)] = feature

        logger.info(f"{len(matched)} codes matched with features, {len(unresolved)} unresolved")
        return dict(sorted(matched.items())), sorted(unresolved)
