"""
Centralized constants for the M0 converter.

Namespaces, M0 predicates and graph names that are fixed by the legacy
interim store, plus the limits used by the memory pre-flight checks.
Configurable base URIs for the target model live in ``config.py``.
"""

from rdflib import Namespace, URIRef


class MemoryLimits:
    """Limits for the pre-flight memory check on dataset files."""
    MIN_AVAILABLE_MEMORY_MB = 512
    MAX_SAFE_FILE_MB = 500
    MEMORY_MULTIPLIER = 3.5


# Legacy M0 store
M0_BASE_URI = "http://baseUri/"
M0_BASE_GRAPH_URI = "http://rdf.insee.fr/graphe/"
M0_ASSOCIATIONS_GRAPH = "associations"

M0_MESSAGE = Namespace("http://www.SDMX.org/resources/SDMXML/schemas/v2_0/message#")
M0_VALUES = M0_MESSAGE.values
M0_VALUES_EN = M0_MESSAGE.valuesGb
M0_RELATED_TO = M0_MESSAGE.relatedTo
M0_RELATED_TO_EN = M0_MESSAGE.relatedToGb
M0_SEQUENCE_VALUE = URIRef("http://rem.org/schema#sequenceValue")
M0_SEQUENCE_TOKEN = "sequence"

# Association suffix tokens
ASSOCIATED_WITH = "ASSOCIE_A"
RELATED_TO = "RELATED_TO"
REPLACES = "REPLACES"
REPLACED_BY = "REMPLACE_PAR"
PRODUCED_FROM = "PRODUCED_FROM"

# Target vocabularies
INSEE = Namespace("http://rdf.insee.fr/def/base#")
SDMX_MM = Namespace("http://www.w3.org/ns/sdmx-mm#")
DQV = Namespace("http://www.w3.org/ns/dqv#")
ORG = Namespace("http://www.w3.org/ns/org#")
PROV = Namespace("http://www.w3.org/ns/prov#")
FOAF = Namespace("http://xmlns.com/foaf/0.1/")
DC = Namespace("http://purl.org/dc/elements/1.1/")
SCHEMA = Namespace("https://schema.org/")
GEO = Namespace("http://www.opengis.net/ont/geosparql#")

SIMS_REPORTED_ATTRIBUTE = SDMX_MM.ReportedAttribute
METADATA_REPORT = SDMX_MM.MetadataReport
DQV_QUALITY_MEASUREMENT = DQV.QualityMeasurement
DQV_METRIC = DQV.Metric

PRIMARY_LANGUAGE = "fr"
SECONDARY_LANGUAGE = "en"

# Prefixes bound on every output graph
PREFIXES = {
    "insee": INSEE,
    "sdmx-mm": SDMX_MM,
    "org": ORG,
    "prov": PROV,
    "foaf": FOAF,
    "dc": DC,
    "schema": SCHEMA,
    "geo": GEO,
}
