"""
RDF format support for the M0 converter.

- m0_store: read-only accessor over the M0 dataset
- rdf_parser: dataset and graph loading with memory checks
- rdf_writer: atomic Turtle / TriG / delimited text output
"""

from .m0_store import M0Store, node_sort_key
from .rdf_parser import MemoryManager, RDFGraphParser
from .rdf_writer import bind_prefixes, write_dataset, write_graph, write_lines

__all__ = [
    'M0Store',
    'node_sort_key',
    'MemoryManager',
    'RDFGraphParser',
    'bind_prefixes',
    'write_dataset',
    'write_graph',
    'write_lines',
]
