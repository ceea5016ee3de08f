"""
Input and output formats.

- rdf: M0 dataset accessor, parsing and writing
- schema: report schema listing and MSD reader
"""

from .schema import SchemaReader, SchemaResourceError

__all__ = [
    'SchemaReader',
    'SchemaResourceError',
]
