"""
Report schema reader.

The metadata report structure is described by two resources:

- a delimited listing of the attributes, in report order, one
  ``code;predicate`` line per attribute (header line optional);
- the metadata structure definition (MSD), a Turtle file declaring the
  ``rdfs:range`` of each attribute predicate.

Both are required: a run cannot start without them.
"""

import csv
import logging
from pathlib import Path
from typing import List, Optional, Union

from rdflib import RDFS, Graph, URIRef

from ..converters.type_mapper import TypeMapper
from ..shared.models import SchemaEntry
from .rdf.rdf_parser import RDFGraphParser

logger = logging.getLogger(__name__)


class SchemaResourceError(Exception):
    """Raised when the schema listing or the MSD cannot be used."""
    pass


class SchemaReader:
    """
    Builds the ordered list of ``SchemaEntry`` for the report converter.

    Example:
        >>> entries = SchemaReader.read("sims.csv", "sims-msd.ttl")
        >>> entries[0].code
        'S.1.1'
    """

    HEADER_CODE = "code"

    @staticmethod
    def read(schema_path: Union[str, Path], msd_path: Union[str, Path]) -> List[SchemaEntry]:
        """
        Read both schema resources.

        Raises:
            SchemaResourceError: If a file is missing, unreadable, or no
                usable entry remains.
        """
        try:
            msd = RDFGraphParser.parse_graph_file(msd_path)
        except (FileNotFoundError, ValueError) as e:
            raise SchemaResourceError(f"Cannot read metadata structure definition: {e}")
        return SchemaReader.read_with_msd(schema_path, msd)

    @staticmethod
    def read_with_msd(schema_path: Union[str, Path], msd: Graph) -> List[SchemaEntry]:
        """Read the attribute listing, resolving ranges against an already loaded MSD."""
        path = Path(schema_path)
        if not path.is_file():
            raise SchemaResourceError(f"Schema file not found: {path}")

        entries: List[SchemaEntry] = []
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                for line_number, row in enumerate(csv.reader(f, delimiter=";"), start=1):
                    entry = SchemaReader._parse_row(row, line_number, msd)
                    if entry is not None:
                        entries.append(entry)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise SchemaResourceError(f"Error reading schema file {path}: {e}")

        if not entries:
            raise SchemaResourceError(f"No usable schema entry in {path}")
        logger.info(f"Read {len(entries)} schema entries from {path.name}")
        return entries

    @staticmethod
    def _parse_row(row: List[str], line_number: int, msd: Graph) -> Optional[SchemaEntry]:
        cells = [cell.strip() for cell in row]
        if not cells or not any(cells):
            return None
        if len(cells) < 2 or not cells[0] or not cells[1]:
            logger.error(f"Schema line {line_number} ignored: expected 'code;predicate', got {row}")
            return None
        code, predicate = cells[0], cells[1]
        if line_number == 1 and code.lower() == SchemaReader.HEADER_CODE:
            return None

        predicate_ref = URIRef(predicate)
        if next(iter(msd.triples((predicate_ref, None, None))), None) is None:
            logger.error(f"Property {predicate} not found in the metadata structure definition")
            return None

        range_uri = msd.value(predicate_ref, RDFS.range)
        return SchemaEntry(
            code=code,
            predicate=predicate,
            declared_range=TypeMapper.get_declared_range(range_uri),
            range_uri=str(range_uri) if range_uri is not None else None,
        )
