"""
RDF Writer Module

Writes output graphs and datasets atomically: content is serialized to a
temporary file in the destination directory, then moved into place. The
temporary file is removed on any failure so no partial output is left.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Tuple, Union

from rdflib import Dataset, Graph

from ...constants import PREFIXES

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def bind_prefixes(graph: Graph) -> Graph:
    """Bind the target vocabulary prefixes used in serialized output."""
    for prefix, namespace in PREFIXES.items():
        graph.bind(prefix, namespace)
    return graph


def _atomic_serialize(graph: Graph, output_path: PathLike, rdf_format: str) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    os.close(fd)
    try:
        graph.serialize(destination=temp_name, format=rdf_format, encoding="utf-8")
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.remove(temp_name)
        raise
    return path


def write_graph(graph: Graph, output_path: PathLike) -> Path:
    """
    Serialize a graph as Turtle.

    Args:
        graph: Graph to write.
        output_path: Destination file.

    Returns:
        The written path.
    """
    path = _atomic_serialize(bind_prefixes(graph), output_path, "turtle")
    logger.info(f"Wrote {len(graph)} triples to {path}")
    return path


def write_dataset(dataset: Dataset, output_path: PathLike) -> Path:
    """Serialize a dataset (default graph plus named graphs) as TriG."""
    path = _atomic_serialize(bind_prefixes(dataset), output_path, "trig")
    logger.info(f"Wrote dataset to {path}")
    return path


def write_lines(lines: Iterable[Tuple[str, str]], output_path: PathLike, separator: str = ";") -> Path:
    """
    Write delimited text lines (e.g. 'code;label') atomically.

    Args:
        lines: Pairs to write, one per line.
        output_path: Destination file.
        separator: Field separator.
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            for first, second in lines:
                f.write(f"{first}{separator}{second}\n")
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.remove(temp_name)
        raise
    return path
