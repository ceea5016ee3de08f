"""
RDF Parser Module

Loads the M0 dataset and the auxiliary Turtle resources with memory
management.

Components:
- MemoryManager: Pre-flight memory checks before parsing large files
- RDFGraphParser: dataset and graph loading with format resolution
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import psutil
from rdflib import Dataset, Graph
from rdflib.util import guess_format

from ...constants import MemoryLimits

logger = logging.getLogger(__name__)


class MemoryManager:
    """
    Manage memory usage during RDF parsing to prevent out-of-memory crashes.

    The whole M0 dataset is held in memory for the run, so large dump
    files are checked against available memory before parsing.
    """

    MIN_AVAILABLE_MB = MemoryLimits.MIN_AVAILABLE_MEMORY_MB // 2
    MAX_SAFE_FILE_MB = MemoryLimits.MAX_SAFE_FILE_MB
    MEMORY_MULTIPLIER = MemoryLimits.MEMORY_MULTIPLIER

    LOAD_FACTOR = 0.7  # Only use 70% of available memory as safe threshold

    @staticmethod
    def get_available_memory_mb() -> float:
        """
        Get available system memory in MB.

        Returns:
            Available memory in MB, or the minimum threshold if detection fails.
        """
        try:
            return psutil.virtual_memory().available / (1024 * 1024)
        except (OSError, RuntimeError) as e:
            logger.warning(f"Could not determine available memory: {e}")
            return MemoryManager.MIN_AVAILABLE_MB

    @staticmethod
    def get_memory_usage_mb() -> float:
        """Get current process memory usage in MB."""
        try:
            return psutil.Process().memory_info().rss / (1024 * 1024)
        except (OSError, psutil.Error):
            return 0.0

    @classmethod
    def check_memory_available(cls, file_size_mb: float, force: bool = False) -> Tuple[bool, str]:
        """
        Check if enough memory is available to parse a file.

        Args:
            file_size_mb: Size of the file in MB.
            force: If True, skip safety checks and allow large files.

        Returns:
            Tuple of (can_proceed: bool, message: str)
        """
        estimated_usage_mb = file_size_mb * cls.MEMORY_MULTIPLIER

        if not force and file_size_mb > cls.MAX_SAFE_FILE_MB:
            return False, (
                f"File size ({file_size_mb:.1f}MB) exceeds safe limit ({cls.MAX_SAFE_FILE_MB}MB). "
                f"Estimated memory required: ~{estimated_usage_mb:.0f}MB. "
                f"To process anyway, use --force-memory."
            )

        available_mb = cls.get_available_memory_mb()

        if available_mb < cls.MIN_AVAILABLE_MB:
            return False, (
                f"Insufficient free memory. "
                f"Available: {available_mb:.0f}MB, "
                f"Minimum required: {cls.MIN_AVAILABLE_MB}MB."
            )

        safe_threshold_mb = available_mb * cls.LOAD_FACTOR
        if estimated_usage_mb > safe_threshold_mb:
            if force:
                return True, (
                    f"WARNING: File may exceed safe memory limits. "
                    f"Estimated usage: ~{estimated_usage_mb:.0f}MB, "
                    f"safe threshold: {safe_threshold_mb:.0f}MB. "
                    f"Proceeding due to --force-memory."
                )
            return False, (
                f"Dataset may be too large for available memory. "
                f"File size: {file_size_mb:.1f}MB, "
                f"estimated parsing memory: ~{estimated_usage_mb:.0f}MB, "
                f"safe threshold: {safe_threshold_mb:.0f}MB "
                f"(Available: {available_mb:.0f}MB)."
            )

        return True, (
            f"Memory OK: File {file_size_mb:.1f}MB, "
            f"estimated usage ~{estimated_usage_mb:.0f}MB of {available_mb:.0f}MB available"
        )

    @classmethod
    def log_memory_status(cls, context: str = "") -> None:
        """Log current memory status for debugging."""
        prefix = f"[{context}] " if context else ""
        logger.debug(
            f"{prefix}Memory status: Process using {cls.get_memory_usage_mb():.0f}MB, "
            f"System available: {cls.get_available_memory_mb():.0f}MB"
        )


class RDFGraphParser:
    """
    Loads RDF files into rdflib graphs and datasets.

    The M0 dump is a quad file (TriG or N-Quads) with one named graph per
    entity family; schema and target reference files are plain Turtle.
    """

    DATASET_FORMATS = {"trig", "nquads", "trix"}
    GRAPH_FORMATS = {"turtle", "xml", "nt", "n3", "json-ld"}

    FORMAT_ALIASES = {
        "ttl": "turtle",
        "turtle": "turtle",
        "rdf": "xml",
        "xml": "xml",
        "nt": "nt",
        "n3": "n3",
        "trig": "trig",
        "nq": "nquads",
        "nquads": "nquads",
        "trix": "trix",
        "jsonld": "json-ld",
        "json-ld": "json-ld",
    }

    @classmethod
    def normalize_format(cls, rdf_format: Optional[str]) -> Optional[str]:
        """Normalize user-provided format/alias to an rdflib format."""
        if not rdf_format:
            return None
        fmt = rdf_format.strip().lower()
        return cls.FORMAT_ALIASES.get(fmt, fmt)

    @classmethod
    def resolve_format(cls, rdf_format: Optional[str], file_path: Union[str, Path], default: str) -> str:
        """Resolve the effective format from explicit input, then the file extension."""
        normalized = cls.normalize_format(rdf_format) or cls.normalize_format(guess_format(str(file_path)))
        normalized = normalized or default
        if normalized not in cls.DATASET_FORMATS | cls.GRAPH_FORMATS:
            raise ValueError(
                f"Unsupported RDF serialization format '{rdf_format or normalized}'. "
                f"Supported formats: {sorted(cls.DATASET_FORMATS | cls.GRAPH_FORMATS)}"
            )
        return normalized

    @staticmethod
    def _preflight(path: Path, force_large_file: bool) -> float:
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        file_size_mb = path.stat().st_size / (1024 * 1024)
        logger.info(f"File size: {file_size_mb:.2f} MB")

        can_proceed, memory_message = MemoryManager.check_memory_available(
            file_size_mb,
            force=force_large_file
        )
        if not can_proceed:
            logger.error(f"Memory check failed: {memory_message}")
            raise MemoryError(memory_message)
        logger.info(f"Memory check: {memory_message}")
        return file_size_mb

    @classmethod
    def parse_dataset_file(
        cls,
        file_path: Union[str, Path],
        force_large_file: bool = False,
        rdf_format: Optional[str] = None,
    ) -> Tuple[Dataset, int]:
        """
        Parse a quad file into a Dataset with memory safety checks.

        Args:
            file_path: Path to the TriG / N-Quads file
            force_large_file: If True, skip memory safety checks for large files
            rdf_format: Optional explicit serialization name/alias

        Returns:
            Tuple of (parsed Dataset, quad count)

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file has invalid syntax or holds no statements
            MemoryError: If insufficient memory is available
        """
        path = Path(file_path)
        file_size_mb = cls._preflight(path, force_large_file)
        format_name = cls.resolve_format(rdf_format, path, default="trig")

        MemoryManager.log_memory_status("Before parsing")
        dataset = Dataset()
        try:
            dataset.parse(str(path), format=format_name)
        except MemoryError as e:
            MemoryManager.log_memory_status("After MemoryError")
            raise MemoryError(
                f"Insufficient memory while parsing dataset ({file_size_mb:.1f} MB). "
                f"Original error: {e}"
            )
        except Exception as e:
            logger.error(f"Failed to parse dataset file: {e}")
            raise ValueError(f"Invalid RDF syntax in {path}: {e}")
        MemoryManager.log_memory_status("After parsing")

        quad_count = sum(len(graph) for graph in dataset.graphs())
        graph_count = sum(1 for graph in dataset.graphs() if len(graph) > 0)
        logger.info(
            f"Successfully parsed dataset with {quad_count} quads "
            f"across {graph_count} graphs ({file_size_mb:.1f} MB)"
        )
        if quad_count == 0:
            raise ValueError(f"No RDF statements found in {path}")
        return dataset, quad_count

    @classmethod
    def parse_graph_file(cls, file_path: Union[str, Path], rdf_format: Optional[str] = None) -> Graph:
        """
        Parse a single-graph file (MSD, target code lists, organizations).

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file has invalid syntax
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        format_name = cls.resolve_format(rdf_format, path, default="turtle")
        graph = Graph()
        try:
            graph.parse(str(path), format=format_name)
        except Exception as e:
            logger.error(f"Failed to parse RDF file: {e}")
            raise ValueError(f"Invalid RDF syntax in {path}: {e}")
        logger.info(f"Successfully parsed {len(graph)} triples from {path.name}")
        return graph
