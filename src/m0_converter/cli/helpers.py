"""
CLI helper utilities.

This module provides shared utilities for CLI commands including:
- Configuration loading
- Logging setup
- Summary printing
"""

import io
import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Optional, Dict, Any, Literal

# Type alias for log levels
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_LOG_FILE = "m0_converter.log"


def _ensure_utf8_stdout() -> None:
    """Ensure stdout can handle UTF-8 characters on Windows."""
    if sys.platform == 'win32':
        try:
            sys.stdout.reconfigure(encoding='utf-8', errors='replace')
        except (AttributeError, TypeError):
            try:
                sys.stdout = io.TextIOWrapper(
                    sys.stdout.buffer, encoding='utf-8', errors='replace'
                )
            except AttributeError:
                pass  # Not a TTY, let it be


# French labels are printed as is
_ensure_utf8_stdout()


def get_default_config_path() -> str:
    """Get the default configuration file path.

    Returns:
        Path to config.json in the current working directory.
    """
    return str(Path.cwd() / DEFAULT_CONFIG_FILE)


def setup_logging(
    level: LogLevel = "INFO",
    log_file: Optional[str] = None
) -> Optional[str]:
    """
    Setup logging configuration with fallback locations.

    If the primary log file location fails (permission denied, disk full, etc.),
    attempts to write to fallback locations in order:
    1. Requested location
    2. System temp directory
    3. User home directory
    4. Console-only (final fallback)

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path. If None, logs to console only.

    Returns:
        The actual log file path used, or None if logging to console only.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    actual_log_file = None

    if log_file:
        log_filename = os.path.basename(log_file) or DEFAULT_LOG_FILE
        fallback_locations = [
            log_file,
            os.path.join(tempfile.gettempdir(), log_filename),
            os.path.join(Path.home(), log_filename),
        ]

        file_handler = None
        for fallback_path in fallback_locations:
            try:
                log_dir = os.path.dirname(fallback_path)
                if log_dir and not os.path.exists(log_dir):
                    os.makedirs(log_dir, exist_ok=True)

                file_handler = logging.FileHandler(fallback_path, encoding='utf-8')
                handlers.append(file_handler)
                actual_log_file = fallback_path

                if fallback_path != log_file:
                    print(f"Note: Using fallback log file: {fallback_path}")
                break

            except PermissionError:
                print(f"  Could not create log at {fallback_path}: Permission denied")
                continue
            except OSError as e:
                print(f"  Could not create log at {fallback_path}: {e}")
                continue

        if not file_handler:
            print("Warning: Could not write log file to any location")
            print(f"  Requested: {log_file}")
            print(f"  Attempted fallbacks: {', '.join(fallback_locations[1:])}")
            print("  Logging to console only")

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(__name__)
    if actual_log_file:
        logger.info(f"Logging to: {actual_log_file}")

    return actual_log_file


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Dictionary containing the configuration.

    Raises:
        ValueError: If config_path is empty, not a .json file, or the file contains invalid JSON.
        FileNotFoundError: If the configuration file doesn't exist.
        IOError: If there's an error reading the file.
    """
    if not config_path:
        raise ValueError("config_path cannot be empty")

    path = Path(config_path)
    if path.suffix.lower() != '.json':
        raise ValueError(f"Configuration file must have a .json extension: {config_path}")
    if not path.is_file():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n"
            f"Please create a config.json file or specify one with --config"
        )

    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(
            f"Invalid JSON in configuration file {path} at line {e.lineno}, column {e.colno}: {e.msg}"
        )
    except UnicodeDecodeError as e:
        raise ValueError(f"File encoding error in {path}: {e}")
    except OSError as e:
        raise IOError(f"Error loading configuration file: {e}")

    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a JSON object, got {type(config)}")

    return config


def print_header(title: str, width: int = 60) -> None:
    """Print a formatted header with the given title.

    Args:
        title: The title to display in the header.
        width: Total width of the header line.
    """
    print("\n" + "=" * width)
    print(title)
    print("=" * width)


def print_footer(width: int = 60) -> None:
    """Print a footer line."""
    print("=" * width + "\n")

