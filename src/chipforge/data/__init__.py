"""
chipforge data resource helpers.

Provides access to the bundled defaults, JSON schemas, framework registries,
prompt tables and templates using importlib.resources.
"""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a data file or directory.

    Args:
        subpackage: Name of the data subdirectory (e.g., "config", "schemas")
        filename: Optional filename within the subdirectory

    Returns:
        Absolute path to the file or directory

    Example:
        >>> get_data_path("registries", "role.yaml")
        PosixPath('/path/to/chipforge/data/registries/role.yaml')
    """
    pkg = resources.files("chipforge.data")
    base = Path(str(pkg / subpackage))
    return base / filename if filename else base


@lru_cache(maxsize=64)
def read_yaml(subpackage: str, filename: str) -> Any:
    """
    Read and parse a YAML data file (cached).

    Callers must treat the result as read-only; it is shared between calls.

    Args:
        subpackage: Name of the data subdirectory
        filename: YAML filename

    Returns:
        Parsed YAML content
    """
    path = get_data_path(subpackage, filename)
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def read_text(subpackage: str, filename: str) -> str:
    """
    Read a text data file.

    Args:
        subpackage: Name of the data subdirectory
        filename: Text filename

    Returns:
        File contents as string
    """
    path = get_data_path(subpackage, filename)
    return path.read_text(encoding="utf-8")


def list_files(subpackage: str, pattern: str = "*") -> list[Path]:
    """
    List files matching pattern in a data subdirectory, sorted by name.

    Args:
        subpackage: Name of the data subdirectory
        pattern: Glob pattern (default "*")

    Returns:
        List of matching file paths
    """
    return sorted(get_data_path(subpackage).glob(pattern))


__all__ = [
    "get_data_path",
    "read_yaml",
    "read_text",
    "list_files",
]
