"""Agent configuration file loading.

Configuration files may be YAML, JSON or a Python module. A Python module
must expose the configuration as ``AGENT_CONFIG``, ``agent_config`` or
``config``.
"""
from __future__ import annotations

import importlib.util
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import yaml

from chipforge.core.exceptions import MalformedInputError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)
PYTHON_SUFFIXES = (".py",)
SUPPORTED_SUFFIXES = YAML_SUFFIXES + JSON_SUFFIXES + PYTHON_SUFFIXES

PYTHON_CONFIG_ATTRIBUTES = ("AGENT_CONFIG", "agent_config", "config")


def _load_python(path: Path) -> Any:
    module_name = f"chipforge_agent_{path.stem.replace('-', '_')}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise MalformedInputError(
            f"Cannot import agent configuration module: {path}",
            context={"path": str(path)},
        )
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise MalformedInputError(
            f"Failed to import agent configuration module {path}: {exc}",
            context={"path": str(path)},
        ) from exc

    for attribute in PYTHON_CONFIG_ATTRIBUTES:
        if hasattr(module, attribute):
            return getattr(module, attribute)
    raise MalformedInputError(
        f"Module {path} does not define any of: {', '.join(PYTHON_CONFIG_ATTRIBUTES)}",
        context={"path": str(path)},
    )


def load_agent_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read one agent configuration file into a raw mapping.

    The result is not validated; pass it to
    :class:`~chipforge.core.validation.AgentConfigValidator`.

    Raises:
        MalformedInputError: If the file is missing, unreadable, of an
            unsupported type, unparseable, or does not hold a mapping.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise MalformedInputError(
            f"Unsupported agent configuration file type '{suffix or path.name}'. "
            f"Supported: {', '.join(SUPPORTED_SUFFIXES)}",
            context={"path": str(path)},
        )
    if not path.is_file():
        raise MalformedInputError(
            f"Agent configuration file not found: {path}",
            context={"path": str(path)},
        )

    logger.debug("Loading agent configuration from %s", path)
    if suffix in PYTHON_SUFFIXES:
        data = _load_python(path)
    else:
        try:
            text = path.read_text(encoding="utf-8")
            data = yaml.safe_load(text) if suffix in YAML_SUFFIXES else json.loads(text)
        except (OSError, UnicodeDecodeError, yaml.YAMLError, json.JSONDecodeError) as exc:
            raise MalformedInputError(
                f"Cannot parse agent configuration {path}: {exc}",
                context={"path": str(path)},
            ) from exc

    if not isinstance(data, dict):
        raise MalformedInputError(
            f"Agent configuration {path} must contain a mapping, got {type(data).__name__}",
            context={"path": str(path)},
        )
    return data


def iter_agent_config_files(paths: Iterable[Union[str, Path]]) -> List[Path]:
    """Expand directories into the supported configuration files they contain."""
    files: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(
                sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES)
            )
        else:
            files.append(path)
    return files


__all__ = [
    "SUPPORTED_SUFFIXES",
    "PYTHON_CONFIG_ATTRIBUTES",
    "load_agent_config_file",
    "iter_agent_config_files",
]
