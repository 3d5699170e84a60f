"""Load registries from YAML definitions.

Framework registries ship in ``chipforge.data/registries/``. Project
registries live in the project config directory, one ``<name>.yaml`` file
per registry, and follow the same format::

    name: frontend
    entries:
      - id: architecture
        name: Architecture Overview
        description: High-level system design
        path: docs/contexts/architecture.context.md
        tags: [architecture, design]
        category: technical
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import yaml

from chipforge.core.exceptions import RegistryDefinitionError
from chipforge.core.schemas import SchemaValidationError, validate_payload
from chipforge.core.utils.io import read_yaml
from chipforge.data import list_files

from .models import FRAMEWORK, PROJECT, Registry, RegistryEntry

logger = logging.getLogger(__name__)

_REGISTRY_SUFFIX = ".registry"


def _registry_name_from_path(path: Path) -> str:
    stem = path.stem
    if stem.endswith(_REGISTRY_SUFFIX):
        stem = stem[: -len(_REGISTRY_SUFFIX)]
    return stem


def build_registry(
    name: str,
    definitions: Union[Mapping[str, Mapping[str, Any]], Iterable[Mapping[str, Any]]],
    *,
    managed_by: str = PROJECT,
    description: str = "",
) -> Registry:
    """Build a registry from in-memory definitions.

    ``definitions`` is either a list of entry dicts or a mapping of
    ``id -> entry dict`` (the ``id`` key may then be omitted).

    Raises:
        RegistryDefinitionError: If the definitions fail the registry schema.
    """
    if isinstance(definitions, Mapping):
        entries = []
        for entry_id, data in definitions.items():
            if "id" in data and data["id"] != entry_id:
                raise RegistryDefinitionError(
                    f"Registry '{name}': key '{entry_id}' does not match entry id '{data['id']}'",
                    context={"registry": name, "id": entry_id},
                )
            entries.append({"id": entry_id, **data})
    else:
        entries = [dict(data) for data in definitions]

    try:
        validate_payload({"name": name, "entries": entries}, "registry")
    except SchemaValidationError as exc:
        raise RegistryDefinitionError(
            f"Invalid definition for registry '{name}': {exc}",
            context={"registry": name},
        ) from exc

    return Registry(
        name,
        (RegistryEntry.from_dict(data) for data in entries),
        managed_by=managed_by,
        description=description,
    )


def load_registry_file(
    path: Path,
    name: Optional[str] = None,
    *,
    managed_by: str = PROJECT,
) -> Registry:
    """Load one registry definition file.

    The registry name is ``name`` when given, else the ``name`` key of the
    file, else the file stem (a trailing ``.registry`` is dropped).

    Raises:
        RegistryDefinitionError: If the file is unreadable or fails the schema.
    """
    path = Path(path)
    try:
        data = read_yaml(path, default=None, raise_on_error=True)
    except (OSError, yaml.YAMLError) as exc:
        raise RegistryDefinitionError(
            f"Cannot read registry file {path}: {exc}",
            context={"path": str(path)},
        ) from exc

    if not isinstance(data, dict):
        raise RegistryDefinitionError(
            f"Registry file must be a YAML mapping: {path}",
            context={"path": str(path)},
        )

    try:
        validate_payload(data, "registry")
    except SchemaValidationError as exc:
        raise RegistryDefinitionError(
            f"Invalid registry file {path}: {exc}",
            context={"path": str(path)},
        ) from exc

    registry_name = name or data.get("name") or _registry_name_from_path(path)
    return Registry(
        registry_name,
        (RegistryEntry.from_dict(entry) for entry in data["entries"]),
        managed_by=managed_by,
        description=str(data.get("description", "")),
    )


def load_builtin_registries() -> Dict[str, Registry]:
    """Load the framework registries bundled with chipforge."""
    registries: Dict[str, Registry] = {}
    for path in list_files("registries", "*.yaml"):
        registry = load_registry_file(path, managed_by=FRAMEWORK)
        registries[registry.name] = registry
    return registries


def discover_project_registries(directory: Path) -> Dict[str, Registry]:
    """Load every ``*.yaml``/``*.yml`` registry file in ``directory``.

    A missing directory yields no registries.

    Returns:
        Dict mapping registry name to registry, in file name order
    """
    directory = Path(directory)
    registries: Dict[str, Registry] = {}
    if not directory.is_dir():
        logger.debug("No project registries directory at %s", directory)
        return registries

    paths = sorted(list(directory.glob("*.yaml")) + list(directory.glob("*.yml")))
    for path in paths:
        registry = load_registry_file(path, managed_by=PROJECT)
        if registry.name in registries:
            raise RegistryDefinitionError(
                f"Registry '{registry.name}' is defined by more than one file in {directory}",
                context={"registry": registry.name, "path": str(path)},
            )
        logger.debug("Loaded project registry '%s' (%d entries) from %s", registry.name, len(registry), path)
        registries[registry.name] = registry
    return registries


__all__ = [
    "build_registry",
    "load_registry_file",
    "load_builtin_registries",
    "discover_project_registries",
]
