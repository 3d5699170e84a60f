"""Registry store: the read-only set of registries used by one process.

Built once at start-up from the bundled framework registries plus any
project registries, then passed to validators and loaders. Nothing mutates
it afterwards, so one store can be shared by any number of validations.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from chipforge.core.exceptions import RegistryConflictError

from .loader import load_builtin_registries
from .models import Registry, RegistryEntry

logger = logging.getLogger(__name__)


class RegistryStore:
    """Read-only lookup over named registries.

    Example:
        store = build_registry_store(discover_project_registries(path))
        entry = store.get("frontend", "architecture")
        path = store.resolve_content_path("frontend", "architecture")
    """

    def __init__(self, registries: Mapping[str, Registry]) -> None:
        self._registries = MappingProxyType(dict(registries))

    def __contains__(self, registry_name: object) -> bool:
        return registry_name in self._registries

    def __repr__(self) -> str:
        return f"RegistryStore({list(self._registries)!r})"

    def registry(self, registry_name: str) -> Optional[Registry]:
        return self._registries.get(registry_name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._registries)

    def framework_names(self) -> Tuple[str, ...]:
        return tuple(name for name, reg in self._registries.items() if reg.is_framework)

    def project_names(self) -> Tuple[str, ...]:
        return tuple(name for name, reg in self._registries.items() if not reg.is_framework)

    def get(self, registry_name: str, entry_id: str) -> Optional[RegistryEntry]:
        """Return the entry, or None when the registry or id is unknown."""
        registry = self._registries.get(registry_name)
        if registry is None:
            return None
        return registry.get(entry_id)

    def exists(self, registry_name: str, entry_id: str) -> bool:
        return self.get(registry_name, entry_id) is not None

    def all_ids(self, registry_name: str) -> Tuple[str, ...]:
        """Entry ids of a registry in definition order (empty if unknown)."""
        registry = self._registries.get(registry_name)
        return registry.ids() if registry is not None else ()

    def resolve_content_path(self, registry_name: str, entry_id: str) -> Optional[str]:
        entry = self.get(registry_name, entry_id)
        return entry.content_ref if entry is not None else None

    def chips_by_tag(self, tag: str, registry_name: str) -> List[RegistryEntry]:
        registry = self._registries.get(registry_name)
        return registry.by_tag(tag) if registry is not None else []

    def chips_by_category(self, category: Optional[str], registry_name: str) -> List[RegistryEntry]:
        registry = self._registries.get(registry_name)
        return registry.by_category(category) if registry is not None else []

    def all_chips(self) -> Iterator[Tuple[str, RegistryEntry]]:
        """Yield ``(registry_name, entry)`` for every entry of every registry."""
        for name, registry in self._registries.items():
            for entry in registry.values():
                yield name, entry


def build_registry_store(
    project_registries: Optional[Mapping[str, Registry]] = None,
    *,
    include_builtin: bool = True,
) -> RegistryStore:
    """Merge the built-in registries with caller-supplied project registries.

    Raises:
        RegistryConflictError: If a project registry reuses a built-in name.
    """
    merged: Dict[str, Registry] = dict(load_builtin_registries()) if include_builtin else {}

    for name, registry in (project_registries or {}).items():
        if name in merged:
            raise RegistryConflictError(
                f"Registry '{name}' would shadow a built-in registry; choose another name",
                context={"registry": name, "builtin": sorted(merged)},
            )
        merged[name] = registry

    logger.debug("Registry store initialised with %s", ", ".join(merged))
    return RegistryStore(merged)


@lru_cache(maxsize=1)
def default_registry_store() -> RegistryStore:
    """Store holding only the built-in framework registries (cached)."""
    return build_registry_store()


__all__ = ["RegistryStore", "build_registry_store", "default_registry_store"]
