"""Registry entry and registry value types."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from chipforge.core.exceptions import RegistryDefinitionError

# Registry lifecycles.
FRAMEWORK = "framework"  # role, permissions, behaviors; shipped with chipforge
PROJECT = "project"  # content registries supplied by the adopting project


@dataclass(frozen=True)
class RegistryEntry:
    """One named option of a registry (a role, a permission level, a chip...)."""

    id: str
    name: str
    description: str
    content_ref: str  # Markdown file, relative to the project root
    tags: FrozenSet[str] = field(default_factory=frozenset)
    category: Optional[str] = None
    version: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RegistryEntry":
        """Build an entry from its YAML form (``path`` holds the content ref)."""
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description", "")),
            content_ref=str(data["path"]),
            tags=frozenset(str(t) for t in data.get("tags") or ()),
            category=data.get("category"),
            version=None if data.get("version") is None else str(data["version"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["tags"] = sorted(self.tags)
        return data


class Registry(Mapping[str, RegistryEntry]):
    """Immutable mapping of entry id to :class:`RegistryEntry`.

    Iteration follows definition order; that order is what error messages
    use when they enumerate valid ids.
    """

    def __init__(
        self,
        name: str,
        entries: Iterable[RegistryEntry],
        *,
        managed_by: str = PROJECT,
        description: str = "",
    ) -> None:
        if managed_by not in (FRAMEWORK, PROJECT):
            raise ValueError(f"Unknown registry lifecycle: {managed_by!r}")

        collected: Dict[str, RegistryEntry] = {}
        for entry in entries:
            if entry.id in collected:
                raise RegistryDefinitionError(
                    f"Registry '{name}' defines id '{entry.id}' more than once",
                    context={"registry": name, "id": entry.id},
                )
            collected[entry.id] = entry

        if not collected:
            raise RegistryDefinitionError(
                f"Registry '{name}' has no entries defined",
                context={"registry": name},
            )

        self.name = name
        self.managed_by = managed_by
        self.description = description
        self._entries = MappingProxyType(collected)

    def __getitem__(self, entry_id: str) -> RegistryEntry:
        return self._entries[entry_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Registry({self.name!r}, ids={list(self._entries)!r}, managed_by={self.managed_by!r})"

    @property
    def is_framework(self) -> bool:
        return self.managed_by == FRAMEWORK

    def ids(self) -> Tuple[str, ...]:
        """Entry ids in definition order."""
        return tuple(self._entries)

    def by_tag(self, tag: str) -> List[RegistryEntry]:
        return [entry for entry in self._entries.values() if tag in entry.tags]

    def by_category(self, category: Optional[str]) -> List[RegistryEntry]:
        if not category:
            return []
        return [entry for entry in self._entries.values() if entry.category == category]


__all__ = ["RegistryEntry", "Registry", "FRAMEWORK", "PROJECT"]
