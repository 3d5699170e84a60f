"""Ad-hoc chip references.

A chip listed under ``chips:`` names its content either through a registry
(``registry`` + ``id``) or directly by file path (``path``). Exactly one of
the two forms is accepted per reference.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from chipforge.core.exceptions import INVALID_FIELD, ValidationIssue


@dataclass(frozen=True)
class ByRegistryId:
    """Chip content resolved through a registry entry."""

    registry: str
    id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"registry": self.registry, "id": self.id}

    def __str__(self) -> str:
        return f"{self.registry}:{self.id}"


@dataclass(frozen=True)
class ByDirectPath:
    """Chip content read from a file path relative to the project root."""

    path: str
    name: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"path": self.path}
        if self.name is not None:
            data["name"] = self.name
        if self.description is not None:
            data["description"] = self.description
        return data

    def __str__(self) -> str:
        return self.name or self.path


ChipReference = Union[ByRegistryId, ByDirectPath]


def parse_chip_reference(
    raw: Mapping[str, Any],
    *,
    path: str,
) -> Tuple[Optional[ChipReference], List[ValidationIssue]]:
    """Turn one raw ``chips:`` item into a reference.

    Registry membership is not checked here; the configuration validator
    does that against its store.

    Returns:
        ``(reference, [])`` on success, ``(None, issues)`` otherwise
    """
    has_registry = "registry" in raw
    has_id = "id" in raw
    has_path = "path" in raw

    if (has_registry or has_id) and has_path:
        return None, [
            ValidationIssue(
                INVALID_FIELD,
                path,
                "Chip reference is ambiguous: give either 'registry' and 'id', or 'path', not both",
            )
        ]

    if has_path:
        return (
            ByDirectPath(
                path=str(raw["path"]),
                name=raw.get("name"),
                description=raw.get("description"),
            ),
            [],
        )

    if has_registry and has_id:
        return ByRegistryId(registry=str(raw["registry"]), id=str(raw["id"])), []

    if has_registry or has_id:
        missing = "id" if has_registry else "registry"
        return None, [
            ValidationIssue(
                INVALID_FIELD,
                f"{path}.{missing}",
                f"Registry chip reference needs both 'registry' and 'id' ('{missing}' is missing)",
            )
        ]

    return None, [
        ValidationIssue(
            INVALID_FIELD,
            path,
            "Either 'registry' and 'id' (registry reference) or 'path' (direct path) must be provided",
        )
    ]


__all__ = ["ByRegistryId", "ByDirectPath", "ChipReference", "parse_chip_reference"]
