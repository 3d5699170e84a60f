"""Injectable prompt text and permission tool tables.

Role, behavior and permission prompts are pre-written Markdown fragments
keyed by registry id. Each permission level also maps to a fixed list of
chat tool tokens. All of it is static data under ``chipforge.data/prompts``.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from chipforge.core.exceptions import PromptNotFoundError
from chipforge.data import read_yaml


@dataclass(frozen=True)
class PermissionDefinition:
    """Tool tokens and prompt text for one permission level."""

    tools: Tuple[str, ...]
    prompt: str


class PromptResolver:
    """Look up prompt fragments and tool lists for validated ids.

    Example:
        prompts = PromptResolver.default()
        prompts.tools_for_permission("read-only")
        # ('search', 'fetch', 'githubRepo', 'usages', 'problems', 'changes', 'testFailure')
    """

    def __init__(
        self,
        roles: Mapping[str, str],
        behaviors: Mapping[str, str],
        permissions: Mapping[str, PermissionDefinition],
        supported_tools: Tuple[str, ...],
    ) -> None:
        for level, definition in permissions.items():
            unsupported = [tool for tool in definition.tools if tool not in supported_tools]
            if unsupported:
                raise ValueError(
                    f"Permission level '{level}' lists unsupported tools: {', '.join(unsupported)}"
                )
        self._roles = MappingProxyType(dict(roles))
        self._behaviors = MappingProxyType(dict(behaviors))
        self._permissions = MappingProxyType(dict(permissions))
        self.supported_tools = tuple(supported_tools)

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "PromptResolver":
        """Build from the parsed prompt tables (``roles``, ``behaviors``, ``permissions``)."""
        permissions_data = data["permissions"]
        permissions = {
            level: PermissionDefinition(tools=tuple(entry["tools"]), prompt=entry["prompt"])
            for level, entry in permissions_data["levels"].items()
        }
        return cls(
            roles=data["roles"],
            behaviors=data["behaviors"],
            permissions=permissions,
            supported_tools=tuple(permissions_data["supported_tools"]),
        )

    @classmethod
    def default(cls) -> "PromptResolver":
        return _default_resolver()

    def _lookup(self, table: Mapping[str, Any], kind: str, key: str) -> Any:
        try:
            return table[key]
        except KeyError:
            raise PromptNotFoundError(
                f"No {kind} prompt defined for '{key}'. Known: {', '.join(table)}",
                context={"kind": kind, "id": key},
            ) from None

    def role_prompt(self, role: str) -> str:
        return self._lookup(self._roles, "role", role)

    def behavior_prompt(self, behavior: str) -> str:
        return self._lookup(self._behaviors, "behavior", behavior)

    def permission(self, level: str) -> PermissionDefinition:
        return self._lookup(self._permissions, "permission", level)

    def permission_prompt(self, level: str) -> str:
        return self.permission(level).prompt

    def tools_for_permission(self, level: str) -> Tuple[str, ...]:
        return self.permission(level).tools


@lru_cache(maxsize=1)
def _default_resolver() -> PromptResolver:
    return PromptResolver.from_data(
        {
            "roles": read_yaml("prompts", "roles.yaml"),
            "behaviors": read_yaml("prompts", "behaviors.yaml"),
            "permissions": read_yaml("prompts", "permissions.yaml"),
        }
    )


__all__ = ["PermissionDefinition", "PromptResolver"]
