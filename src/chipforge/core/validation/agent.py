"""Agent configuration model and validator.

An agent configuration selects one role, one permission level and any
number of behaviors from the framework registries (its *character*), plus
optional project context chips::

    name: Code Reviewer
    version: 1.0.0
    description: Reviews code for quality, best practices, and potential issues
    character:
      role: reviewer
      permissions: read-only
      behaviors: [detailed]
    context:
      frontend: [architecture, constitution]

Validation collects every problem before returning. Field rules come from
the bundled ``agent-config`` JSON Schema; registry rules come from
:func:`validate_selection`, one call per axis.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from chipforge.core.exceptions import (
    INVALID_FIELD,
    INVALID_TYPE,
    MISSING_SELECTION,
    UNKNOWN_REGISTRY,
    AgentConfigValidationError,
    MalformedInputError,
    ValidationIssue,
)
from chipforge.core.registries.store import RegistryStore, default_registry_store
from chipforge.core.schemas import iter_schema_errors

from .references import ByRegistryId, ChipReference, parse_chip_reference
from .selection import PERMISSIVE, SelectionPolicy, validate_selection

SCHEMA_NAME = "agent-config"

# Character axes and the policy each is validated under. Axis names double
# as the framework registry names.
CHARACTER_POLICIES: Mapping[str, SelectionPolicy] = MappingProxyType(
    {
        "role": SelectionPolicy.single(required=True),
        "permissions": SelectionPolicy.single(required=True),
        "behaviors": SelectionPolicy(required=False, allow_multiple=True),
    }
)

_FIELD_MESSAGES: Mapping[Tuple[str, str], str] = {
    ("name", "minLength"): "Name must not be empty",
    ("name", "maxLength"): "Name must be at most 100 characters",
    ("name", "pattern"): "Name must contain a visible character and no path separators",
    ("description", "maxLength"): "Description must be at most 500 characters",
    ("version", "pattern"): "Version must be a semantic version like 1.0.0 (MAJOR.MINOR.PATCH)",
    ("id", "pattern"): "Id must be a UUID",
}

_WHITESPACE_RE = re.compile(r"\s+")


def chatmode_filename(name: str) -> str:
    """Output file name for an agent: lower-cased, whitespace runs to hyphens."""
    return _WHITESPACE_RE.sub("-", name.strip().lower()) + ".chatmode.md"


@dataclass(frozen=True)
class Handoff:
    """Workflow transition to another chatmode."""

    label: str
    agent: str
    prompt: Optional[str] = None
    send: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"label": self.label, "agent": self.agent}
        if self.prompt is not None:
            data["prompt"] = self.prompt
        if self.send is not None:
            data["send"] = self.send
        return data


@dataclass(frozen=True)
class Character:
    """Framework-managed traits, as validated selections."""

    role: Tuple[str, ...]
    permissions: Tuple[str, ...]
    behaviors: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": list(self.role),
            "permissions": list(self.permissions),
            "behaviors": list(self.behaviors),
        }


@dataclass(frozen=True)
class AgentConfiguration:
    """A validated agent configuration.

    Ids are references into the registry store the configuration was
    validated against; entries are not embedded.
    """

    name: str
    version: str
    description: str
    character: Character
    context: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    chips: Tuple[ChipReference, ...] = ()
    id: Optional[str] = None
    model: Optional[str] = None
    handoffs: Tuple[Handoff, ...] = ()

    @property
    def role(self) -> str:
        return self.character.role[0]

    @property
    def permission_level(self) -> str:
        return self.character.permissions[0]

    @property
    def behaviors(self) -> Tuple[str, ...]:
        return self.character.behaviors

    @property
    def output_filename(self) -> str:
        return chatmode_filename(self.name)

    def chip_references(self) -> List[ChipReference]:
        """Context chips then ad-hoc chips, in the order they were supplied."""
        refs: List[ChipReference] = [
            ByRegistryId(registry_name, chip_id)
            for registry_name, chip_ids in self.context.items()
            for chip_id in chip_ids
        ]
        refs.extend(self.chips)
        return refs

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.id is not None:
            data["id"] = self.id
        data.update(
            {
                "name": self.name,
                "version": self.version,
                "description": self.description,
                "character": self.character.to_dict(),
            }
        )
        if self.context:
            data["context"] = {name: list(ids) for name, ids in self.context.items()}
        if self.chips:
            data["chips"] = [ref.to_dict() for ref in self.chips]
        if self.model is not None:
            data["model"] = self.model
        if self.handoffs:
            data["handoffs"] = [handoff.to_dict() for handoff in self.handoffs]
        return data


@dataclass(frozen=True)
class ValidationOutcome:
    """Either a configuration or the complete list of issues, never both."""

    config: Optional[AgentConfiguration] = None
    issues: Tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return self.config is not None and not self.issues

    def unwrap(self) -> AgentConfiguration:
        """Return the configuration or raise the aggregated error."""
        if self.config is None or self.issues:
            raise AgentConfigValidationError(self.issues)
        return self.config


def _plain(value: Any) -> Any:
    """Convert sets/tuples to lists and mappings to dicts for schema checks."""
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(value) if all(isinstance(v, str) for v in value) else list(value)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _is_selection(value: Any) -> bool:
    return value is None or isinstance(value, str) or (
        isinstance(value, list) and all(isinstance(v, str) for v in value)
    )


class AgentConfigValidator:
    """Validate raw agent configurations against a registry store.

    Args:
        store: Registry store (defaults to the built-in registries only)
        character_policies: Per-axis overrides of :data:`CHARACTER_POLICIES`
        context_policies: Policies for project registries used under
            ``context``; registries without one are validated permissively
        require_context: Require at least one context registry to have a
            selection
    """

    def __init__(
        self,
        store: Optional[RegistryStore] = None,
        *,
        character_policies: Optional[Mapping[str, SelectionPolicy]] = None,
        context_policies: Optional[Mapping[str, SelectionPolicy]] = None,
        require_context: bool = False,
    ) -> None:
        self.store = store if store is not None else default_registry_store()
        self.character_policies: Mapping[str, SelectionPolicy] = MappingProxyType(
            {**CHARACTER_POLICIES, **(character_policies or {})}
        )
        self.context_policies: Mapping[str, SelectionPolicy] = MappingProxyType(dict(context_policies or {}))
        self.require_context = require_context

        for axis in self.character_policies:
            if axis not in self.store:
                raise ValueError(f"Character axis '{axis}' has no registry in the store")
        for registry_name in self.context_policies:
            if registry_name not in self.store.project_names():
                raise ValueError(f"Context policy given for unknown project registry '{registry_name}'")

    # ------------------------------------------------------------------ public

    def validate(self, raw: Any) -> ValidationOutcome:
        """Validate ``raw`` and collect every issue.

        Raises:
            MalformedInputError: If ``raw`` is not a mapping at all.
        """
        if not isinstance(raw, Mapping):
            raise MalformedInputError(
                f"Agent configuration must be a mapping, got {type(raw).__name__}",
                context={"type": type(raw).__name__},
            )

        data = _plain(raw)
        issues: List[ValidationIssue] = list(self._schema_issues(data))

        character = data.get("character")
        selections: Dict[str, Tuple[str, ...]] = {}
        if isinstance(character, dict):
            for axis, policy in self.character_policies.items():
                candidate = character.get(axis)
                if not _is_selection(candidate):
                    continue  # type error already reported by the schema
                result = validate_selection(
                    self.store.registry(axis),  # type: ignore[arg-type]
                    policy,
                    candidate,
                    path=f"character.{axis}",
                )
                issues.extend(result.issues)
                selections[axis] = result.value

        context, context_issues = self._validate_context(data.get("context"))
        issues.extend(context_issues)

        chips, chip_issues = self._validate_chips(data.get("chips"))
        issues.extend(chip_issues)

        if issues:
            return ValidationOutcome(issues=tuple(issues))

        config = AgentConfiguration(
            id=data.get("id"),
            name=data["name"],
            version=data["version"],
            description=data["description"],
            character=Character(
                role=selections.get("role", ()),
                permissions=selections.get("permissions", ()),
                behaviors=selections.get("behaviors", ()),
            ),
            context=MappingProxyType(context),
            chips=tuple(chips),
            model=data.get("model"),
            handoffs=tuple(Handoff(**h) for h in data.get("handoffs") or ()),
        )
        return ValidationOutcome(config=config)

    def parse(self, raw: Any) -> AgentConfiguration:
        """Fail-fast variant of :meth:`validate`.

        Raises:
            MalformedInputError: If ``raw`` is not a mapping.
            AgentConfigValidationError: If any issue was found.
        """
        return self.validate(raw).unwrap()

    def is_valid(self, raw: Any) -> bool:
        try:
            return self.validate(raw).ok
        except MalformedInputError:
            return False

    # ----------------------------------------------------------------- helpers

    def _schema_issues(self, data: Dict[str, Any]) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for path, keyword, message in iter_schema_errors(data, SCHEMA_NAME):
            code = INVALID_TYPE if keyword == "type" else INVALID_FIELD
            friendly = _FIELD_MESSAGES.get((path, keyword))
            if friendly and keyword == "pattern":
                friendly = f"{friendly}, got {data.get(path)!r}"
            issues.append(ValidationIssue(code, path, friendly or message))
        return issues

    def _validate_context(
        self, context: Any
    ) -> Tuple[Dict[str, Tuple[str, ...]], List[ValidationIssue]]:
        issues: List[ValidationIssue] = []
        validated: Dict[str, Tuple[str, ...]] = {}
        if context is not None and not isinstance(context, dict):
            return validated, issues  # reported by the schema

        supplied = context or {}
        project_names = self.store.project_names()

        for registry_name, candidate in supplied.items():
            if registry_name not in project_names:
                valid = ", ".join(project_names) or "(none configured)"
                issues.append(
                    ValidationIssue(
                        UNKNOWN_REGISTRY,
                        f"context.{registry_name}",
                        f"Unknown context registry '{registry_name}'. Valid registries: {valid}",
                        project_names,
                    )
                )
                continue
            if not _is_selection(candidate):
                continue
            result = validate_selection(
                self.store.registry(registry_name),  # type: ignore[arg-type]
                self.context_policies.get(registry_name, PERMISSIVE),
                candidate,
                path=f"context.{registry_name}",
            )
            issues.extend(result.issues)
            if result.value:
                validated[registry_name] = result.value

        # Policies may require selections from registries the input left out.
        for registry_name, policy in self.context_policies.items():
            if registry_name in supplied:
                continue
            result = validate_selection(
                self.store.registry(registry_name),  # type: ignore[arg-type]
                policy,
                None,
                path=f"context.{registry_name}",
            )
            issues.extend(result.issues)

        if self.require_context and not validated and not issues:
            issues.append(
                ValidationIssue(
                    MISSING_SELECTION,
                    "context",
                    "At least one context registry must have chip selections",
                    project_names,
                )
            )

        return validated, issues

    def _validate_chips(self, chips: Any) -> Tuple[List[ChipReference], List[ValidationIssue]]:
        refs: List[ChipReference] = []
        issues: List[ValidationIssue] = []
        if not isinstance(chips, list):
            return refs, issues

        project_names = self.store.project_names()
        for index, raw in enumerate(chips):
            if not isinstance(raw, dict):
                continue
            path = f"chips.{index}"
            ref, ref_issues = parse_chip_reference(raw, path=path)
            issues.extend(ref_issues)
            if isinstance(ref, ByRegistryId):
                if ref.registry not in project_names:
                    valid = ", ".join(project_names) or "(none configured)"
                    issues.append(
                        ValidationIssue(
                            UNKNOWN_REGISTRY,
                            f"{path}.registry",
                            f"Unknown context registry '{ref.registry}'. Valid registries: {valid}",
                            project_names,
                        )
                    )
                    continue
                result = validate_selection(
                    self.store.registry(ref.registry),  # type: ignore[arg-type]
                    PERMISSIVE,
                    ref.id,
                    path=f"{path}.id",
                )
                issues.extend(result.issues)
            if ref is not None:
                refs.append(ref)
        return refs, issues


def validate_agent_config(raw: Any, store: Optional[RegistryStore] = None) -> ValidationOutcome:
    """Validate ``raw`` against ``store`` (built-in registries by default)."""
    return AgentConfigValidator(store).validate(raw)


def parse_agent_config(raw: Any, store: Optional[RegistryStore] = None) -> AgentConfiguration:
    """Validate ``raw`` and return the configuration, raising on any issue."""
    return AgentConfigValidator(store).parse(raw)


def is_agent_config(raw: Any, store: Optional[RegistryStore] = None) -> bool:
    return AgentConfigValidator(store).is_valid(raw)


__all__ = [
    "CHARACTER_POLICIES",
    "AgentConfiguration",
    "AgentConfigValidator",
    "Character",
    "Handoff",
    "ValidationOutcome",
    "chatmode_filename",
    "validate_agent_config",
    "parse_agent_config",
    "is_agent_config",
]
