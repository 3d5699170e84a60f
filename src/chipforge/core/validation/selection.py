"""Selection validation against a single registry.

A *selection* is the set of registry ids chosen for one configuration axis
(e.g. the role, the behaviors, the ``frontend`` context chips). Whether a
selection is acceptable depends on the registry's ids and on a
:class:`SelectionPolicy` attached at the call site, so the same registry can
be single-select in one schema and multi-select in another.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from chipforge.core.exceptions import (
    MISSING_SELECTION,
    TOO_FEW_SELECTIONS,
    TOO_MANY_SELECTIONS,
    UNKNOWN_ID,
    ValidationIssue,
)
from chipforge.core.registries.models import Registry

Candidate = Union[None, str, Iterable[str]]


@dataclass(frozen=True)
class SelectionPolicy:
    """Cardinality rule for one registry selection."""

    required: bool = False
    min_count: Optional[int] = None
    max_count: Optional[int] = None
    allow_multiple: bool = True

    def __post_init__(self) -> None:
        for label, value in (("min_count", self.min_count), ("max_count", self.max_count)):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ValueError(f"{label} must be a non-negative integer, got {value!r}")
        if self.min_count is not None and self.max_count is not None and self.min_count > self.max_count:
            raise ValueError(f"min_count ({self.min_count}) exceeds max_count ({self.max_count})")

    @classmethod
    def single(cls, *, required: bool = True) -> "SelectionPolicy":
        """Exactly one id (or none, when not required)."""
        return cls(required=required, allow_multiple=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SelectionPolicy":
        """Build a policy from config keys (``required``, ``min_count``...)."""
        unknown = set(data) - {"required", "min_count", "max_count", "allow_multiple"}
        if unknown:
            raise ValueError(f"Unknown selection policy keys: {', '.join(sorted(unknown))}")
        return cls(
            required=bool(data.get("required", False)),
            min_count=data.get("min_count"),
            max_count=data.get("max_count"),
            allow_multiple=bool(data.get("allow_multiple", True)),
        )


PERMISSIVE = SelectionPolicy()


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of :func:`validate_selection`.

    ``value`` is the candidate unchanged (as an ordered tuple); ``issues`` is
    empty on success.
    """

    value: Tuple[str, ...]
    issues: Tuple[ValidationIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.issues


def normalize_candidate(candidate: Candidate) -> Optional[Tuple[str, ...]]:
    """Collapse a candidate into an ordered tuple of unique ids.

    ``None`` stays ``None`` (absent). A bare string is a one-id selection.
    Duplicates collapse, keeping the first occurrence. Unordered sets are
    sorted so results do not depend on hash order.
    """
    if candidate is None:
        return None
    if isinstance(candidate, str):
        return (candidate,)
    if isinstance(candidate, (set, frozenset)):
        candidate = sorted(candidate)

    ids: List[str] = []
    for item in candidate:
        if not isinstance(item, str):
            raise TypeError(f"Selection ids must be strings, got {type(item).__name__}")
        if item not in ids:
            ids.append(item)
    return tuple(ids)


def validate_selection(
    registry: Registry,
    policy: SelectionPolicy,
    candidate: Candidate,
    *,
    path: Optional[str] = None,
) -> SelectionResult:
    """Check ``candidate`` against ``registry`` under ``policy``.

    Every applicable failure is reported: unknown ids, then count problems.
    Count rules apply whether or not the ids are valid. An absent candidate
    is valid when the policy does not require one.

    Args:
        registry: Registry whose ids are acceptable
        policy: Cardinality rule for this selection
        candidate: Absent (None), one id, or an iterable of ids
        path: Field path used in issues (defaults to the registry name)

    Returns:
        SelectionResult carrying the (unchanged) ids and any issues
    """
    field_path = path or registry.name
    ids = normalize_candidate(candidate)

    if not ids:
        if policy.required:
            return SelectionResult(
                (),
                (
                    ValidationIssue(
                        MISSING_SELECTION,
                        field_path,
                        f"A selection from registry '{registry.name}' is required",
                        registry.ids(),
                    ),
                ),
            )
        if ids is None:
            return SelectionResult(())

    issues: List[ValidationIssue] = []

    unknown = [entry_id for entry_id in ids if entry_id not in registry]
    if unknown:
        noun = "id" if len(unknown) == 1 else "ids"
        issues.append(
            ValidationIssue(
                UNKNOWN_ID,
                field_path,
                f"Unknown {noun} for registry '{registry.name}': {', '.join(unknown)}. "
                f"Valid ids: {', '.join(registry.ids())}",
                registry.ids(),
            )
        )

    count = len(ids)
    if policy.min_count is not None and count < policy.min_count:
        issues.append(
            ValidationIssue(
                TOO_FEW_SELECTIONS,
                field_path,
                f"Registry '{registry.name}': must select at least {policy.min_count} id(s), got {count}",
            )
        )
    if policy.max_count is not None and count > policy.max_count:
        issues.append(
            ValidationIssue(
                TOO_MANY_SELECTIONS,
                field_path,
                f"Registry '{registry.name}': cannot select more than {policy.max_count} id(s), got {count}",
            )
        )
    elif not policy.allow_multiple and count > 1:
        issues.append(
            ValidationIssue(
                TOO_MANY_SELECTIONS,
                field_path,
                f"Registry '{registry.name}': only one selection allowed, got {count}",
            )
        )

    return SelectionResult(ids, tuple(issues))


def build_selection_validator(
    registry: Registry,
    policy: SelectionPolicy = PERMISSIVE,
) -> Callable[..., SelectionResult]:
    """Bind a registry and policy into a reusable validator.

    Example:
        check_role = build_selection_validator(store.registry("role"), SelectionPolicy.single())
        check_role({"reviewer"}).ok  # True
    """

    def validator(candidate: Candidate, *, path: Optional[str] = None) -> SelectionResult:
        return validate_selection(registry, policy, candidate, path=path)

    validator.registry = registry  # type: ignore[attr-defined]
    validator.policy = policy  # type: ignore[attr-defined]
    return validator


__all__ = [
    "Candidate",
    "SelectionPolicy",
    "SelectionResult",
    "PERMISSIVE",
    "normalize_candidate",
    "validate_selection",
    "build_selection_validator",
]
