from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple


class ChipforgeError(Exception):
    """Base exception for chipforge."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


# Issue codes reported by the validators.
UNKNOWN_ID = "unknown_id"
UNKNOWN_REGISTRY = "unknown_registry"
MISSING_SELECTION = "missing_selection"
TOO_FEW_SELECTIONS = "too_few_selections"
TOO_MANY_SELECTIONS = "too_many_selections"
INVALID_FIELD = "invalid_field"
INVALID_TYPE = "invalid_type"


@dataclass(frozen=True)
class ValidationIssue:
    """A single field-level or registry-level validation failure.

    Attributes:
        code: Machine-readable issue code (``unknown_id``, ``missing_selection``...)
        path: Dotted path of the offending field (e.g. ``character.role``)
        message: Human-readable description
        valid: Valid alternatives, for unknown ids and unknown registries
    """

    code: str
    path: str
    message: str
    valid: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"code": self.code, "path": self.path, "message": self.message}
        if self.valid:
            data["valid"] = list(self.valid)
        return data

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


def format_issues(issues: Sequence[ValidationIssue], *, indent: str = "  - ") -> str:
    """Render issues as a multi-line summary, one issue per line."""
    return "\n".join(f"{indent}{issue}" for issue in issues)


class AgentConfigValidationError(ChipforgeError, ValueError):
    """Raised by the fail-fast validation API; carries every collected issue."""

    issues: List[ValidationIssue]

    def __init__(
        self,
        issues: Sequence[ValidationIssue],
        message: str = "",
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        self.issues = list(issues)
        msg = message or "Invalid agent configuration:\n" + format_issues(self.issues)
        ctx = dict(context or {})
        ctx["issues"] = [issue.to_dict() for issue in self.issues]
        ChipforgeError.__init__(self, msg, context=ctx)
        ValueError.__init__(self, msg)


class MalformedInputError(ChipforgeError, ValueError):
    """Raised when input is not structurally parseable as an agent configuration."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ChipforgeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class MissingContentFileError(ChipforgeError, FileNotFoundError):
    """Raised when a chip's resolved content file does not exist."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ChipforgeError.__init__(self, message, context=context)
        FileNotFoundError.__init__(self, message)


class OutputConflictError(ChipforgeError, FileExistsError):
    """Raised when the output file exists and overwrite was not requested."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ChipforgeError.__init__(self, message, context=context)
        FileExistsError.__init__(self, message)


class RegistryDefinitionError(ChipforgeError, ValueError):
    """Raised when a registry definition is structurally invalid (e.g. empty)."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ChipforgeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class RegistryConflictError(ChipforgeError, ValueError):
    """Raised when a project registry would shadow a built-in registry."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ChipforgeError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class PromptNotFoundError(ChipforgeError, KeyError):
    """Raised when no prompt text is defined for a registry id."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ChipforgeError.__init__(self, message, context=context)
        KeyError.__init__(self, message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return str(self.args[0]) if self.args else ""


class ConfigError(ChipforgeError):
    """Raised when project configuration cannot be loaded."""


__all__ = [
    "ChipforgeError",
    "ValidationIssue",
    "format_issues",
    "AgentConfigValidationError",
    "MalformedInputError",
    "MissingContentFileError",
    "OutputConflictError",
    "RegistryDefinitionError",
    "RegistryConflictError",
    "PromptNotFoundError",
    "ConfigError",
    "UNKNOWN_ID",
    "UNKNOWN_REGISTRY",
    "MISSING_SELECTION",
    "TOO_FEW_SELECTIONS",
    "TOO_MANY_SELECTIONS",
    "INVALID_FIELD",
    "INVALID_TYPE",
]
