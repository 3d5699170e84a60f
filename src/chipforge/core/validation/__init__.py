"""Registry-constrained validation of agent configurations."""
from .agent import (
    CHARACTER_POLICIES,
    AgentConfigValidator,
    AgentConfiguration,
    Character,
    Handoff,
    ValidationOutcome,
    chatmode_filename,
    is_agent_config,
    parse_agent_config,
    validate_agent_config,
)
from .references import ByDirectPath, ByRegistryId, ChipReference, parse_chip_reference
from .selection import (
    PERMISSIVE,
    SelectionPolicy,
    SelectionResult,
    build_selection_validator,
    normalize_candidate,
    validate_selection,
)

__all__ = [
    "CHARACTER_POLICIES",
    "AgentConfigValidator",
    "AgentConfiguration",
    "Character",
    "Handoff",
    "ValidationOutcome",
    "chatmode_filename",
    "is_agent_config",
    "parse_agent_config",
    "validate_agent_config",
    "ByDirectPath",
    "ByRegistryId",
    "ChipReference",
    "parse_chip_reference",
    "PERMISSIVE",
    "SelectionPolicy",
    "SelectionResult",
    "build_selection_validator",
    "normalize_candidate",
    "validate_selection",
]
