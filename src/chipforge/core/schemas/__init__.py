"""JSON Schema helpers for agent configurations and registry files."""
from .validation import (
    SchemaValidationError,
    get_validator,
    iter_schema_errors,
    load_schema,
    validate_payload,
)

__all__ = [
    "SchemaValidationError",
    "get_validator",
    "iter_schema_errors",
    "load_schema",
    "validate_payload",
]
