"""Shared schema validation utilities.

chipforge checks the plain field rules of agent configurations and project
registry files with JSON Schema. Schemas are stored as YAML files under
``chipforge.data/schemas/`` and loaded in a single, consistent way.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Tuple

import jsonschema
from jsonschema import Draft202012Validator

from chipforge.data import get_data_path
from chipforge.core.utils.io import read_yaml


class SchemaValidationError(ValueError):
    """Raised when schema validation fails."""

    pass


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema dict.

    Automatically appends ``.schema.yaml`` if no extension is present.

    Args:
        schema_name: Schema file name under the schemas directory
            (e.g., "agent-config" or "registry.schema.yaml").

    Returns:
        Parsed schema dictionary.

    Raises:
        FileNotFoundError: If schema file doesn't exist.
        ValueError: If schema is not a YAML mapping.
    """
    lowered = schema_name.lower()
    if not (lowered.endswith(".yaml") or lowered.endswith(".yml")):
        schema_name = f"{schema_name}.schema.yaml"

    schema_path = get_data_path("schemas", schema_name)
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_name}")

    schema = read_yaml(schema_path, default=None, raise_on_error=True)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    return schema


@lru_cache(maxsize=16)
def get_validator(schema_name: str) -> Draft202012Validator:
    """Return a cached validator for a bundled schema."""
    schema = load_schema(schema_name)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def _error_path(error: jsonschema.ValidationError) -> str:
    return ".".join(str(p) for p in error.absolute_path)


def iter_schema_errors(payload: Any, schema_name: str) -> List[Tuple[str, str, str]]:
    """Collect every schema violation of ``payload``.

    Missing required properties are reported at the path of the property
    itself rather than at its parent object.

    Returns:
        List of ``(path, validator_keyword, message)`` tuples sorted by path.
        Empty list if validation passes.
    """
    validator = get_validator(schema_name)
    results: List[Tuple[str, str, str]] = []

    for error in validator.iter_errors(payload):
        path = _error_path(error)
        if error.validator == "required" and isinstance(error.instance, dict):
            for prop in error.validator_value:
                if prop in error.instance:
                    continue
                prop_path = f"{path}.{prop}" if path else str(prop)
                entry = (prop_path, "required", "Required field is missing")
                if entry not in results:
                    results.append(entry)
            continue
        results.append((path, str(error.validator), error.message))

    return sorted(results, key=lambda item: item[0])


def validate_payload(payload: Any, schema_name: str) -> None:
    """Validate a payload against a bundled schema.

    Raises:
        SchemaValidationError: If validation fails (all errors in the message).
    """
    errors = iter_schema_errors(payload, schema_name)
    if errors:
        details = "\n".join(
            f"  - {path}: {message}" if path else f"  - {message}"
            for path, _keyword, message in errors
        )
        raise SchemaValidationError(
            f"Validation failed against schema '{schema_name}':\n{details}"
        )


__all__ = [
    "load_schema",
    "get_validator",
    "iter_schema_errors",
    "validate_payload",
    "SchemaValidationError",
]
