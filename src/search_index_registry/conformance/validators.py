"""Dual-layer validation for fragment contracts.

This module provides conformance validation combining:
1. Pydantic model validation (primary layer)
2. JSON Schema validation (optional secondary layer)

The validator gracefully degrades if jsonschema is unavailable, unless
strict=True is specified.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Type, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from search_index_registry.models import Fragment, ImplementorFragment
from search_index_registry.schemas import generate_schema


@dataclass(frozen=True)
class ModelViolation:
    """A violation detected by Pydantic model validation."""

    field: str
    message: str
    violation_type: str
    input_value: object


@dataclass(frozen=True)
class SchemaViolation:
    """A violation detected by JSON Schema validation."""

    json_path: str
    message: str
    validator: str
    validator_value: object
    schema_path: Tuple[Union[str, int], ...]


@dataclass(frozen=True)
class ConformanceResult:
    """Result of dual-layer conformance validation."""

    valid: bool
    model_violations: Tuple[ModelViolation, ...]
    schema_violations: Tuple[SchemaViolation, ...]
    schema_check_skipped: bool
    record_format: str


# Record format to Pydantic model mapping
_FORMAT_TO_MODEL: Dict[str, Type[BaseModel]] = {
    "Fragment": Fragment,
    "ImplementorFragment": ImplementorFragment,
}

# Record format to schema name mapping
_FORMAT_TO_SCHEMA: Dict[str, str] = {
    "Fragment": "fragment",
    "ImplementorFragment": "implementor_fragment",
}


def _validate_with_model(
    payload: Any,
    model_class: Type[BaseModel],
) -> Tuple[ModelViolation, ...]:
    try:
        model_class.model_validate(payload)
        return ()
    except PydanticValidationError as e:
        violations = []
        for error in e.errors():
            field_path = ".".join(str(loc) for loc in error["loc"])
            violations.append(
                ModelViolation(
                    field=field_path,
                    message=error["msg"],
                    violation_type=error["type"],
                    input_value=error.get("input"),
                )
            )
        return tuple(violations)


def _validate_with_schema(
    payload: Any,
    schema_name: str,
    strict: bool,
) -> Tuple[Tuple[SchemaViolation, ...], bool]:
    """Validate payload using JSON Schema.

    Returns:
        Tuple of (violations, skipped) where skipped indicates that
        validation did not run because jsonschema is missing.

    Raises:
        ImportError: If strict=True and jsonschema is unavailable.
    """
    try:
        from jsonschema import Draft202012Validator
    except ImportError:
        if strict:
            raise ImportError(
                "jsonschema is required for strict conformance validation. "
                "Install with: pip install 'search-index-registry[conformance]'"
            )
        return ((), True)

    validator = Draft202012Validator(generate_schema(schema_name))
    errors = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path])

    violations = []
    for error in errors:
        json_path = "$" + "".join(
            f"[{p}]" if isinstance(p, int) else f".{p}" for p in error.absolute_path
        )
        violations.append(
            SchemaViolation(
                json_path=json_path,
                message=error.message,
                validator=str(error.validator),
                validator_value=error.validator_value,
                schema_path=tuple(error.absolute_schema_path),
            )
        )

    return (tuple(violations), False)


def validate_fragment(
    payload: Any,
    record_format: str = "Fragment",
    strict: bool = False,
) -> ConformanceResult:
    """Validate a raw fragment payload against its contract.

    Args:
        payload: The fragment dictionary produced by a generator.
        record_format: ``"Fragment"`` for opaque records or
            ``"ImplementorFragment"`` for implementor records.
        strict: If True, require jsonschema and fail if unavailable.

    Returns:
        ConformanceResult with validation status and any violations found.

    Raises:
        ValueError: If record_format is not recognized.
        ImportError: If strict=True and jsonschema is unavailable.
    """
    if record_format not in _FORMAT_TO_MODEL:
        raise ValueError(
            f"Unknown record format: {record_format!r}. "
            f"Known formats: {sorted(_FORMAT_TO_MODEL)}"
        )

    model_violations = _validate_with_model(payload, _FORMAT_TO_MODEL[record_format])
    schema_violations, schema_skipped = _validate_with_schema(
        payload, _FORMAT_TO_SCHEMA[record_format], strict
    )

    valid = len(model_violations) == 0 and (
        len(schema_violations) == 0 or schema_skipped
    )

    return ConformanceResult(
        valid=valid,
        model_violations=model_violations,
        schema_violations=schema_violations,
        schema_check_skipped=schema_skipped,
        record_format=record_format,
    )
