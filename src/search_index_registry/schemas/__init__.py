"""JSON Schema artifacts for search-index-registry models."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel

from search_index_registry.models import (
    Fragment,
    ImplementorFragment,
    ImplementorRecord,
)
from search_index_registry.reducer import ReducedIndexState

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

# Registry of models to generate schemas for
PYDANTIC_MODELS: List[Tuple[str, Type[BaseModel]]] = [
    ("fragment", Fragment),
    ("implementor_fragment", ImplementorFragment),
    ("implementor_record", ImplementorRecord),
    ("reduced_index_state", ReducedIndexState),
]

_MODELS_BY_NAME: Dict[str, Type[BaseModel]] = dict(PYDANTIC_MODELS)


def list_schemas() -> List[str]:
    """List all available schema names."""
    return sorted(_MODELS_BY_NAME)


def generate_schema(name: str) -> Dict[str, Any]:
    """Generate the JSON Schema for a registered model.

    Args:
        name: Schema name (see :func:`list_schemas`).

    Returns:
        JSON Schema dict with $schema and $id fields.

    Raises:
        KeyError: If *name* is not a registered schema.
    """
    if name not in _MODELS_BY_NAME:
        raise KeyError(
            f"No schema found for '{name}'. Available: {list_schemas()}"
        )
    schema = _MODELS_BY_NAME[name].model_json_schema(mode="serialization")
    schema["$schema"] = JSON_SCHEMA_DIALECT
    schema["$id"] = f"search-index-registry/{name}"
    return schema


def load_schema(name: str) -> Dict[str, Any]:
    """Alias of :func:`generate_schema` kept for consumers loading by name."""
    return generate_schema(name)


def generate_all_schemas() -> Dict[str, Dict[str, Any]]:
    """Generate all schemas, keyed by schema name."""
    return {name: generate_schema(name) for name, _ in PYDANTIC_MODELS}


def schema_to_json(schema: Dict[str, Any]) -> str:
    """Serialize schema to deterministic JSON string with trailing newline."""
    return json.dumps(schema, indent=2, sort_keys=True) + "\n"


__all__ = [
    "PYDANTIC_MODELS",
    "generate_all_schemas",
    "generate_schema",
    "list_schemas",
    "load_schema",
    "schema_to_json",
]
