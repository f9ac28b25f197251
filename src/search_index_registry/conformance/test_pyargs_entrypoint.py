"""Conformance test suite for search-index-registry.

Run: pytest --pyargs search_index_registry.conformance
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from search_index_registry.conformance.loader import (
    load_expected_state,
    load_replay_stream,
)
from search_index_registry.conformance.pytest_helpers import (
    assert_fragment_conforms,
    assert_replay_reduces_to,
)
from search_index_registry.conformance.validators import validate_fragment
from search_index_registry.models import Fragment
from search_index_registry.schemas import list_schemas, load_schema


# --- Manifest-driven fixture tests ---

_FIXTURES_DIR = Path(__file__).parent / "fixtures"
_MANIFEST: Dict[str, Any] = json.loads(
    (_FIXTURES_DIR / "manifest.json").read_text(encoding="utf-8")
)


def _fragment_fixture_entries() -> List[Dict[str, Any]]:
    """Return manifest entries that are single-fragment fixtures."""
    return [f for f in _MANIFEST["fixtures"] if f.get("fixture_type") is None]


def _fragment_fixture_params() -> List[Dict[str, Any]]:
    params: List[Dict[str, Any]] = []
    for entry in _fragment_fixture_entries():
        fixture_path = _FIXTURES_DIR / entry["path"]
        payload: Any = json.loads(fixture_path.read_text(encoding="utf-8"))
        params.append({**entry, "payload": payload})
    return params


def _reducer_output_entries() -> List[Dict[str, Any]]:
    return [
        f for f in _MANIFEST["fixtures"] if f.get("fixture_type") == "reducer_output"
    ]


@pytest.mark.parametrize(
    "case",
    _fragment_fixture_params(),
    ids=[f["id"] for f in _fragment_fixture_entries()],
)
def test_fixture_conformance(case: Dict[str, Any]) -> None:
    """Validate each fragment fixture against its expected result."""
    result = validate_fragment(case["payload"], case["record_format"])
    if case["expected_result"] == "valid":
        if result.model_violations:
            violations = [
                f"  Model: {v.field}: {v.message}" for v in result.model_violations
            ]
            raise AssertionError(
                f"Fixture {case['id']} failed model conformance:\n"
                + "\n".join(violations)
            )
    else:
        if result.valid:
            raise AssertionError(
                f"Fixture {case['id']} was expected to fail but passed conformance."
            )


# --- Replay stream tests ---


@pytest.mark.parametrize(
    "entry", _reducer_output_entries(), ids=[f["id"] for f in _reducer_output_entries()]
)
def test_replay_stream_reduces_to_expected(entry: Dict[str, Any]) -> None:
    fragments = load_replay_stream(entry["replay_id"])
    for fragment in fragments:
        assert_fragment_conforms(fragment)
    assert_replay_reduces_to(fragments, load_expected_state(entry["id"]))


# --- Schema integrity tests ---


@pytest.mark.parametrize("name", list_schemas())
def test_schema_is_valid_json_schema(name: str) -> None:
    schema = load_schema(name)
    assert "$schema" in schema
    assert schema["$id"] == f"search-index-registry/{name}"


# --- Round-trip serialization tests ---


def test_fragment_round_trip() -> None:
    """Fragment model round-trips through JSON."""
    fragment = Fragment(key="fj_app", records=("impl Parser for Args",))
    data = fragment.model_dump(mode="json")
    restored = Fragment.model_validate(data)
    assert restored == fragment


def test_manifest_paths_exist(manifest: Dict[str, Any], fixtures_dir: Path) -> None:
    for entry in manifest["fixtures"]:
        assert (fixtures_dir / entry["path"]).exists(), entry["id"]
