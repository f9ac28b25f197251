"""Reusable test helpers for fragment conformance testing.

Generators can import these to check their own output:
    from search_index_registry.conformance.pytest_helpers import (
        assert_fragment_conforms,
        assert_fragment_fails,
        assert_replay_reduces_to,
    )
"""
from __future__ import annotations

from typing import Any, Dict, Sequence

from search_index_registry.conformance.validators import (
    ConformanceResult,
    validate_fragment,
)
from search_index_registry.hub import FragmentHub
from search_index_registry.reducer import reduce_fragments
from search_index_registry.store import RegistryStore


def assert_fragment_conforms(
    payload: Any,
    record_format: str = "Fragment",
    *,
    strict: bool = False,
) -> ConformanceResult:
    """Assert a fragment payload conforms to the canonical contract."""
    result = validate_fragment(payload, record_format, strict=strict)
    if not result.valid:
        violations = []
        for mv in result.model_violations:
            violations.append(f"  Model: {mv.field}: {mv.message}")
        for sv in result.schema_violations:
            violations.append(f"  Schema: {sv.json_path}: {sv.message}")
        raise AssertionError(
            f"Fragment for {record_format!r} failed conformance:\n"
            + "\n".join(violations)
        )
    return result


def assert_fragment_fails(
    payload: Any,
    record_format: str = "Fragment",
    *,
    strict: bool = False,
) -> ConformanceResult:
    """Assert a fragment payload DOES NOT conform (expected invalid)."""
    result = validate_fragment(payload, record_format, strict=strict)
    if result.valid:
        raise AssertionError(
            f"Fragment for {record_format!r} was expected to fail but passed conformance."
        )
    return result


def assert_replay_reduces_to(
    fragments: Sequence[Dict[str, Any]],
    expected: Dict[str, Any],
) -> None:
    """Assert a fragment stream merges to *expected* entries.

    Checks both the offline reducer and a live hub attached after half the
    stream was submitted, so generators also exercise late attachment.
    """
    expected_entries = {
        key: tuple(records) for key, records in expected["entries"].items()
    }

    reduced = reduce_fragments(fragments)
    assert reduced.entries == expected_entries, (
        f"Reducer produced {reduced.entries!r}, expected {expected_entries!r}"
    )
    if "fragment_counts" in expected:
        assert reduced.fragment_counts == expected["fragment_counts"]

    hub = FragmentHub(name="conformance")
    store = RegistryStore()
    half = len(fragments) // 2
    for fragment in fragments[:half]:
        hub.submit(fragment)
    hub.attach(store)
    for fragment in fragments[half:]:
        hub.submit(fragment)
    assert store.snapshot() == expected_entries, (
        f"Store holds {store.snapshot()!r}, expected {expected_entries!r}"
    )
