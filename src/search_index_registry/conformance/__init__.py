"""Conformance test suite for search-index-registry.

Run: pytest --pyargs search_index_registry.conformance
"""
from search_index_registry.conformance.loader import (
    FixtureCase,
    load_expected_state,
    load_fixtures,
    load_replay_stream,
)
from search_index_registry.conformance.pytest_helpers import (
    assert_fragment_conforms,
    assert_fragment_fails,
    assert_replay_reduces_to,
)
from search_index_registry.conformance.validators import (
    ConformanceResult,
    ModelViolation,
    SchemaViolation,
    validate_fragment,
)

__all__ = [
    "ConformanceResult",
    "FixtureCase",
    "ModelViolation",
    "SchemaViolation",
    "assert_fragment_conforms",
    "assert_fragment_fails",
    "assert_replay_reduces_to",
    "load_expected_state",
    "load_fixtures",
    "load_replay_stream",
    "validate_fragment",
]
