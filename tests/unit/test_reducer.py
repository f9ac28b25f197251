"""Unit tests for the offline fragment reducer."""
import pydantic
import pytest

from search_index_registry import (
    ANOMALY_EMPTY_FRAGMENT,
    ANOMALY_SHARED_KEY,
    INDEX_SCHEMA_VERSION,
    InvalidFragment,
    ReducedIndexState,
    make_fragment,
    reduce_fragments,
)


class TestReduceFragments:
    """Tests for reduce_fragments()."""

    def test_empty_stream(self) -> None:
        state = reduce_fragments([])
        assert state == ReducedIndexState()
        assert state.schema_version == INDEX_SCHEMA_VERSION

    def test_merges_in_order(self) -> None:
        state = reduce_fragments([
            make_fragment("A", ["r1"]),
            make_fragment("B", ["r2", "r3"]),
            make_fragment("A", ["r4"]),
        ])
        assert state.entries == {"A": ("r1", "r4"), "B": ("r2", "r3")}
        assert state.fragment_counts == {"A": 2, "B": 1}
        assert state.fragment_count == 3
        assert state.lookup("C") == ()

    def test_accepts_mappings(self) -> None:
        state = reduce_fragments([{"key": "A", "records": ["r1"]}])
        assert state.lookup("A") == ("r1",)

    def test_duplicate_submission_kept(self) -> None:
        fragment = make_fragment("A", ["r1"])
        state = reduce_fragments([fragment, fragment])
        assert state.lookup("A") == ("r1", "r1")

    def test_shared_key_anomaly(self) -> None:
        state = reduce_fragments([make_fragment("A", ["r1"]), make_fragment("A", ["r2"])])
        assert [(a.kind, a.key, a.fragment_index) for a in state.anomalies] == [
            (ANOMALY_SHARED_KEY, "A", 1),
        ]

    def test_empty_fragment_anomaly(self) -> None:
        state = reduce_fragments([make_fragment("A")])
        assert state.anomalies[0].kind == ANOMALY_EMPTY_FRAGMENT
        assert state.entries == {"A": ()}

    def test_invalid_entry_raises(self) -> None:
        with pytest.raises(InvalidFragment):
            reduce_fragments([{"key": ""}])

    def test_output_is_frozen(self) -> None:
        state = reduce_fragments([make_fragment("A", ["r1"])])
        with pytest.raises(pydantic.ValidationError):
            state.fragment_count = 5  # type: ignore[misc]
