"""Deterministic offline reduction of a fragment stream.

Provides the anomaly model, the ReducedIndexState output model, and a pure
reducer that folds fragments into the same mapping a RegistryStore would
hold after receiving them in the same order.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from search_index_registry.models import Fragment, coerce_fragment

# ── Section 1: Schema Version ─────────────────────────────────────────────────

INDEX_SCHEMA_VERSION: str = "1.0.0"

# ── Section 2: Anomaly Kinds ──────────────────────────────────────────────────

ANOMALY_SHARED_KEY: str = "shared_key"
ANOMALY_EMPTY_FRAGMENT: str = "empty_fragment"

# ── Section 3: Anomaly Model ─────────────────────────────────────────────────


class IndexAnomaly(BaseModel):
    """Non-fatal observation recorded during reduction.

    Valid kind values: "shared_key", "empty_fragment".
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    key: str
    fragment_index: int = Field(..., ge=0)
    message: str


# ── Section 4: Reducer Output Model ──────────────────────────────────────────


class ReducedIndexState(BaseModel):
    """Deterministic projection output of reduce_fragments()."""

    model_config = ConfigDict(frozen=True)

    schema_version: str = INDEX_SCHEMA_VERSION
    entries: Dict[str, Tuple[Any, ...]] = Field(default_factory=dict)
    fragment_counts: Dict[str, int] = Field(default_factory=dict)
    anomalies: Tuple[IndexAnomaly, ...] = ()
    fragment_count: int = 0

    def lookup(self, key: str) -> Tuple[Any, ...]:
        return self.entries.get(key, ())


# ── Section 5: Reducer ───────────────────────────────────────────────────────


def reduce_fragments(
    fragments: Sequence[Union[Fragment, Mapping[str, Any]]],
) -> ReducedIndexState:
    """Deterministic reducer: Sequence[Fragment] -> ReducedIndexState.

    Fragments are folded in the given order; unlike event reducers there is
    no sort or dedup step, because submission order is the record order and
    duplicate submissions are kept.

    Raises:
        InvalidFragment: If any entry is malformed.
    """
    validated = [coerce_fragment(fragment) for fragment in fragments]

    entries: Dict[str, List[Any]] = {}
    fragment_counts: Dict[str, int] = {}
    anomalies: List[IndexAnomaly] = []

    for index, fragment in enumerate(validated):
        key = fragment.key
        if not fragment.records:
            anomalies.append(IndexAnomaly(
                kind=ANOMALY_EMPTY_FRAGMENT,
                key=key,
                fragment_index=index,
                message=f"Fragment for {key!r} carries no records",
            ))

        count = fragment_counts.get(key, 0) + 1
        fragment_counts[key] = count
        if count > 1:
            anomalies.append(IndexAnomaly(
                kind=ANOMALY_SHARED_KEY,
                key=key,
                fragment_index=index,
                message=f"Key {key!r} received fragment #{count}",
            ))

        entries.setdefault(key, []).extend(fragment.records)

    return ReducedIndexState(
        entries={key: tuple(records) for key, records in entries.items()},
        fragment_counts=fragment_counts,
        anomalies=tuple(anomalies),
        fragment_count=len(validated),
    )
