"""Canonical fixture loading for fragment conformance testing.

Provides FixtureCase (frozen dataclass), load_fixtures() for data-driven
conformance tests, and loaders for replay streams with their expected
reduced state. Reads from the bundled manifest.json and fixture files.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

_FIXTURES_DIR = Path(__file__).parent / "fixtures"
_MANIFEST_PATH = _FIXTURES_DIR / "manifest.json"

_VALID_CATEGORIES = frozenset({"fragments", "implementors", "replay"})

_REPLAY_STREAM_TYPE = "replay_stream"
_REDUCER_OUTPUT_TYPE = "reducer_output"

# Known special fixture types that load_fixtures() skips.
# Typos in manifest fixture_type values will raise ValueError.
_SPECIAL_FIXTURE_TYPES: frozenset[str] = frozenset({
    _REPLAY_STREAM_TYPE,
    _REDUCER_OUTPUT_TYPE,
})


@dataclass(frozen=True)
class FixtureCase:
    """A single fixture test case loaded from the manifest."""

    id: str
    payload: Any
    expected_valid: bool
    record_format: str
    notes: str
    min_version: str


def _read_manifest() -> Dict[str, Any]:
    with open(_MANIFEST_PATH, "r", encoding="utf-8") as fh:
        manifest: Dict[str, Any] = json.load(fh)
    return manifest


def _find_entry(fixture_id: str, fixture_type: str) -> Dict[str, Any]:
    for candidate in _read_manifest()["fixtures"]:
        if candidate["id"] == fixture_id:
            entry: Dict[str, Any] = candidate
            break
    else:
        raise ValueError(f"Fixture not found in manifest: {fixture_id!r}")

    if entry.get("fixture_type") != fixture_type:
        raise ValueError(
            f"Fixture {fixture_id!r} is not a {fixture_type} "
            f"(fixture_type={entry.get('fixture_type')!r})."
        )
    return entry


def _resolve(entry: Dict[str, Any]) -> Path:
    full_path = _FIXTURES_DIR / entry["path"]
    if not full_path.exists():
        raise FileNotFoundError(
            f"Fixture file referenced in manifest does not exist: {full_path}"
        )
    return full_path


def load_fixtures(category: str) -> List[FixtureCase]:
    """Load canonical fixture cases for a category.

    Args:
        category: One of ``"fragments"``, ``"implementors"`` or ``"replay"``.

    Returns:
        List of :class:`FixtureCase` instances with payloads loaded from JSON.

    Raises:
        ValueError: If *category* is not one of the recognised categories.
        FileNotFoundError: If a referenced fixture file is missing.
    """
    if category not in _VALID_CATEGORIES:
        raise ValueError(
            f"Unknown fixture category: {category!r}. "
            f"Valid categories: {sorted(_VALID_CATEGORIES)}"
        )

    fixtures: List[FixtureCase] = []
    for entry in _read_manifest()["fixtures"]:
        if not entry["path"].startswith(category + "/"):
            continue

        ft = entry.get("fixture_type")
        if ft is not None:
            if ft not in _SPECIAL_FIXTURE_TYPES:
                raise ValueError(
                    f"Unknown fixture_type {ft!r} in manifest entry "
                    f"{entry.get('id', '?')!r}. "
                    f"Known types: {sorted(_SPECIAL_FIXTURE_TYPES)}"
                )
            continue

        with open(_resolve(entry), "r", encoding="utf-8") as fh:
            payload: Any = json.load(fh)

        fixtures.append(
            FixtureCase(
                id=entry["id"],
                payload=payload,
                expected_valid=entry["expected_result"] == "valid",
                record_format=entry["record_format"],
                notes=entry["notes"],
                min_version=entry["min_version"],
            )
        )

    return fixtures


def load_replay_stream(fixture_id: str) -> List[Dict[str, Any]]:
    """Load a replay stream fixture as a list of raw fragment dicts.

    Replay streams are newline-delimited JSON (JSONL) files, one fragment
    per line, in submission order.

    Raises:
        ValueError: If *fixture_id* is not found or is not a replay_stream entry.
        FileNotFoundError: If the JSONL file does not exist on disk.
    """
    entry = _find_entry(fixture_id, _REPLAY_STREAM_TYPE)

    fragments: List[Dict[str, Any]] = []
    with open(_resolve(entry), "r", encoding="utf-8") as fh:
        for line in fh:
            stripped = line.strip()
            if not stripped:
                continue
            fragments.append(json.loads(stripped))
    return fragments


def load_expected_state(fixture_id: str) -> Dict[str, Any]:
    """Load the expected reduced index state for a replay stream.

    Raises:
        ValueError: If *fixture_id* is not found or is not a reducer_output entry.
    """
    entry = _find_entry(fixture_id, _REDUCER_OUTPUT_TYPE)
    with open(_resolve(entry), "r", encoding="utf-8") as fh:
        expected: Dict[str, Any] = json.load(fh)
    return expected
