"""Merged key -> records mapping that backs the search index."""
from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Callable, Dict, Iterator, List, Literal, Optional, Tuple

from search_index_registry.models import Fragment, SharedKeyError

logger = logging.getLogger("search_index_registry.store")

SharedKeyPolicy = Literal["append", "warn", "reject"]

_SHARED_KEY_POLICIES = frozenset({"append", "warn", "reject"})


class RegistryStore:
    """Append-only registry of records grouped by key.

    A store is itself a valid registrar: ``hub.attach(store)`` delivers every
    fragment to :meth:`merge`. Records under a key keep fragment arrival
    order and are never reordered or truncated.

    Args:
        shared_keys: What to do when a key receives a second fragment.
            ``"append"`` (default) merges silently, ``"warn"`` merges and logs
            a warning, ``"reject"`` raises :class:`SharedKeyError`.
        on_shared_key: Optional callback invoked with
            ``(key, fragment_count)`` whenever a key receives a second or
            later fragment. Not called for rejected fragments.
    """

    def __init__(
        self,
        *,
        shared_keys: SharedKeyPolicy = "append",
        on_shared_key: Optional[Callable[[str, int], None]] = None,
    ) -> None:
        if shared_keys not in _SHARED_KEY_POLICIES:
            raise ValueError(
                f"Unknown shared_keys policy: {shared_keys!r}. "
                f"Valid policies: {sorted(_SHARED_KEY_POLICIES)}"
            )
        self._shared_keys = shared_keys
        self._on_shared_key = on_shared_key
        self._records: Dict[str, List[Any]] = {}
        self._fragment_counts: Dict[str, int] = {}
        self._lock = RLock()

    def __call__(self, fragment: Fragment) -> None:
        self.merge(fragment)

    def __repr__(self) -> str:
        with self._lock:
            return (
                f"RegistryStore(keys={len(self._records)}, "
                f"shared_keys={self._shared_keys!r})"
            )

    # --- merging ---

    def merge(self, fragment: Fragment) -> None:
        """Append the fragment's records to its key's sequence.

        Not idempotent: merging the same fragment twice appends its records
        twice. Callers must submit each fragment at most once.

        Raises:
            SharedKeyError: If the key already has a fragment and the store
                was created with ``shared_keys="reject"``.
        """
        key = fragment.key
        with self._lock:
            previous = self._fragment_counts.get(key, 0)
            if previous and self._shared_keys == "reject":
                raise SharedKeyError(key)

            self._records.setdefault(key, []).extend(fragment.records)
            count = previous + 1
            self._fragment_counts[key] = count

        logger.debug(
            "Merged %d record(s) into key %r", len(fragment.records), key
        )
        if count > 1:
            if self._shared_keys == "warn":
                logger.warning(
                    "Key %r received records from %d fragments", key, count
                )
            else:
                logger.info(
                    "Key %r received records from %d fragments", key, count
                )
            if self._on_shared_key is not None:
                self._on_shared_key(key, count)

    # --- queries ---

    def lookup(self, key: str) -> Tuple[Any, ...]:
        """Return the records merged under *key*, or ``()`` if absent."""
        with self._lock:
            return tuple(self._records.get(key, ()))

    def keys(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(sorted(self._records))

    def fragment_count(self, key: str) -> int:
        """Number of fragments merged under *key* (0 if absent)."""
        with self._lock:
            return self._fragment_counts.get(key, 0)

    def snapshot(self) -> Dict[str, Tuple[Any, ...]]:
        """Copy of the whole mapping with immutable record sequences."""
        with self._lock:
            return {key: tuple(records) for key, records in self._records.items()}

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())


__all__ = ["RegistryStore", "SharedKeyPolicy"]
