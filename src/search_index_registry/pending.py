"""Queue for fragments submitted before a registrar is attached."""

from __future__ import annotations

from threading import RLock
from typing import Callable, List, Tuple

from search_index_registry.models import Fragment


class PendingBuffer:
    """Thread-safe FIFO of fragments awaiting the first registrar."""

    def __init__(self) -> None:
        self._fragments: List[Fragment] = []
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._fragments)

    def enqueue(self, fragment: Fragment) -> None:
        with self._lock:
            self._fragments.append(fragment)

    def drain_into(self, registrar: Callable[[Fragment], None]) -> int:
        """Hand buffered fragments to *registrar* in FIFO order.

        Fragments are popped from the live buffer one at a time, so anything
        enqueued while the drain runs is delivered after what was already
        waiting. A fragment is handed out at most once: if *registrar*
        raises, the failing fragment is gone, the rest stay buffered, and the
        exception propagates.

        Returns:
            Number of fragments handed to the registrar.
        """
        handed_out = 0
        with self._lock:
            while self._fragments:
                fragment = self._fragments.pop(0)
                handed_out += 1
                registrar(fragment)
            return handed_out

    def snapshot(self) -> Tuple[Fragment, ...]:
        with self._lock:
            return tuple(self._fragments)


__all__ = ["PendingBuffer"]
