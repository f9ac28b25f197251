"""Late-binding delivery of fragments to a registrar.

Loaders call :meth:`FragmentHub.submit` whenever their fragment is ready;
the consumer calls :meth:`FragmentHub.attach` whenever it is ready. The two
may happen in any order and from any thread:

    >>> from search_index_registry import FragmentHub, RegistryStore, make_fragment
    >>> hub = FragmentHub()
    >>> hub.submit(make_fragment("fj_app", ["impl Parser for Args"]))
    >>> store = RegistryStore()
    >>> hub.attach(store)
    >>> store.lookup("fj_app")
    ('impl Parser for Args',)
"""
from __future__ import annotations

import logging
from enum import Enum
from threading import RLock
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from search_index_registry.models import Fragment, coerce_fragment
from search_index_registry.pending import PendingBuffer

logger = logging.getLogger("search_index_registry.hub")

Registrar = Callable[[Fragment], None]


class RegistrarState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ATTACHED = "attached"


class FragmentHub:
    """Routes submitted fragments to the attached registrar or a buffer.

    Until the first :meth:`attach`, fragments wait in a FIFO pending buffer.
    Attaching drains that buffer into the registrar before returning; from
    then on fragments are delivered synchronously in the submitting thread.
    A single lock covers both operations, so a submission racing with an
    attach is either buffered and drained, or delivered directly, never
    both and never lost.

    Args:
        name: Label used in log messages and ``repr``.
    """

    def __init__(self, *, name: str = "default") -> None:
        self.name = name
        self._lock = RLock()
        self._pending = PendingBuffer()
        self._registrar: Optional[Registrar] = None
        self._delivered = 0
        self._draining = False

    def __repr__(self) -> str:
        return (
            f"FragmentHub(name={self.name!r}, state={self.state.value}, "
            f"pending={len(self._pending)}, delivered={self._delivered})"
        )

    @property
    def state(self) -> RegistrarState:
        with self._lock:
            if self._registrar is None:
                return RegistrarState.UNINITIALIZED
            return RegistrarState.ATTACHED

    @property
    def is_attached(self) -> bool:
        return self.state is RegistrarState.ATTACHED

    @property
    def delivered_count(self) -> int:
        """Number of fragments handed to a registrar so far, including any
        the registrar raised on."""
        with self._lock:
            return self._delivered

    def pending(self) -> Tuple[Fragment, ...]:
        """Fragments still waiting for a registrar, oldest first."""
        return self._pending.snapshot()

    def submit(self, fragment: Union[Fragment, Mapping[str, Any]]) -> None:
        """Deliver *fragment* now, or buffer it until it can be delivered.

        A fragment is buffered when no registrar is attached, while a drain
        is running (a registrar submitting from inside its own callback), or
        behind leftovers of a drain interrupted by a failing registrar.

        Raises:
            InvalidFragment: If *fragment* is malformed. Nothing is buffered
                or delivered in that case.
        """
        fragment = coerce_fragment(fragment)
        with self._lock:
            registrar = self._registrar
            if registrar is None or self._draining:
                self._pending.enqueue(fragment)
                logger.debug(
                    "[%s] Buffered fragment %r (%d pending)",
                    self.name, fragment.key, len(self._pending),
                )
                return
            if len(self._pending):
                # Queue behind leftovers so a second failure cannot lose it.
                self._pending.enqueue(fragment)
                self._drain(registrar)
                return
            self._delivered += 1
            registrar(fragment)
            logger.debug("[%s] Delivered fragment %r", self.name, fragment.key)

    def attach(self, registrar: Registrar) -> None:
        """Attach *registrar* and drain buffered fragments into it.

        Last attach wins: a previously attached registrar is replaced, and
        fragments already delivered to it are not delivered again.
        """
        if not callable(registrar):
            raise TypeError("registrar must be callable with one Fragment")
        with self._lock:
            if self._registrar is not None:
                logger.warning(
                    "[%s] Replacing attached registrar %r with %r",
                    self.name, self._registrar, registrar,
                )
            self._registrar = registrar
            drained = self._drain(registrar)
            logger.info(
                "[%s] Registrar attached; drained %d pending fragment(s)",
                self.name, drained,
            )

    def _drain(self, registrar: Registrar) -> int:
        def deliver(fragment: Fragment) -> None:
            self._delivered += 1
            registrar(fragment)

        self._draining = True
        try:
            return self._pending.drain_into(deliver)
        finally:
            self._draining = False


__all__ = ["FragmentHub", "Registrar", "RegistrarState"]
