"""Per-artifact fragment loaders."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from search_index_registry.hub import FragmentHub
from search_index_registry.models import (
    Fragment,
    FragmentAlreadySubmittedError,
    coerce_fragment,
    make_fragment,
)

logger = logging.getLogger("search_index_registry.loader")


class FragmentLoader:
    """Collects the records of one build artifact and submits them once.

    The registry appends on every merge, so a fragment submitted twice shows
    up twice in the index. The loader refuses a second :meth:`submit`
    instead of relying on every generator to get that right.

    Args:
        key: Artifact name the records are grouped under.
        records: Initial records, in order.
        hub: Default hub for :meth:`submit`.

    Raises:
        InvalidFragment: If *key* is empty or not a string.
    """

    def __init__(
        self,
        key: str,
        records: Iterable[Any] = (),
        *,
        hub: Optional[FragmentHub] = None,
    ) -> None:
        # Validate the key up front so bad loaders fail at construction.
        make_fragment(key)
        self.key = key
        self._records: List[Any] = list(records)
        self._hub = hub
        self._submitted = False

    def __repr__(self) -> str:
        return (
            f"FragmentLoader(key={self.key!r}, records={len(self._records)}, "
            f"submitted={self._submitted})"
        )

    @property
    def submitted(self) -> bool:
        return self._submitted

    def add(self, record: Any) -> "FragmentLoader":
        """Append a record; returns the loader for chaining."""
        if self._submitted:
            raise FragmentAlreadySubmittedError(self.key)
        self._records.append(record)
        return self

    def build(self) -> Fragment:
        """Freeze the collected records into a Fragment."""
        return make_fragment(self.key, self._records)

    def submit(self, hub: Optional[FragmentHub] = None) -> Fragment:
        """Build the fragment and submit it to *hub* (or the default hub).

        Returns:
            The submitted fragment.

        Raises:
            FragmentAlreadySubmittedError: If this loader already submitted.
            ValueError: If no hub was given here or at construction.
        """
        if self._submitted:
            raise FragmentAlreadySubmittedError(self.key)
        target = hub if hub is not None else self._hub
        if target is None:
            raise ValueError(f"No hub to submit fragment {self.key!r} to")

        fragment = self.build()
        target.submit(fragment)
        self._submitted = True
        logger.debug(
            "Loader %r submitted %d record(s)", self.key, fragment.record_count
        )
        return fragment


def submit_all(
    hub: FragmentHub,
    fragments: Iterable[Union[Fragment, Mapping[str, Any]]],
) -> int:
    """Submit fragments in order; returns how many were submitted.

    Every fragment is validated before the first submission, so a malformed
    entry leaves the hub untouched.

    Raises:
        InvalidFragment: If any entry is malformed.
    """
    validated = [coerce_fragment(fragment) for fragment in fragments]
    for fragment in validated:
        hub.submit(fragment)
    return len(validated)


__all__ = ["FragmentLoader", "submit_all"]
