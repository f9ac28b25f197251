"""Integration tests for concurrent loaders racing a late registrar.

Every fragment must reach the registry exactly once, whatever the
interleaving of submissions and the attach.
"""
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import List

from search_index_registry import (
    Fragment,
    FragmentHub,
    FragmentLoader,
    RegistryStore,
    make_fragment,
)

_LOADERS = 16
_FRAGMENTS_PER_LOADER = 50


def _loader_fragments(loader_index: int) -> List[Fragment]:
    key = f"crate_{loader_index:02d}"
    return [
        make_fragment(key, [f"{key}:impl_{n}"]) for n in range(_FRAGMENTS_PER_LOADER)
    ]


def test_attach_racing_submissions_loses_nothing() -> None:
    hub = FragmentHub(name="race")
    store = RegistryStore()
    start = threading.Barrier(_LOADERS + 1)

    def run_loader(loader_index: int) -> None:
        start.wait()
        for fragment in _loader_fragments(loader_index):
            hub.submit(fragment)

    with ThreadPoolExecutor(max_workers=_LOADERS) as pool:
        futures = [pool.submit(run_loader, i) for i in range(_LOADERS)]
        start.wait()
        hub.attach(store)
        for future in futures:
            future.result()

    assert hub.pending() == ()
    assert hub.delivered_count == _LOADERS * _FRAGMENTS_PER_LOADER
    for loader_index in range(_LOADERS):
        key = f"crate_{loader_index:02d}"
        # Per-loader submission order survives the race
        assert store.lookup(key) == tuple(
            f"{key}:impl_{n}" for n in range(_FRAGMENTS_PER_LOADER)
        )


def test_registrar_sees_each_fragment_once() -> None:
    hub = FragmentHub(name="once")
    seen: Counter = Counter()
    lock = threading.Lock()

    def registrar(fragment: Fragment) -> None:
        with lock:
            seen[fragment.records[0]] += 1

    def run_loader(loader_index: int) -> None:
        for fragment in _loader_fragments(loader_index):
            hub.submit(fragment)

    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(run_loader, i) for i in range(_LOADERS)]
        hub.attach(registrar)
        for future in futures:
            future.result()

    assert len(seen) == _LOADERS * _FRAGMENTS_PER_LOADER
    assert set(seen.values()) == {1}


def test_one_loader_per_artifact() -> None:
    hub = FragmentHub(name="artifacts")
    store = RegistryStore(shared_keys="reject")
    loaders = [
        FragmentLoader(f"fj_{name}", [f"impl Debug for {name}"], hub=hub)
        for name in ("app", "host", "math", "interop", "kernel")
    ]

    with ThreadPoolExecutor(max_workers=len(loaders)) as pool:
        list(pool.map(lambda loader: loader.submit(), loaders[:3]))
        hub.attach(store)
        list(pool.map(lambda loader: loader.submit(), loaders[3:]))

    assert store.keys() == ("fj_app", "fj_host", "fj_interop", "fj_kernel", "fj_math")
    assert all(store.fragment_count(key) == 1 for key in store)
