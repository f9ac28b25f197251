"""
search-index-registry: Load-order-independent aggregation of search index fragments.

Documentation builds emit one index fragment per compiled unit (crate). This
library merges those fragments into a single key -> records registry, even
when some fragments are loaded before the component that owns the registry
exists.

Example:
    >>> from search_index_registry import FragmentHub, RegistryStore, make_fragment
    >>> hub = FragmentHub()
    >>> hub.submit(make_fragment("A", ["r1"]))
    >>> hub.submit(make_fragment("B", ["r2", "r3"]))
    >>> store = RegistryStore()
    >>> hub.attach(store)
    >>> store.lookup("B")
    ('r2', 'r3')
    >>> store.lookup("C")
    ()

Caller obligation:
    Merging appends, so submitting the same fragment twice duplicates its
    records. Use one :class:`FragmentLoader` per build artifact to guard
    against accidental resubmission.
"""

__version__ = "1.0.0"

# Core data models
from search_index_registry.models import (
    Fragment,
    ImplementorRecord,
    ImplementorFragment,
    SearchIndexRegistryError,
    InvalidFragment,
    FragmentAlreadySubmittedError,
    SharedKeyError,
    coerce_fragment,
    make_fragment,
)

# Pending buffer
from search_index_registry.pending import PendingBuffer

# Registry store
from search_index_registry.store import RegistryStore, SharedKeyPolicy

# Delivery hub
from search_index_registry.hub import FragmentHub, Registrar, RegistrarState

# Loaders
from search_index_registry.loader import FragmentLoader, submit_all

# Offline reduction
from search_index_registry.reducer import (
    INDEX_SCHEMA_VERSION,
    ANOMALY_SHARED_KEY,
    ANOMALY_EMPTY_FRAGMENT,
    IndexAnomaly,
    ReducedIndexState,
    reduce_fragments,
)

__all__ = [
    "__version__",
    # Models
    "Fragment",
    "ImplementorRecord",
    "ImplementorFragment",
    "coerce_fragment",
    "make_fragment",
    # Exceptions
    "SearchIndexRegistryError",
    "InvalidFragment",
    "FragmentAlreadySubmittedError",
    "SharedKeyError",
    # Pending buffer
    "PendingBuffer",
    # Registry store
    "RegistryStore",
    "SharedKeyPolicy",
    # Delivery hub
    "FragmentHub",
    "Registrar",
    "RegistrarState",
    # Loaders
    "FragmentLoader",
    "submit_all",
    # Offline reduction
    "INDEX_SCHEMA_VERSION",
    "ANOMALY_SHARED_KEY",
    "ANOMALY_EMPTY_FRAGMENT",
    "IndexAnomaly",
    "ReducedIndexState",
    "reduce_fragments",
]
