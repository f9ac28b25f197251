"""Shared pytest fixtures for all tests."""
import pytest

from search_index_registry import FragmentHub, RegistryStore


class RecordingRegistrar(list):
    """Registrar that keeps every fragment it receives, in order."""

    def __call__(self, fragment: object) -> None:
        self.append(fragment)


@pytest.fixture
def hub() -> FragmentHub:
    """Fresh hub with no registrar attached."""
    return FragmentHub(name="test")


@pytest.fixture
def store() -> RegistryStore:
    """Empty store with the default append policy."""
    return RegistryStore()


@pytest.fixture
def recorder() -> RecordingRegistrar:
    return RecordingRegistrar()
