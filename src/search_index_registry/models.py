"""Core data models for search-index-registry."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError


class Fragment(BaseModel):
    """Immutable contribution of records under a single key.

    One fragment is produced per build artifact (e.g. per crate). Records
    are opaque to the library; only their order and equality matter.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(
        ...,
        min_length=1,
        description="Logical group name (e.g. the crate the records belong to)",
    )
    records: Tuple[Any, ...] = Field(
        default=(),
        description="Ordered records contributed under this key (opaque to library)",
    )

    @field_validator("key", mode="before")
    @classmethod
    def _require_string_key(cls, v: object) -> object:
        if not isinstance(v, str):
            raise ValueError(f"key must be a string; got {type(v).__name__}")
        if not v.strip():
            raise ValueError("key must not be blank")
        return v

    @property
    def record_count(self) -> int:
        return len(self.records)

    def __repr__(self) -> str:
        """Human-readable representation."""
        return f"Fragment(key={self.key!r}, records={len(self.records)})"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize fragment to dictionary."""
        return {"key": self.key, "records": list(self.records)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Fragment":
        """Deserialize fragment from dictionary.

        Raises:
            InvalidFragment: If the mapping does not describe a valid fragment.
        """
        return coerce_fragment(data)


class ImplementorRecord(BaseModel):
    """Rendered description of one implementor relationship.

    Optional typed record for generators that emit implementor tables; the
    registry itself stores any record value unchanged.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(
        ...,
        min_length=1,
        description="Rendered impl line (e.g. 'impl Parser for Args')",
    )
    synthetic: bool = Field(
        default=False,
        description="True for compiler-derived auto-trait implementations",
    )
    types: Tuple[str, ...] = Field(
        default=(),
        description="Fully-qualified paths of the implementing types",
    )


class ImplementorFragment(Fragment):
    """Fragment whose records are all ImplementorRecord entries."""

    records: Tuple[ImplementorRecord, ...] = Field(
        default=(),
        description="Implementor records contributed under this key",
    )


def coerce_fragment(value: object) -> Fragment:
    """Return *value* as a Fragment, validating mappings on the way.

    Raises:
        InvalidFragment: If *value* is neither a Fragment nor a mapping that
            validates as one. The pydantic error is chained as the cause.
    """
    if isinstance(value, Fragment):
        # model_construct() skips validation; recheck the key.
        key = value.key
        if not isinstance(key, str) or not key.strip():
            raise InvalidFragment(
                f"key: must be a non-blank string; got {key!r}", key=key
            )
        return value
    if not isinstance(value, Mapping):
        raise InvalidFragment(
            f"expected Fragment or mapping; got {type(value).__name__}"
        )
    try:
        return Fragment.model_validate(dict(value))
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or "fragment"
        raise InvalidFragment(
            f"{field}: {first['msg']}", key=value.get("key")
        ) from exc


def make_fragment(key: str, records: Iterable[Any] = ()) -> Fragment:
    """Build a Fragment, raising InvalidFragment instead of a pydantic error."""
    return coerce_fragment({"key": key, "records": tuple(records)})


# Custom Exceptions
class SearchIndexRegistryError(Exception):
    """Base exception for all library errors."""
    pass


class InvalidFragment(SearchIndexRegistryError):
    """Fragment input is malformed (missing or empty key, wrong shape)."""

    def __init__(self, reason: str, key: Optional[object] = None) -> None:
        self.reason = reason
        self.key = key
        super().__init__(f"Invalid fragment: {reason}")


class FragmentAlreadySubmittedError(SearchIndexRegistryError):
    """A loader was asked to submit its fragment more than once."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Fragment for key {key!r} was already submitted")


class SharedKeyError(SearchIndexRegistryError):
    """A second fragment arrived for a key the store treats as exclusive."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            f"Key {key!r} already received a fragment; "
            f"store is configured with shared_keys='reject'"
        )
