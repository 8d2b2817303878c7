"""Domain records for users, items and rental slots."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, FrozenSet, Mapping, Type, TypeVar

RecordT = TypeVar("RecordT")

_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


@dataclass(frozen=True)
class User:
    """A registered person who can own items and book slots."""

    id: str
    pseudo: str
    name: str
    created_at: int
    updated_at: int


@dataclass(frozen=True)
class Item:
    """Something a user owns and may offer for rent."""

    id: str
    description: str
    image_url: str
    owner_id: str
    created_at: int
    updated_at: int


@dataclass(frozen=True)
class Slot:
    """A time window during which ``owner_id`` holds ``item_id``."""

    id: str
    description: str
    item_id: str
    owner_id: str
    begin_at: int
    end_at: int
    available: bool
    created_at: int
    updated_at: int


def editable_fields(record_type: Type[Any]) -> FrozenSet[str]:
    """Return the field names a payload may set for ``record_type``."""

    return frozenset(f.name for f in fields(record_type)) - _IMMUTABLE_FIELDS


def _check_payload_keys(record_type: Type[Any], payload: Mapping[str, Any]) -> None:
    unknown = set(payload) - editable_fields(record_type)
    if unknown:
        raise ValueError(
            f"Unsupported {record_type.__name__.lower()} fields: {', '.join(sorted(unknown))}"
        )


def build_record(
    record_type: Type[RecordT],
    payload: Mapping[str, Any],
    *,
    record_id: str,
    timestamp: int,
) -> RecordT:
    """Construct a new record from a complete creation payload."""

    _check_payload_keys(record_type, payload)
    missing = editable_fields(record_type) - set(payload)
    if missing:
        raise ValueError(
            f"Missing required {record_type.__name__.lower()} fields: {', '.join(sorted(missing))}"
        )
    return record_type(  # type: ignore[call-arg]
        id=record_id,
        created_at=timestamp,
        updated_at=timestamp,
        **dict(payload),
    )


def merge_record(record: RecordT, payload: Mapping[str, Any], *, timestamp: int) -> RecordT:
    """Overlay ``payload`` onto ``record`` and refresh ``updated_at``.

    Every key present in ``payload`` overwrites the stored value, including
    falsy values such as ``""``, ``0`` and ``False``. Keys that are absent keep
    their stored value. ``id`` and ``created_at`` can never be changed.
    """

    _check_payload_keys(type(record), payload)
    changes: Dict[str, Any] = dict(payload)
    changes["updated_at"] = timestamp
    return replace(record, **changes)


def record_to_dict(record: Any) -> Dict[str, Any]:
    return {f.name: getattr(record, f.name) for f in fields(record)}


def record_from_dict(record_type: Type[RecordT], data: Mapping[str, Any]) -> RecordT:
    return record_type(**{f.name: data[f.name] for f in fields(record_type)})  # type: ignore[call-arg]


__all__ = [
    "Item",
    "Slot",
    "User",
    "build_record",
    "editable_fields",
    "merge_record",
    "record_from_dict",
    "record_to_dict",
]
