"""Error values returned by store operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_OWNER = "invalid_owner"
    INVALID_ITEM = "invalid_item"


@dataclass(frozen=True)
class StoreError:
    """A rejected operation. Returned to the caller, never raised."""

    kind: ErrorKind
    message: str

    @classmethod
    def not_found(cls, entity: str, record_id: str) -> "StoreError":
        return cls(ErrorKind.NOT_FOUND, f"no {entity} matching id={record_id}")

    @classmethod
    def invalid_owner(cls, owner_id: str) -> "StoreError":
        return cls(ErrorKind.INVALID_OWNER, f"no user found matching id={owner_id}")

    @classmethod
    def invalid_item(cls, item_id: str) -> "StoreError":
        return cls(ErrorKind.INVALID_ITEM, f"no item matching id={item_id}")


__all__ = ["ErrorKind", "StoreError"]
