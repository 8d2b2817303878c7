"""Shared plumbing for the record stores."""

from __future__ import annotations

import threading
from typing import Generic, List, Optional, Protocol, TypeVar

from .clock import Clock, IdGenerator

RecordT = TypeVar("RecordT")


class OrderedMap(Protocol[RecordT]):
    def insert(self, key: str, value: RecordT) -> Optional[RecordT]: ...

    def get(self, key: str) -> Optional[RecordT]: ...

    def contains_key(self, key: str) -> bool: ...

    def remove(self, key: str) -> Optional[RecordT]: ...

    def values(self) -> List[RecordT]: ...

    def __len__(self) -> int: ...


class RecordStore(Generic[RecordT]):
    """Read access and collaborators common to every entity store.

    ``lock`` is shared between all stores of one process so a single operation,
    including the cross-store checks it performs, runs without interleaving.
    """

    def __init__(
        self,
        storage: OrderedMap[RecordT],
        *,
        clock: Clock,
        new_id: IdGenerator,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._new_id = new_id
        self._lock = lock if lock is not None else threading.RLock()

    def list(self) -> List[RecordT]:
        with self._lock:
            return self._storage.values()

    def get(self, record_id: str) -> Optional[RecordT]:
        with self._lock:
            return self._storage.get(record_id)

    def exists(self, record_id: str) -> bool:
        with self._lock:
            return self._storage.contains_key(record_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)

    def _remove(self, record_id: str) -> Optional[RecordT]:
        with self._lock:
            return self._storage.remove(record_id)


__all__ = ["OrderedMap", "RecordStore"]
