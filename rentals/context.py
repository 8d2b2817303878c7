"""Wiring of the three record stores over one storage backend."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Union

from .clock import Clock, IdGenerator, MonotonicClock, new_uuid
from .database import Database, MemoryBackend
from .items import ItemStore
from .models import Item, Slot, User
from .slots import SlotStore
from .users import UserStore

Backend = Union[Database, MemoryBackend]


@dataclass(frozen=True)
class Stores:
    users: UserStore
    items: ItemStore
    slots: SlotStore


def build_stores(
    backend: Backend,
    *,
    clock: Optional[Clock] = None,
    new_id: Optional[IdGenerator] = None,
) -> Stores:
    """Create the user, item and slot stores in dependency order."""

    lock = threading.RLock()
    shared = {
        "clock": clock or MonotonicClock(),
        "new_id": new_id or new_uuid,
        "lock": lock,
    }
    users = UserStore(backend.store("users", User), **shared)
    items = ItemStore(backend.store("items", Item), users=users, **shared)
    slots = SlotStore(backend.store("slots", Slot), users=users, items=items, **shared)
    return Stores(users=users, items=items, slots=slots)


__all__ = ["Backend", "Stores", "build_stores"]
