"""Rental slots linking a user to an item for a time window."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .base import OrderedMap, RecordStore
from .errors import StoreError
from .items import ItemStore
from .models import Slot, build_record, merge_record
from .users import UserStore

logger = logging.getLogger("rentals.slots")


class SlotStore(RecordStore[Slot]):
    """Slots whose ``owner_id`` and ``item_id`` must always resolve.

    Both references are checked before every write, on creation and again on
    each update, so a slot is never stored pointing at a user or item that did
    not exist at write time. ``available`` is stored as given; the time window
    is not checked for ordering or overlap.
    """

    def __init__(
        self,
        storage: OrderedMap[Slot],
        *,
        users: UserStore,
        items: ItemStore,
        **kwargs: Any,
    ) -> None:
        super().__init__(storage, **kwargs)
        self._users = users
        self._items = items

    def _check_references(self, slot_owner_id: str, item_id: str, action: str) -> Optional[StoreError]:
        if not self._users.exists(slot_owner_id):
            logger.warning("Can't %s slot: no user found matching id=%s", action, slot_owner_id)
            return StoreError.invalid_owner(slot_owner_id)
        if not self._items.exists(item_id):
            logger.warning("Can't %s slot: no item matching id=%s", action, item_id)
            return StoreError.invalid_item(item_id)
        return None

    def create(self, payload: Mapping[str, Any]) -> Union[Slot, StoreError]:
        with self._lock:
            candidate = build_record(Slot, payload, record_id=self._new_id(), timestamp=self._clock())
            error = self._check_references(candidate.owner_id, candidate.item_id, "create")
            if error is not None:
                return error
            self._storage.insert(candidate.id, candidate)
        logger.info(
            "Created slot %s for item %s (%s-%s)",
            candidate.id,
            candidate.item_id,
            candidate.begin_at,
            candidate.end_at,
        )
        return candidate

    def update(self, slot_id: str, payload: Mapping[str, Any]) -> Union[Slot, StoreError]:
        with self._lock:
            stored = self._storage.get(slot_id)
            if stored is None:
                return StoreError.not_found("slot", slot_id)
            updated = merge_record(stored, payload, timestamp=self._clock())
            error = self._check_references(updated.owner_id, updated.item_id, "update")
            if error is not None:
                return error
            self._storage.insert(slot_id, updated)
        logger.info("Updated slot %s", slot_id)
        return updated

    def delete(self, slot_id: str) -> Optional[Slot]:
        removed = self._remove(slot_id)
        if removed is not None:
            logger.info("Deleted slot %s", slot_id)
        return removed


__all__ = ["SlotStore"]
