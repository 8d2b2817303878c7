"""Item records and ownership transfer."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional, Union

from .base import OrderedMap, RecordStore
from .errors import StoreError
from .models import Item, build_record, merge_record
from .users import UserStore

logger = logging.getLogger("rentals.items")


class ItemStore(RecordStore[Item]):
    """Items owned by users.

    ``create`` and ``update`` accept whatever ``owner_id`` they are given;
    callers that need the owner to exist use :meth:`create_checked` and
    :meth:`update_checked`, which validate and write under one lock.
    :meth:`transfer_ownership` always validates the new owner.
    """

    def __init__(self, storage: OrderedMap[Item], *, users: UserStore, **kwargs: Any) -> None:
        super().__init__(storage, **kwargs)
        self._users = users

    def check_owner(self, owner_id: str) -> bool:
        return self._users.exists(owner_id)

    def create(self, payload: Mapping[str, Any]) -> Item:
        with self._lock:
            item = build_record(Item, payload, record_id=self._new_id(), timestamp=self._clock())
            self._storage.insert(item.id, item)
        logger.info("Created item %s owned by %s", item.id, item.owner_id)
        return item

    def create_checked(self, payload: Mapping[str, Any]) -> Union[Item, StoreError]:
        """Like :meth:`create`, but only if ``owner_id`` resolves to a user."""

        with self._lock:
            owner_id = str(payload.get("owner_id", ""))
            if not self.check_owner(owner_id):
                logger.warning("Refused to create item: unknown owner %s", owner_id)
                return StoreError.invalid_owner(owner_id)
            return self.create(payload)

    def update(self, item_id: str, payload: Mapping[str, Any]) -> Union[Item, StoreError]:
        with self._lock:
            stored = self._storage.get(item_id)
            if stored is None:
                return StoreError.not_found("item", item_id)
            updated = merge_record(stored, payload, timestamp=self._clock())
            self._storage.insert(item_id, updated)
        logger.info("Updated item %s", item_id)
        return updated

    def update_checked(self, item_id: str, payload: Mapping[str, Any]) -> Union[Item, StoreError]:
        """Like :meth:`update`, but a supplied ``owner_id`` must resolve to a user."""

        with self._lock:
            if not self._storage.contains_key(item_id):
                return StoreError.not_found("item", item_id)
            if "owner_id" in payload and not self.check_owner(str(payload["owner_id"])):
                logger.warning(
                    "Refused to update item %s: unknown owner %s", item_id, payload["owner_id"]
                )
                return StoreError.invalid_owner(str(payload["owner_id"]))
            return self.update(item_id, payload)

    def transfer_ownership(self, item_id: str, new_owner_id: str) -> Union[Item, StoreError]:
        with self._lock:
            stored = self._storage.get(item_id)
            if stored is None:
                return StoreError.not_found("item", item_id)
            if not self.check_owner(new_owner_id):
                logger.warning(
                    "Refused to transfer item %s: unknown owner %s", item_id, new_owner_id
                )
                return StoreError.invalid_owner(new_owner_id)
            updated = replace(stored, owner_id=new_owner_id, updated_at=self._clock())
            self._storage.insert(item_id, updated)
        logger.info("Transferred item %s from %s to %s", item_id, stored.owner_id, new_owner_id)
        return updated

    def delete(self, item_id: str) -> Optional[Item]:
        removed = self._remove(item_id)
        if removed is not None:
            logger.info("Deleted item %s", item_id)
        return removed


__all__ = ["ItemStore"]
