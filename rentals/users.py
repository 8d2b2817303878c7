"""User records."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from .base import RecordStore
from .errors import StoreError
from .models import User, build_record, merge_record

logger = logging.getLogger("rentals.users")


class UserStore(RecordStore[User]):
    """Create, update and remove :class:`User` records."""

    def exists_by_pseudo(self, pseudo: str) -> bool:
        """Return ``True`` if any stored user already uses ``pseudo``.

        Pseudo uniqueness is advisory: :meth:`add` does not call this, callers
        that care should check first.
        """

        with self._lock:
            return any(user.pseudo == pseudo for user in self._storage.values())

    def add(self, payload: Mapping[str, Any]) -> User:
        with self._lock:
            user = build_record(User, payload, record_id=self._new_id(), timestamp=self._clock())
            self._storage.insert(user.id, user)
        logger.info("Created user %s (%s)", user.id, user.pseudo)
        return user

    def update(self, user_id: str, payload: Mapping[str, Any]) -> Union[User, StoreError]:
        with self._lock:
            stored = self._storage.get(user_id)
            if stored is None:
                return StoreError.not_found("user", user_id)
            updated = merge_record(stored, payload, timestamp=self._clock())
            self._storage.insert(user_id, updated)
        logger.info("Updated user %s", user_id)
        return updated

    def remove(self, user_id: str) -> Optional[User]:
        removed = self._remove(user_id)
        if removed is not None:
            logger.info("Removed user %s", user_id)
        return removed


__all__ = ["UserStore"]
