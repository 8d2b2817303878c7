from __future__ import annotations

from pathlib import Path

import pytest

from rentals.context import Stores, build_stores
from rentals.database import Database, MemoryStore, resolve_database_path
from rentals.errors import StoreError
from rentals.models import User


def _user(user_id: str, pseudo: str = "p") -> User:
    return User(id=user_id, pseudo=pseudo, name="Name", created_at=1, updated_at=1)


@pytest.mark.parametrize("backend", ["memory", "sqlite"])
def test_ordered_map_contract(backend: str, database: Database) -> None:
    store = MemoryStore() if backend == "memory" else database.store("users", User)

    assert store.insert("b", _user("b")) is None
    assert store.insert("a", _user("a")) is None
    assert store.insert("c", _user("c")) is None
    previous = store.insert("b", _user("b", pseudo="changed"))

    assert previous == _user("b")
    assert [user.id for user in store.values()] == ["a", "b", "c"]
    assert store.get("b").pseudo == "changed"
    assert store.contains_key("a")
    assert not store.contains_key("z")
    assert len(store) == 3
    assert store.remove("a") == _user("a")
    assert store.remove("a") is None
    assert store.get("a") is None
    assert len(store) == 2


def test_sqlite_namespaces_are_isolated(database: Database) -> None:
    users = database.store("users", User)
    others = database.store("others", User)

    users.insert("u1", _user("u1"))

    assert others.get("u1") is None
    assert len(others) == 0


def test_sqlite_records_survive_reopening(tmp_path: Path, clock) -> None:
    path = tmp_path / "nested" / "rentals.sqlite3"
    first = Database(path)
    first.initialize()
    stores = build_stores(first, clock=clock)
    owner = stores.users.add({"pseudo": "ana", "name": "Ana"})
    item = stores.items.create({"description": "Drill", "image_url": "", "owner_id": owner.id})
    slot = stores.slots.create(
        {
            "description": "Saturday",
            "item_id": item.id,
            "owner_id": owner.id,
            "begin_at": 10,
            "end_at": 20,
            "available": False,
        }
    )
    assert not isinstance(slot, StoreError)

    reopened = Database(path)
    reopened.initialize()
    again: Stores = build_stores(reopened)

    assert again.users.get(owner.id) == owner
    assert again.items.get(item.id) == item
    assert again.slots.get(slot.id) == slot
    assert again.slots.get(slot.id).available is False


def test_resolve_database_path_prefers_explicit_value(tmp_path: Path) -> None:
    explicit = tmp_path / "custom.sqlite3"
    assert resolve_database_path(str(explicit)) == explicit.resolve()
    assert resolve_database_path(None).name == "rentals.sqlite3"
