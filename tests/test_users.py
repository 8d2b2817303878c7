from __future__ import annotations

from rentals.context import Stores
from rentals.errors import ErrorKind, StoreError


def test_add_then_get_returns_payload_with_identity(stores: Stores) -> None:
    user = stores.users.add({"pseudo": "ana", "name": "Ana Lopez"})

    assert user.id
    assert user.created_at == user.updated_at
    fetched = stores.users.get(user.id)
    assert fetched == user
    assert (fetched.pseudo, fetched.name) == ("ana", "Ana Lopez")
    assert stores.users.exists(user.id)


def test_list_is_ordered_by_id(stores: Stores) -> None:
    first = stores.users.add({"pseudo": "a", "name": "A"})
    second = stores.users.add({"pseudo": "b", "name": "B"})

    assert [user.id for user in stores.users.list()] == sorted([first.id, second.id])


def test_exists_by_pseudo_is_advisory(stores: Stores) -> None:
    assert not stores.users.exists_by_pseudo("ana")
    stores.users.add({"pseudo": "ana", "name": "Ana"})
    assert stores.users.exists_by_pseudo("ana")
    assert not stores.users.exists_by_pseudo("Ana")

    duplicate = stores.users.add({"pseudo": "ana", "name": "Other Ana"})
    assert duplicate.pseudo == "ana"
    assert len(stores.users) == 2


def test_update_merges_and_refreshes_timestamp(stores: Stores) -> None:
    user = stores.users.add({"pseudo": "ana", "name": "Ana"})

    updated = stores.users.update(user.id, {"name": ""})

    assert not isinstance(updated, StoreError)
    assert updated.name == ""
    assert updated.pseudo == "ana"
    assert updated.created_at == user.created_at
    assert updated.updated_at > user.updated_at
    assert stores.users.get(user.id) == updated


def test_update_missing_user_is_not_found(stores: Stores) -> None:
    result = stores.users.update("ghost", {"name": "Nobody"})

    assert isinstance(result, StoreError)
    assert result.kind is ErrorKind.NOT_FOUND
    assert "ghost" in result.message
    assert len(stores.users) == 0


def test_remove_is_idempotent(stores: Stores) -> None:
    user = stores.users.add({"pseudo": "ana", "name": "Ana"})

    assert stores.users.remove(user.id) == user
    assert stores.users.get(user.id) is None
    assert stores.users.remove(user.id) is None
