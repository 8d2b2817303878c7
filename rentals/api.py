"""FastAPI application exposing the user, item and slot stores."""
from __future__ import annotations

from typing import Any, Dict, List, NoReturn, Optional

from fastapi import Depends, FastAPI, HTTPException, status
from pydantic import BaseModel, Field, model_validator

from .config import Settings, load_settings
from .context import Stores, build_stores
from .errors import ErrorKind, StoreError
from .items import ItemStore
from .models import Item, Slot, User, record_to_dict
from .slots import SlotStore
from .users import UserStore

_ERROR_STATUS = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_OWNER: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.INVALID_ITEM: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


class _PartialUpdate(BaseModel):
    """Update body: only the fields the client sent reach the merge."""

    @model_validator(mode="before")
    @classmethod
    def _reject_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None)
            if nulls:
                raise ValueError(f"Fields may not be null: {', '.join(nulls)}")
        return data

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class UserCreateRequest(BaseModel):
    pseudo: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., max_length=255)


class UserUpdateRequest(_PartialUpdate):
    pseudo: Optional[str] = Field(default=None, min_length=1, max_length=64)
    name: Optional[str] = Field(default=None, max_length=255)


class UserResponse(BaseModel):
    id: str
    pseudo: str
    name: str
    created_at: int
    updated_at: int


class PseudoCheckResponse(BaseModel):
    pseudo: str
    exists: bool


class ItemCreateRequest(BaseModel):
    description: str = Field(..., max_length=2048)
    image_url: str = Field(..., max_length=2048)
    owner_id: str = Field(..., min_length=1)


class ItemUpdateRequest(_PartialUpdate):
    description: Optional[str] = Field(default=None, max_length=2048)
    image_url: Optional[str] = Field(default=None, max_length=2048)
    owner_id: Optional[str] = Field(default=None, min_length=1)


class TransferRequest(BaseModel):
    owner_id: str = Field(..., min_length=1)


class ItemResponse(BaseModel):
    id: str
    description: str
    image_url: str
    owner_id: str
    created_at: int
    updated_at: int


class SlotCreateRequest(BaseModel):
    description: str = Field(..., max_length=2048)
    item_id: str = Field(..., min_length=1)
    owner_id: str = Field(..., min_length=1)
    begin_at: int = Field(..., ge=0)
    end_at: int = Field(..., ge=0)
    available: bool = True


class SlotUpdateRequest(_PartialUpdate):
    description: Optional[str] = Field(default=None, max_length=2048)
    item_id: Optional[str] = Field(default=None, min_length=1)
    owner_id: Optional[str] = Field(default=None, min_length=1)
    begin_at: Optional[int] = Field(default=None, ge=0)
    end_at: Optional[int] = Field(default=None, ge=0)
    available: Optional[bool] = None


class SlotResponse(BaseModel):
    id: str
    description: str
    item_id: str
    owner_id: str
    begin_at: int
    end_at: int
    available: bool
    created_at: int
    updated_at: int


def _raise_store_error(error: StoreError) -> NoReturn:
    raise HTTPException(
        status_code=_ERROR_STATUS[error.kind],
        detail={"error": error.kind.value, "message": error.message},
    )


def user_to_response(user: User) -> UserResponse:
    return UserResponse(**record_to_dict(user))


def item_to_response(item: Item) -> ItemResponse:
    return ItemResponse(**record_to_dict(item))


def slot_to_response(slot: Slot) -> SlotResponse:
    return SlotResponse(**record_to_dict(slot))


def create_app(
    *,
    stores: Stores | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    if stores is None:
        settings = settings or load_settings()
        stores = build_stores(settings.open_backend())

    app = FastAPI(
        title="Rentals",
        description="Users, the items they own and the slots during which items are rented",
        version="1.0.0",
    )
    app.state.stores = stores

    def get_users() -> UserStore:
        return stores.users

    def get_items() -> ItemStore:
        return stores.items

    def get_slots() -> SlotStore:
        return stores.slots

    @app.get("/health")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    @app.get("/users", response_model=List[UserResponse])
    def list_users(users: UserStore = Depends(get_users)) -> List[UserResponse]:
        return [user_to_response(user) for user in users.list()]

    @app.get("/users/pseudo/{pseudo}", response_model=PseudoCheckResponse)
    def check_pseudo(pseudo: str, users: UserStore = Depends(get_users)) -> PseudoCheckResponse:
        return PseudoCheckResponse(pseudo=pseudo, exists=users.exists_by_pseudo(pseudo))

    @app.get("/users/{user_id}", response_model=UserResponse)
    def read_user(user_id: str, users: UserStore = Depends(get_users)) -> UserResponse:
        user = users.get(user_id)
        if user is None:
            _raise_store_error(StoreError.not_found("user", user_id))
        return user_to_response(user)

    @app.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    def create_user(request: UserCreateRequest, users: UserStore = Depends(get_users)) -> UserResponse:
        return user_to_response(users.add(request.model_dump()))

    @app.patch("/users/{user_id}", response_model=UserResponse)
    def update_user(
        user_id: str,
        request: UserUpdateRequest,
        users: UserStore = Depends(get_users),
    ) -> UserResponse:
        result = users.update(user_id, request.changes())
        if isinstance(result, StoreError):
            _raise_store_error(result)
        return user_to_response(result)

    @app.delete("/users/{user_id}", response_model=UserResponse)
    def delete_user(user_id: str, users: UserStore = Depends(get_users)) -> UserResponse:
        removed = users.remove(user_id)
        if removed is None:
            _raise_store_error(StoreError.not_found("user", user_id))
        return user_to_response(removed)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------
    @app.get("/items", response_model=List[ItemResponse])
    def list_items(items: ItemStore = Depends(get_items)) -> List[ItemResponse]:
        return [item_to_response(item) for item in items.list()]

    @app.get("/items/{item_id}", response_model=ItemResponse)
    def read_item(item_id: str, items: ItemStore = Depends(get_items)) -> ItemResponse:
        item = items.get(item_id)
        if item is None:
            _raise_store_error(StoreError.not_found("item", item_id))
        return item_to_response(item)

    @app.post("/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
    def create_item(request: ItemCreateRequest, items: ItemStore = Depends(get_items)) -> ItemResponse:
        result = items.create_checked(request.model_dump())
        if isinstance(result, StoreError):
            _raise_store_error(result)
        return item_to_response(result)

    @app.patch("/items/{item_id}", response_model=ItemResponse)
    def update_item(
        item_id: str,
        request: ItemUpdateRequest,
        items: ItemStore = Depends(get_items),
    ) -> ItemResponse:
        result = items.update_checked(item_id, request.changes())
        if isinstance(result, StoreError):
            _raise_store_error(result)
        return item_to_response(result)

    @app.post("/items/{item_id}/transfer", response_model=ItemResponse)
    def transfer_item(
        item_id: str,
        request: TransferRequest,
        items: ItemStore = Depends(get_items),
    ) -> ItemResponse:
        result = items.transfer_ownership(item_id, request.owner_id)
        if isinstance(result, StoreError):
            _raise_store_error(result)
        return item_to_response(result)

    @app.delete("/items/{item_id}", response_model=ItemResponse)
    def delete_item(item_id: str, items: ItemStore = Depends(get_items)) -> ItemResponse:
        removed = items.delete(item_id)
        if removed is None:
            _raise_store_error(StoreError.not_found("item", item_id))
        return item_to_response(removed)

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    @app.get("/slots", response_model=List[SlotResponse])
    def list_slots(slots: SlotStore = Depends(get_slots)) -> List[SlotResponse]:
        return [slot_to_response(slot) for slot in slots.list()]

    @app.get("/slots/{slot_id}", response_model=SlotResponse)
    def read_slot(slot_id: str, slots: SlotStore = Depends(get_slots)) -> SlotResponse:
        slot = slots.get(slot_id)
        if slot is None:
            _raise_store_error(StoreError.not_found("slot", slot_id))
        return slot_to_response(slot)

    @app.post("/slots", response_model=SlotResponse, status_code=status.HTTP_201_CREATED)
    def create_slot(request: SlotCreateRequest, slots: SlotStore = Depends(get_slots)) -> SlotResponse:
        result = slots.create(request.model_dump())
        if isinstance(result, StoreError):
            _raise_store_error(result)
        return slot_to_response(result)

    @app.patch("/slots/{slot_id}", response_model=SlotResponse)
    def update_slot(
        slot_id: str,
        request: SlotUpdateRequest,
        slots: SlotStore = Depends(get_slots),
    ) -> SlotResponse:
        result = slots.update(slot_id, request.changes())
        if isinstance(result, StoreError):
            _raise_store_error(result)
        return slot_to_response(result)

    @app.delete("/slots/{slot_id}", response_model=SlotResponse)
    def delete_slot(slot_id: str, slots: SlotStore = Depends(get_slots)) -> SlotResponse:
        removed = slots.delete(slot_id)
        if removed is None:
            _raise_store_error(StoreError.not_found("slot", slot_id))
        return slot_to_response(removed)

    return app


__all__ = ["create_app"]
