"""코어 연산 핸들러.

이 모듈을 import 하면 모든 연산이 :data:`~sweetshop.dispatch.OPERATION_HANDLERS`
에 등록됩니다. 역할 검사와 페이로드 검증은 :class:`~sweetshop.dispatch.OperationBus`
가 먼저 처리하므로, 핸들러는 검증된 값만 받습니다.
"""
from __future__ import annotations

from typing import Any

from sweetshop.core import Result
from sweetshop.dispatch import on_operation
from sweetshop.domain import Identity, Sweet, User
from sweetshop.schema import (
    Login,
    SearchCriteria,
    StockChange,
    SweetCreate,
    SweetUpdate,
    UserCreate,
)
from sweetshop.services import CatalogService, InventoryLedger, UserService


@on_operation("sweets.create", schema=SweetCreate)
def create_sweet(data: SweetCreate, catalog: CatalogService) -> Result[Sweet]:
    return catalog.create(data)


@on_operation("sweets.list")
def list_sweets(catalog: CatalogService) -> Result[list[Sweet]]:
    return catalog.list()


@on_operation("sweets.search", schema=SearchCriteria)
def search_sweets(data: SearchCriteria, catalog: CatalogService) -> Result[list[Sweet]]:
    return catalog.search(data)


@on_operation("sweets.get")
def get_sweet(id: str, catalog: CatalogService) -> Result[Sweet]:
    return catalog.get_by_id(id)


@on_operation("sweets.update", schema=SweetUpdate)
def update_sweet(id: str, data: SweetUpdate, catalog: CatalogService) -> Result[Sweet]:
    return catalog.update(id, data)


@on_operation("sweets.delete")
def delete_sweet(id: str, catalog: CatalogService) -> Result[Sweet]:
    return catalog.delete(id)


@on_operation("sweets.purchase", schema=StockChange)
def purchase_sweet(
    id: str, data: StockChange, ledger: InventoryLedger
) -> Result[Sweet]:
    return ledger.purchase(id, data.quantity)


@on_operation("sweets.restock", schema=StockChange)
def restock_sweet(id: str, data: StockChange, ledger: InventoryLedger) -> Result[Sweet]:
    return ledger.restock(id, data.quantity)


@on_operation("users.register", schema=UserCreate, auth=False)
def register_user(data: UserCreate, users: UserService) -> Result[User]:
    return users.register(data)


@on_operation("users.login", schema=Login, auth=False)
def login_user(data: Login, users: UserService) -> Result[dict[str, Any]]:
    return users.login(data)


@on_operation("users.profile")
def get_profile(identity: Identity, users: UserService) -> Result[User]:
    return users.get_profile(identity.id)

