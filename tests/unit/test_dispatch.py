"""OperationBus 처리 순서(신원 확인 → 권한 확인 → 검증 → 핸들러) 테스트."""
from __future__ import annotations

import pytest

from sweetshop.bootstrap import SweetShopApp, bootstrap
from sweetshop.config import TestConfig
from sweetshop.core import ErrorKind, Ok
from sweetshop.dispatch import (
    OPERATION_HANDLERS,
    HandlerRegistrationError,
    Operation,
    OperationBus,
    on_operation,
)
from sweetshop.domain import Role, User
from sweetshop.test import FakeUnitOfWork
from tests import TickingClock


@pytest.fixture
def app(fake_uow: FakeUnitOfWork, config: TestConfig, clock: TickingClock):
    return bootstrap(config, uow_factory=lambda **_: fake_uow, clock=clock)


def token_for(app: SweetShopApp, role: Role) -> str:
    user = User(f"{role.value.lower()}@example.com", "hash", role)
    return app.gate.issue(user)


@pytest.fixture
def user_token(app: SweetShopApp) -> str:
    return token_for(app, Role.USER)


@pytest.fixture
def admin_token(app: SweetShopApp) -> str:
    return token_for(app, Role.ADMIN)


def test_all_operations_registered():
    assert set(OPERATION_HANDLERS) == {
        "sweets.create",
        "sweets.list",
        "sweets.search",
        "sweets.get",
        "sweets.update",
        "sweets.delete",
        "sweets.purchase",
        "sweets.restock",
        "users.register",
        "users.login",
        "users.profile",
    }


def test_unauthenticated_before_everything_else(app: SweetShopApp):
    result = app.bus.dispatch("sweets.restock", None, {"quantity": -1}, id="nope")
    assert result.kind == ErrorKind.UNAUTHENTICATED


def test_invalid_credential(app: SweetShopApp):
    result = app.bus.dispatch("sweets.list", "garbage")
    assert result.kind == ErrorKind.UNAUTHENTICATED
    assert result.message == "credential invalid"


def test_forbidden_before_validation(app: SweetShopApp, user_token: str):
    result = app.bus.dispatch("sweets.restock", user_token, {"quantity": -1}, id="nope")
    assert result.kind == ErrorKind.FORBIDDEN


def test_validation_before_handler(app: SweetShopApp, admin_token: str):
    result = app.bus.dispatch(
        "sweets.restock", admin_token, {"quantity": -1}, id="nope"
    )
    assert result.kind == ErrorKind.VALIDATION_FAILED


def test_handler_runs_after_checks(app: SweetShopApp, admin_token: str):
    result = app.bus.dispatch("sweets.restock", admin_token, {"quantity": 1}, id="nope")
    assert result.kind == ErrorKind.NOT_FOUND


def test_create_then_purchase(app: SweetShopApp, user_token: str):
    payload = {"name": "Barfi", "category": "Indian", "price": 20, "quantity": 10}
    sweet = app.bus.dispatch("sweets.create", user_token, payload).unwrap()

    bought = app.bus.dispatch(
        "sweets.purchase", user_token, {"quantity": 3}, id=sweet.id
    ).unwrap()

    assert bought.quantity == 7


def test_user_cannot_delete(app: SweetShopApp, user_token: str, admin_token: str):
    payload = {"name": "Barfi", "category": "Indian", "price": 20, "quantity": 10}
    sweet = app.bus.dispatch("sweets.create", user_token, payload).unwrap()

    assert (
        app.bus.dispatch("sweets.delete", user_token, id=sweet.id).kind
        == ErrorKind.FORBIDDEN
    )
    assert app.bus.dispatch("sweets.delete", admin_token, id=sweet.id).ok


def test_public_operations_need_no_credential(app: SweetShopApp):
    payload = {"email": "new@example.com", "password": "secret123"}
    assert app.bus.dispatch("users.register", payload=payload).ok
    assert app.bus.dispatch("users.login", payload=payload).ok


def test_profile_uses_caller_identity(app: SweetShopApp):
    payload = {"email": "new@example.com", "password": "secret123"}
    user = app.bus.dispatch("users.register", payload=payload).unwrap()
    token = app.gate.issue(user)

    profile = app.bus.dispatch("users.profile", token).unwrap()
    assert profile.id == user.id


def test_unknown_operation(app: SweetShopApp):
    with pytest.raises(LookupError):
        app.bus.dispatch("sweets.eat")


def test_duplicate_handler_registration():
    with pytest.raises(HandlerRegistrationError):

        @on_operation("sweets.create")
        def another_create():
            return Ok(None)


def test_operation_without_role_policy():
    with pytest.raises(HandlerRegistrationError):

        @on_operation("sweets.eat")
        def eat():
            return Ok(None)

    assert "sweets.eat" not in OPERATION_HANDLERS


def test_dependency_injection_by_parameter_name(app: SweetShopApp):
    calls = []

    def handler(id: str, catalog, clock_hand=None):
        calls.append((id, catalog, clock_hand))
        return Ok(id)

    bus = OperationBus(
        app.gate,
        dependencies={"catalog": app.catalog},
        handlers={"test.op": Operation("test.op", handler, auth=False)},
    )

    assert bus.dispatch("test.op", id="x1") == Ok("x1")
    assert calls == [("x1", app.catalog, None)]


def test_missing_dependency(app: SweetShopApp):
    def handler(mystery):
        return Ok(mystery)

    bus = OperationBus(
        app.gate, handlers={"test.op": Operation("test.op", handler, auth=False)}
    )
    with pytest.raises(TypeError, match="mystery"):
        bus.dispatch("test.op")
