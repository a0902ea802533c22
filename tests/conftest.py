# pylint: disable=redefined-outer-name, protected-access
"""pytest 에서 사용될 전역 Fixture들을 정의합니다."""
from __future__ import annotations

from typing import Callable, Generator

import pytest
from sqlalchemy.orm import Session

from sweetshop.bootstrap import SweetShopApp, bootstrap
from sweetshop.config import TestConfig
from sweetshop.domain import Role, User
from sweetshop.orm import SessionMaker, init_db
from sweetshop.security import IdentityGate
from sweetshop.test import FakeUnitOfWork
from tests import TickingClock, random_email

# types

TokenFactory = Callable[[Role], str]
""":func:`make_token` 픽스처의 타입."""


@pytest.fixture
def config() -> TestConfig:
    return TestConfig()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def get_session(config: TestConfig) -> SessionMaker:
    """:class:`.Session` 팩토리 메소드(:class:`~sweetshop.orm.SessionMaker`)
    를 리턴하는 픽스쳐 입니다.

    호출시마다 새로운 메모리 SQLite DB를 만듭니다.
    """
    return init_db(config, drop_all=True)


@pytest.fixture
def session(get_session: SessionMaker) -> Generator[Session, None, None]:
    """테스트에 사용될 새로운 :class:`.Session` 픽스처를 리턴합니다."""
    session = get_session()
    yield session
    session.close()


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    return FakeUnitOfWork()


@pytest.fixture
def gate(config: TestConfig) -> IdentityGate:
    return IdentityGate.from_config(config)


@pytest.fixture
def shop(
    config: TestConfig, get_session: SessionMaker, clock: TickingClock
) -> SweetShopApp:
    """메모리 SQLite DB를 사용하는 앱 픽스처."""
    return bootstrap(config, get_session=get_session, clock=clock)


@pytest.fixture
def make_token(shop: SweetShopApp) -> TokenFactory:
    """주어진 역할의 사용자를 만들고 그 사용자의 베어러 토큰을 리턴합니다."""

    def _make_token(role: Role = Role.USER) -> str:
        user: User = shop.users.create_user(
            random_email(role.value.lower()), "secret123", None, role
        ).unwrap()
        return shop.gate.issue(user)

    return _make_token


@pytest.fixture
def user_token(make_token: TokenFactory) -> str:
    return make_token(Role.USER)


@pytest.fixture
def admin_token(make_token: TokenFactory) -> str:
    return make_token(Role.ADMIN)
