"""애플리케이션 구성(Composition root).

설정 객체로부터 DB 세션 팩토리, UoW 팩토리, 서비스, :class:`IdentityGate`,
:class:`OperationBus` 를 만들어 :class:`SweetShopApp` 으로 묶습니다. 전역
상태를 두지 않으므로 테스트마다 독립된 앱을 만들 수 있습니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import sweetshop.handlers  # noqa: F401  (연산 핸들러 등록)
from sweetshop.config import SweetShop, get_config
from sweetshop.dispatch import OperationBus
from sweetshop.domain import Clock, utcnow
from sweetshop.orm import SessionMaker, init_db
from sweetshop.security import IdentityGate
from sweetshop.services import CatalogService, InventoryLedger, UserService
from sweetshop.uow import UnitOfWorkFactory, sqlalchemy_uow_factory


@dataclass
class SweetShopApp:
    config: SweetShop
    uow_factory: UnitOfWorkFactory
    gate: IdentityGate
    catalog: CatalogService
    ledger: InventoryLedger
    users: UserService
    bus: OperationBus


def bootstrap(
    config: Optional[SweetShop] = None,
    uow_factory: Optional[UnitOfWorkFactory] = None,
    get_session: Optional[SessionMaker] = None,
    clock: Clock = utcnow,
    drop_all: bool = False,
) -> SweetShopApp:
    """의존성을 조립해 :class:`SweetShopApp` 을 리턴합니다.

    Args:
        config: 설정. 생략하면 :func:`~sweetshop.config.get_config`.
        uow_factory: 직접 지정하면 DB를 초기화하지 않습니다. (예: FakeUnitOfWork)
        get_session: 이미 만들어진 세션 팩토리를 재사용할 때 지정합니다.
        clock: 현재 시각 함수.
        drop_all: 참이면 테이블을 지우고 다시 만듭니다.
    """
    config = config or get_config()

    if uow_factory is None:
        if get_session is None:
            get_session = init_db(config, drop_all=drop_all)
        uow_factory = sqlalchemy_uow_factory(get_session)

    gate = IdentityGate.from_config(config)
    catalog = CatalogService(uow_factory, clock)
    ledger = InventoryLedger(uow_factory, clock)
    users = UserService(uow_factory, gate, clock)
    bus = OperationBus(
        gate,
        dependencies={"catalog": catalog, "ledger": ledger, "users": users},
    )
    return SweetShopApp(config, uow_factory, gate, catalog, ledger, users, bus)
