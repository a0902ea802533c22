"""Sweet 카탈로그 서비스.

품목의 생성, 조회, 검색, 변경, 삭제를 담당하고 이름의 유일성을 보장합니다.
존재 확인, 충돌 확인, 최종 쓰기는 모두 하나의 UoW(트랜잭션) 안에서 이루어집니다.
"""
from __future__ import annotations

from typing import List

from sweetshop.core import ConflictError, NotFoundError, Result, returns_result
from sweetshop.domain import Clock, Sweet, utcnow
from sweetshop.logging import get_logger
from sweetshop.schema import SearchCriteria, SweetCreate, SweetUpdate
from sweetshop.uow import UnitOfWorkFactory

logger = get_logger("sweetshop.services.catalog")

SWEET_EXISTS = "Sweet with this name already exists"
SWEET_NOT_FOUND = "Sweet not found"


class CatalogService:
    """:class:`Sweet` 카탈로그에 대한 CRUD 와 검색을 제공합니다."""

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock = utcnow):
        self.uow_factory = uow_factory
        self.clock = clock

    @returns_result
    def create(self, data: SweetCreate) -> Result[Sweet]:
        """새 품목을 저장합니다. 같은 이름이 있으면 ``Conflict`` 입니다."""
        with self.uow_factory() as uow:
            repo = uow[Sweet]
            if repo.get(by_name=data.name):
                raise ConflictError(SWEET_EXISTS)

            now = self.clock()
            sweet = Sweet(
                name=data.name,
                category=data.category,
                price=data.price,
                quantity=data.quantity,
                description=data.description,
                created_at=now,
                updated_at=now,
            )
            repo.add(sweet)
            uow.commit()

        logger.info("sweet created: %s (%r)", sweet.id, sweet.name)
        return sweet

    @returns_result
    def list(self) -> Result[List[Sweet]]:
        """모든 품목을 최신순(`created_at` 내림차순)으로 리턴합니다."""
        with self.uow_factory(read_only=True) as uow:
            return uow[Sweet].all()

    @returns_result
    def search(self, criteria: SearchCriteria) -> Result[List[Sweet]]:
        """모든 조건을 동시에 만족하는 품목을 최신순으로 리턴합니다.

        - `name`, `category`: 대소문자 구분 없는 부분 문자열 일치
        - `min_price`, `max_price`: 경계 포함 가격 범위

        조건이 비어 있으면 :meth:`list` 와 같은 결과입니다.
        """
        with self.uow_factory(read_only=True) as uow:
            return uow[Sweet].search(
                name=criteria.name or None,
                category=criteria.category or None,
                min_price=criteria.min_price,
                max_price=criteria.max_price,
            )

    @returns_result
    def get_by_id(self, id: str) -> Result[Sweet]:
        with self.uow_factory(read_only=True) as uow:
            sweet = uow[Sweet].get(id)
            if sweet is None:
                raise NotFoundError(SWEET_NOT_FOUND)
            return sweet

    @returns_result
    def update(self, id: str, data: SweetUpdate) -> Result[Sweet]:
        """주어진 필드만 변경하고 `updated_at` 을 갱신합니다.

        이름을 바꾸는 경우, 다른 품목이 이미 그 이름을 쓰고 있으면 ``Conflict``
        입니다.
        """
        changes = data.changes()
        with self.uow_factory() as uow:
            repo = uow[Sweet]
            sweet = repo.get(id)
            if sweet is None:
                raise NotFoundError(SWEET_NOT_FOUND)

            new_name = changes.get("name")
            if new_name is not None and new_name != sweet.name:
                other = repo.get(by_name=new_name)
                if other is not None and other.id != sweet.id:
                    raise ConflictError(SWEET_EXISTS)

            sweet.apply(changes, self.clock())
            uow.commit()

        logger.info("sweet updated: %s %r", id, sorted(changes))
        return sweet

    @returns_result
    def delete(self, id: str) -> Result[Sweet]:
        """품목을 삭제하고 삭제된 레코드를 리턴합니다."""
        with self.uow_factory() as uow:
            repo = uow[Sweet]
            sweet = repo.get(id)
            if sweet is None:
                raise NotFoundError(SWEET_NOT_FOUND)
            repo.delete(sweet)
            uow.commit()

        logger.info("sweet deleted: %s (%r)", id, sweet.name)
        return sweet
