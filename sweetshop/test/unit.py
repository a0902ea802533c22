"""저장소 없이 서비스 계층을 테스트하기 위한 메모리 구현체.

::

    uow = FakeUnitOfWork(sweets=[sweet])
    catalog = CatalogService(lambda **_: uow)
"""
from __future__ import annotations

import threading
from decimal import Decimal
from typing import Any, Iterable, Optional, TypeVar

from sweetshop.core import AbstractRepository, AbstractUnitOfWork, Entity, ReposMap
from sweetshop.domain import MAX_QUANTITY, Sweet, User
from sweetshop.repo import AbstractSweetRepository, AbstractUserRepository

E = TypeVar("E", bound=Entity)


class FakeRepository(AbstractRepository[E]):
    """`id` 를 키로 하는 dict 에 엔티티를 보관합니다."""

    def __init__(self, items: Optional[Iterable[E]] = None):
        super().__init__()
        self.store: dict[Any, E] = {it.id: it for it in items or []}

    def _add(self, item: E) -> None:
        self.store[item.id] = item

    def _get(self, id: Any = "", **kwargs: Any) -> Optional[E]:
        if not kwargs:
            return self.store.get(id)
        for it in self.store.values():
            if all(getattr(it, field) == value for field, value in kwargs.items()):
                return it
        return None

    def delete(self, item: E) -> None:
        self.store.pop(item.id, None)

    def all(self) -> list[E]:
        return list(self.store.values())


class FakeSweetRepository(FakeRepository[Sweet], AbstractSweetRepository):
    """재고 변경을 락으로 보호하는 Fake :class:`Sweet` 레포지터리."""

    def __init__(self, items: Optional[Iterable[Sweet]] = None):
        super().__init__(items)
        self._lock = threading.Lock()

    def _get_by_name(self, name: str) -> Optional[Sweet]:
        return self._get(name=name)

    def all(self) -> list[Sweet]:
        return self.search()

    def search(
        self,
        name: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> list[Sweet]:
        def match(it: Sweet) -> bool:
            return (
                (not name or name.lower() in it.name.lower())
                and (not category or category.lower() in it.category.lower())
                and (min_price is None or it.price >= min_price)
                and (max_price is None or it.price <= max_price)
            )

        found = sorted(filter(match, self.store.values()), key=lambda it: it.name)
        return sorted(found, key=lambda it: it.created_at, reverse=True)

    def decrement_quantity(self, id: str, amount: int, now: Any) -> bool:
        with self._lock:
            sweet = self.store.get(id)
            if sweet is None or sweet.quantity < amount:
                return False
            sweet.quantity -= amount
            sweet.updated_at = now
        return True

    def increment_quantity(self, id: str, amount: int, now: Any) -> bool:
        with self._lock:
            sweet = self.store.get(id)
            if sweet is None or sweet.quantity > MAX_QUANTITY - amount:
                return False
            sweet.quantity += amount
            sweet.updated_at = now
        return True

    def refresh(self, id: str) -> Optional[Sweet]:
        return self.store.get(id)


class FakeUserRepository(FakeRepository[User], AbstractUserRepository):
    def _get_by_email(self, email: str) -> Optional[User]:
        return self._get(email=email)


class FakeUnitOfWork(AbstractUnitOfWork):
    """트랜잭션 없이 변경을 바로 반영하는 UoW.

    `committed` 에는 커밋 호출 여부만 남습니다. 여러 연산이 하나의 인스턴스를
    공유해도 됩니다.
    """

    def __init__(
        self,
        sweets: Optional[Iterable[Sweet]] = None,
        users: Optional[Iterable[User]] = None,
        repos: Optional[ReposMap] = None,
    ) -> None:
        self.repos = repos or {
            Sweet: FakeSweetRepository(sweets),
            User: FakeUserRepository(users),
        }
        self.committed = False

    def _commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        pass
