"""Sweet, User 레포지터리.

인터페이스와 SqlAlchemy 구현을 함께 둡니다. 재고 수량 변경은 조건부 UPDATE 한 번으로
처리합니다.
"""
from __future__ import annotations

import abc
from decimal import Decimal
from typing import Any, List, Optional, Type, TypeVar

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from sweetshop.core import AbstractRepository, Entity
from sweetshop.domain import MAX_QUANTITY, Sweet, User
from sweetshop.orm import sweets, users

E = TypeVar("E", bound=Entity)


class AbstractSweetRepository(AbstractRepository[Sweet]):
    """:class:`Sweet` 레포지터리 인터페이스.

    재고 수량은 반드시 :meth:`decrement_quantity` / :meth:`increment_quantity` 로만
    변경합니다. 두 메소드는 저장소 수준에서 원자적으로 동작해야 합니다.
    """

    entity_class = Sweet

    @abc.abstractmethod
    def _get_by_name(self, name: str) -> Optional[Sweet]:
        raise NotImplementedError

    @abc.abstractmethod
    def search(
        self,
        name: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[Sweet]:
        """모든 조건을 만족하는(AND) 품목을 최신순으로 조회합니다.

        `name` 과 `category` 는 대소문자를 구분하지 않는 부분 문자열 일치,
        가격 조건은 경계값을 포함합니다.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def decrement_quantity(self, id: str, amount: int, now: Any) -> bool:
        """재고가 `amount` 이상일 때만 `amount` 만큼 차감합니다.

        확인과 차감은 하나의 원자적 연산입니다. 차감되었으면 참을 리턴합니다.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def increment_quantity(self, id: str, amount: int, now: Any) -> bool:
        """증가 후 수량이 ``MAX_QUANTITY`` 이하일 때만 `amount` 만큼 증가시킵니다.

        확인과 증가는 하나의 원자적 연산입니다. 증가되었으면 참을 리턴합니다.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def refresh(self, id: str) -> Optional[Sweet]:
        """저장소의 최신 상태로 :class:`Sweet` 을 다시 읽습니다."""
        raise NotImplementedError


class AbstractUserRepository(AbstractRepository[User]):
    """:class:`User` 레포지터리 인터페이스."""

    entity_class = User

    @abc.abstractmethod
    def _get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError


class SqlAlchemyRepository(AbstractRepository[E]):
    """세션 하나에 묶인 범용 레포지터리."""

    def __init__(self, entity_class: Type[E], session: Session):
        super().__init__()
        self.entity_class = entity_class
        self.session = session

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}[{self.entity_class.__name__}]"

    def _add(self, item: E) -> None:
        self.session.add(item)

    def _get(self, id: Any = "", **kwargs: Any) -> Optional[E]:
        if id:
            return self.session.get(self.entity_class, id)

        criteria = {k: v for k, v in kwargs.items() if v is not None}
        stmt = select(self.entity_class).filter_by(**criteria).limit(1)
        return self.session.scalars(stmt).first()

    def delete(self, item: E) -> None:
        self.session.delete(item)

    def all(self) -> List[E]:
        return list(self.session.scalars(select(self.entity_class)))


class SqlAlchemySweetRepository(SqlAlchemyRepository[Sweet], AbstractSweetRepository):
    def __init__(self, session: Session):
        super().__init__(Sweet, session)

    def _get_by_name(self, name: str) -> Optional[Sweet]:
        return self.session.scalars(select(Sweet).where(sweets.c.name == name)).first()

    def all(self) -> List[Sweet]:
        return self.search()

    def search(
        self,
        name: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[Sweet]:
        stmt = select(Sweet)
        if name:
            stmt = stmt.where(sweets.c.name.icontains(name, autoescape=True))
        if category:
            stmt = stmt.where(sweets.c.category.icontains(category, autoescape=True))
        if min_price is not None:
            stmt = stmt.where(sweets.c.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(sweets.c.price <= max_price)
        stmt = stmt.order_by(sweets.c.created_at.desc(), sweets.c.name)
        return list(self.session.scalars(stmt))

    def decrement_quantity(self, id: str, amount: int, now: Any) -> bool:
        # UPDATE ... SET quantity = quantity - :n WHERE id = :id AND quantity >= :n
        result = self.session.execute(
            update(sweets)
            .where(sweets.c.id == id, sweets.c.quantity >= amount)
            .values(quantity=sweets.c.quantity - amount, updated_at=now)
        )
        return result.rowcount == 1

    def increment_quantity(self, id: str, amount: int, now: Any) -> bool:
        result = self.session.execute(
            update(sweets)
            .where(sweets.c.id == id, sweets.c.quantity <= MAX_QUANTITY - amount)
            .values(quantity=sweets.c.quantity + amount, updated_at=now)
        )
        return result.rowcount == 1

    def refresh(self, id: str) -> Optional[Sweet]:
        return self.session.scalars(
            select(Sweet)
            .where(sweets.c.id == id)
            .execution_options(populate_existing=True)
        ).first()


class SqlAlchemyUserRepository(SqlAlchemyRepository[User], AbstractUserRepository):
    def __init__(self, session: Session):
        super().__init__(User, session)

    def _get_by_email(self, email: str) -> Optional[User]:
        return self.session.scalars(select(User).where(users.c.email == email)).first()
