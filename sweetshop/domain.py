"""도메인 모델."""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional

Clock = Callable[[], datetime]
"""현재 시각을 리턴하는 함수 타입. 테스트에서 시각을 고정할 때 교체합니다."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """임의의 엔티티 id 를 생성합니다."""
    return str(uuid.uuid4())


MAX_QUANTITY = 2**31 - 1
"""재고 수량의 상한. 모든 저장소의 ``INTEGER`` 컬럼에 담길 수 있는 값입니다."""


class Role(str, Enum):
    """사용자 역할."""

    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Identity:
    """검증된 자격 증명에서 얻은 호출자 정보."""

    id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Sweet:
    """가격과 재고 수량을 가진 판매 품목입니다."""

    def __init__(
        self,
        name: str,
        category: str,
        price: Decimal,
        quantity: int,
        description: Optional[str] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):  # pylint: disable=redefined-builtin
        self.id = id or new_id()  # pylint: disable=invalid-name
        self.name = name
        self.category = category
        self.price = price if isinstance(price, Decimal) else Decimal(str(price))
        self.quantity = quantity
        """현재 판매 가능한 재고 수량. 항상 0 이상입니다."""
        self.description = description
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or self.created_at

    def apply(self, changes: dict[str, Any], now: datetime) -> None:
        """`changes` 에 주어진 필드만 변경하고 `updated_at` 을 갱신합니다."""
        for key, value in changes.items():
            setattr(self, key, value)
        self.updated_at = now

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": float(self.price),
            "quantity": self.quantity,
            "description": self.description,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sweet):
            return False
        return other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"<Sweet {self.name!r} qty={self.quantity}>"


class User:
    """서비스 사용자. `password_hash` 는 어떤 조회 결과에도 포함되지 않습니다."""

    def __init__(
        self,
        email: str,
        password_hash: str,
        role: Role = Role.USER,
        name: Optional[str] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ):  # pylint: disable=redefined-builtin
        self.id = id or new_id()  # pylint: disable=invalid-name
        self.email = email
        self.password_hash = password_hash
        self.role = role
        self.name = name
        self.created_at = created_at or utcnow()

    @property
    def identity(self) -> Identity:
        return Identity(self.id, self.email, Role(self.role))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": Role(self.role).value,
            "createdAt": self.created_at.isoformat(),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return False
        return other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"<User {self.email!r} {Role(self.role).value}>"
