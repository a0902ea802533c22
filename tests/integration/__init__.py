from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from tests import random_suffix


def insert_sweet(
    session: Session,
    name: str,
    category: str = "Indian",
    price: float = 10.0,
    quantity: int = 10,
    created_at: Optional[datetime] = None,
) -> str:
    """SQL 로 직접 `sweets` 레코드를 추가하고 id 를 리턴합니다."""
    sweet_id = f"sweet-{random_suffix()}"
    now = created_at or datetime.now(timezone.utc)
    session.execute(
        text(
            "INSERT INTO sweets (id, name, category, price, quantity, created_at, updated_at)"
            " VALUES (:id, :name, :category, :price, :quantity, :now, :now)"
        ),
        dict(
            id=sweet_id,
            name=name,
            category=category,
            price=price,
            quantity=quantity,
            now=now.strftime("%Y-%m-%d %H:%M:%S.%f"),
        ),
    )
    return sweet_id
