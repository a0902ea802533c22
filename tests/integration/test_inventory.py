"""SQLite 저장소를 사용하는 재고 원장 테스트."""
from decimal import Decimal

from sqlalchemy import text

from sweetshop.bootstrap import SweetShopApp
from sweetshop.core import ErrorKind
from sweetshop.domain import MAX_QUANTITY, Sweet
from sweetshop.orm import SessionMaker
from sweetshop.schema import SweetCreate, validate


def add_sweet(shop: SweetShopApp, quantity: int = 5) -> Sweet:
    data = SweetCreate(
        name="Barfi", category="Indian", price=Decimal(10), quantity=quantity
    )
    return shop.catalog.create(data).unwrap()


def stored_quantity(get_session: SessionMaker, sweet_id: str):
    with get_session() as session:
        return session.execute(
            text("SELECT quantity FROM sweets WHERE id = :id"), {"id": sweet_id}
        ).scalar_one()


def test_restock_past_limit_keeps_integer_quantity(
    shop: SweetShopApp, get_session: SessionMaker
):
    sweet = add_sweet(shop)

    result = shop.ledger.restock(sweet.id, 2**63 - 1)
    assert result.kind == ErrorKind.VALIDATION_FAILED

    shop.ledger.restock(sweet.id, MAX_QUANTITY - 5).unwrap()
    result = shop.ledger.restock(sweet.id, 1)
    assert result.kind == ErrorKind.VALIDATION_FAILED

    quantity = stored_quantity(get_session, sweet.id)
    assert quantity == MAX_QUANTITY
    assert isinstance(quantity, int)
    assert shop.catalog.get_by_id(sweet.id).unwrap().quantity == MAX_QUANTITY


def test_purchase_huge_quantity(shop: SweetShopApp):
    sweet = add_sweet(shop)

    result = shop.ledger.purchase(sweet.id, 10**19)

    assert result.kind == ErrorKind.INSUFFICIENT_STOCK
    assert shop.catalog.get_by_id(sweet.id).unwrap().quantity == 5


def test_create_with_huge_quantity_is_rejected(shop: SweetShopApp):
    payload = {"name": "Barfi", "category": "Indian", "price": 10, "quantity": 10**19}

    result = validate(SweetCreate, payload)

    assert result.kind == ErrorKind.VALIDATION_FAILED
    assert result.details[0].startswith("quantity:")
    assert shop.catalog.list().unwrap() == []


def test_sell_out_then_restock(shop: SweetShopApp):
    sweet = add_sweet(shop, quantity=5)

    assert shop.ledger.purchase(sweet.id, 5).unwrap().quantity == 0
    assert shop.ledger.purchase(sweet.id, 1).kind == ErrorKind.INSUFFICIENT_STOCK
    assert shop.ledger.restock(sweet.id, 10).unwrap().quantity == 10
    assert shop.ledger.purchase(sweet.id, 1).unwrap().quantity == 9
