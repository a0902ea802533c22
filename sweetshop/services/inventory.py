"""재고 원장(Inventory Ledger) 서비스.

구매(purchase)와 재입고(restock)로 :attr:`Sweet.quantity` 를 조정합니다.

동시성 보장:
    같은 품목에 대한 동시 구매는 저장소에서 직렬화됩니다. 재고 확인과 차감은
    하나의 조건부 UPDATE 문(``... WHERE id = :id AND quantity >= :n``)으로
    실행되고 영향받은 행 수로 성공 여부를 판단하므로, 어떤 순서로 실행되더라도
    관찰 가능한 모든 시점에서 ``0 <= quantity <= MAX_QUANTITY`` 가 유지됩니다.
    재입고도 같은 방식으로 상한을 넘지 않을 때만 증가시킵니다. 애플리케이션에서
    수량을 읽고 비교한 뒤 새 값을 쓰는 방식은 사용하지 않습니다. 서로 다른
    품목은 완전히 병렬로 조정될 수 있습니다.
"""
from __future__ import annotations

from typing import Any

from sweetshop.core import (
    InsufficientStockError,
    NotFoundError,
    Result,
    ValidationFailedError,
    returns_result,
)
from sweetshop.domain import MAX_QUANTITY, Clock, Sweet, utcnow
from sweetshop.logging import get_logger
from sweetshop.services.catalog import SWEET_NOT_FOUND
from sweetshop.uow import UnitOfWorkFactory

logger = get_logger("sweetshop.services.inventory")

INSUFFICIENT_STOCK = "Insufficient quantity available"
STOCK_LIMIT_EXCEEDED = f"Stock quantity cannot exceed {MAX_QUANTITY}"


def check_positive_quantity(quantity: Any, action: str) -> int:
    """`quantity` 가 양의 정수인지 확인합니다. (검증 계층과 별개인 도메인 불변식)"""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationFailedError(
            f"{action} quantity must be greater than zero",
            [f"quantity: {action} quantity must be a positive integer"],
        )
    return quantity


def stock_limit_error() -> ValidationFailedError:
    return ValidationFailedError(
        STOCK_LIMIT_EXCEEDED, [f"quantity: {STOCK_LIMIT_EXCEEDED}"]
    )


class InventoryLedger:
    """:class:`Sweet` 재고 수량을 원자적으로 조정합니다."""

    def __init__(self, uow_factory: UnitOfWorkFactory, clock: Clock = utcnow):
        self.uow_factory = uow_factory
        self.clock = clock

    @returns_result
    def purchase(self, id: str, quantity: int) -> Result[Sweet]:
        """재고를 `quantity` 만큼 차감하고 변경된 :class:`Sweet` 을 리턴합니다.

        Failures:
            - ``ValidationFailed``: `quantity` 가 양의 정수가 아닐 때
            - ``NotFound``: 품목이 없을 때
            - ``InsufficientStock``: 커밋 시점의 재고가 `quantity` 보다 적을 때
        """
        check_positive_quantity(quantity, "Purchase")
        with self.uow_factory() as uow:
            repo = uow[Sweet]
            # 상한보다 큰 수량은 어떤 재고로도 채울 수 없습니다.
            if quantity > MAX_QUANTITY or not repo.decrement_quantity(
                id, quantity, self.clock()
            ):
                # 조건부 UPDATE 가 실패한 이유를 구분합니다.
                if repo.refresh(id) is None:
                    raise NotFoundError(SWEET_NOT_FOUND)
                logger.info("purchase rejected: %s, requested=%d", id, quantity)
                raise InsufficientStockError(INSUFFICIENT_STOCK)

            sweet = repo.refresh(id)
            uow.commit()

        logger.info("purchased: %s -%d -> %d", id, quantity, sweet.quantity)
        return sweet

    @returns_result
    def restock(self, id: str, quantity: int) -> Result[Sweet]:
        """재고를 `quantity` 만큼 늘리고 변경된 :class:`Sweet` 을 리턴합니다.

        관리자(``ADMIN``) 역할 검사는 이 메소드를 호출하기 전에 끝나야 합니다.

        Failures:
            - ``ValidationFailed``: `quantity` 가 양의 정수가 아니거나, 재입고 후
              수량이 ``MAX_QUANTITY`` 를 넘을 때
            - ``NotFound``: 품목이 없을 때
        """
        check_positive_quantity(quantity, "Restock")
        if quantity > MAX_QUANTITY:
            raise stock_limit_error()
        with self.uow_factory() as uow:
            repo = uow[Sweet]
            if not repo.increment_quantity(id, quantity, self.clock()):
                if repo.refresh(id) is None:
                    raise NotFoundError(SWEET_NOT_FOUND)
                logger.info("restock rejected: %s, requested=%d", id, quantity)
                raise stock_limit_error()

            sweet = repo.refresh(id)
            uow.commit()

        logger.info("restocked: %s +%d -> %d", id, quantity, sweet.quantity)
        return sweet
