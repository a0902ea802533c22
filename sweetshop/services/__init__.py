"""애플리케이션 서비스 계층.

각 서비스는 :data:`~sweetshop.uow.UnitOfWorkFactory` 를 주입받아 연산마다 새
UoW(트랜잭션)를 사용하므로, 하나의 서비스 인스턴스를 여러 스레드가 공유해도
안전합니다.
"""
from sweetshop.services.catalog import CatalogService
from sweetshop.services.inventory import InventoryLedger
from sweetshop.services.users import UserService

__all__ = ["CatalogService", "InventoryLedger", "UserService"]
