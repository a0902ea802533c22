"""ORM 어댑터 모듈.

도메인 클래스(:class:`~sweetshop.domain.Sweet`, :class:`~sweetshop.domain.User`)는
SqlAlchemy 를 모릅니다. 여기서 테이블을 정의하고 명령형(imperative) 매핑으로
연결합니다.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional, Type, cast

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    TypeDecorator,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import registry, sessionmaker
from sqlalchemy.orm.session import Session
from sqlalchemy.pool import Pool

from sweetshop.config import SweetShop
from sweetshop.domain import MAX_QUANTITY, Role, Sweet, User

SessionMaker = Callable[[], Session]
"""Session 팩토리 타입."""

READ_ONLY = "sweetshop_read_only"
"""조회 전용 트랜잭션을 표시하는 연결 실행 옵션 키."""


class UtcDateTime(TypeDecorator):
    """UTC 시각 컬럼.

    시간대 정보 없이 UTC 로 저장하고, 읽을 때는 항상 UTC 시간대가 지정된
    :class:`datetime` 을 리턴합니다. (SQLite 는 시간대를 보존하지 않습니다)
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Any) -> Any:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: Any, dialect: Any) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


metadata = MetaData()

sweets = Table(
    "sweets",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False, unique=True),
    Column("category", String(255), nullable=False),
    Column("price", Numeric(10, 2), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("description", Text, nullable=True),
    Column("created_at", UtcDateTime(), nullable=False),
    Column("updated_at", UtcDateTime(), nullable=False),
    CheckConstraint("quantity >= 0", name="ck_sweets_quantity_non_negative"),
    CheckConstraint(
        f"quantity <= {MAX_QUANTITY}", name="ck_sweets_quantity_within_limit"
    ),
    CheckConstraint("price > 0", name="ck_sweets_price_positive"),
)

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("name", String(255), nullable=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", Enum(Role, native_enum=False, length=16), nullable=False),
    Column("created_at", UtcDateTime(), nullable=False),
)

mapper_registry = registry(metadata=metadata)


def start_mappers() -> MetaData:
    """도메인 객체들을 SqlAlchemy ORM 매퍼에 등록합니다.

    여러 번 호출해도 한 번만 매핑합니다.
    """
    if not mapper_registry.mappers:
        mapper_registry.map_imperatively(Sweet, sweets)
        mapper_registry.map_imperatively(User, users)
    return metadata


def init_engine(
    meta: MetaData,
    url: str,
    connect_args: Optional[dict[str, Any]] = None,
    poolclass: Optional[Type[Pool]] = None,
    pool_timeout: Optional[float] = None,
    show_log: bool = False,
    drop_all: bool = False,
) -> Engine:
    """ORM Engine을 초기화 하고 테이블을 생성합니다."""
    kwargs: dict[str, Any] = {}
    if poolclass:
        kwargs["poolclass"] = poolclass
    elif pool_timeout is not None:
        kwargs["pool_timeout"] = pool_timeout

    engine = create_engine(
        url,
        connect_args=connect_args or {},
        echo=show_log,
        pool_pre_ping=True,
        **kwargs,
    )

    in_memory = engine.url.database in (None, "", ":memory:")
    if engine.dialect.name == "sqlite" and not in_memory:
        use_immediate_transactions(engine)

    if drop_all:
        meta.drop_all(engine)

    meta.create_all(engine)

    return engine


def use_immediate_transactions(engine: Engine) -> None:
    """SQLite 쓰기 트랜잭션을 ``BEGIN IMMEDIATE`` 로 시작하도록 설정합니다.

    쓰기 잠금을 트랜잭션 시작 시점에 잡으므로, 같은 품목을 동시에 갱신하는
    트랜잭션들은 잠금 교착으로 실패하지 않고 busy timeout 동안 차례를 기다립니다.
    :data:`READ_ONLY` 옵션이 붙은 연결은 일반 ``BEGIN`` 으로 시작해 쓰기 잠금을
    잡지 않습니다.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        # pysqlite 의 암묵적인 BEGIN 을 끄고 직접 트랜잭션을 시작합니다.
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Any) -> None:
        if conn.get_execution_options().get(READ_ONLY):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")


def init_db(
    config: SweetShop,
    drop_all: bool = False,
    show_log: bool = False,
) -> SessionMaker:
    """`config` 로 DB 엔진을 초기화하고 Session 팩토리를 리턴합니다."""
    engine = init_engine(
        start_mappers(),
        config.get_db_url(),
        connect_args=config.get_db_connect_args(),
        poolclass=config.get_db_poolclass(),
        pool_timeout=config.get_db_timeout(),
        drop_all=drop_all,
        show_log=show_log,
    )
    return cast(SessionMaker, sessionmaker(engine, expire_on_commit=False))
