"""SqlAlchemy 세션 기반 UnitOfWork.

저장소에서 발생한 에러는 이 곳에서 :mod:`sweetshop.core.errors` 의 에러로
변환됩니다. 저장소 엔진의 에러 메세지는 로그에만 남기고 호출자에게 노출하지
않습니다.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from sqlalchemy import exc as sa_exc

from sweetshop.core import (
    AbstractUnitOfWork,
    ConflictError,
    ReposMap,
    TransientError,
)
from sweetshop.domain import Sweet, User
from sweetshop.logging import get_logger
from sweetshop.orm import READ_ONLY, Session, SessionMaker
from sweetshop.repo import SqlAlchemySweetRepository, SqlAlchemyUserRepository

UnitOfWorkFactory = Callable[..., AbstractUnitOfWork]
"""연산마다 새 UoW를 만드는 팩토리 타입. 서비스 생성 시 주입됩니다.

조회만 하는 연산은 ``uow_factory(read_only=True)`` 로 호출합니다.
"""

logger = get_logger("sweetshop.uow")

TRANSIENT_ERRORS = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.TimeoutError,
    sa_exc.DisconnectionError,
)
"""일시적인 저장소 장애로 간주하는 SqlAlchemy 에러들."""


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """``SqlAlchemy`` ORM을 이용한 UnitOfWork 패턴 구현입니다.

    ``with`` 블록마다 새 세션(트랜잭션)을 할당하므로 하나의 인스턴스를 여러
    스레드가 공유하면 안 됩니다. 요청마다 :class:`UnitOfWorkFactory` 로 새로
    만들어 사용하세요.
    """

    def __init__(self, get_session: SessionMaker, read_only: bool = False) -> None:
        super().__init__()
        self.get_session = get_session
        self.read_only = read_only
        self.repos: ReposMap = {}
        self.committed = False
        self.session: Optional[Session] = None

    def __repr__(self) -> str:
        return f"<SqlAlchemyUnitOfWork session={self.session!r}>"

    def __enter__(self) -> AbstractUnitOfWork:
        """``with`` 블록에 진입했을 때 세션을 할당하고 레포지터리를 초기화합니다."""
        super().__enter__()
        self.committed = False
        self.session = self.get_session()
        self.repos = {
            Sweet: SqlAlchemySweetRepository(self.session),
            User: SqlAlchemyUserRepository(self.session),
        }
        if self.read_only:
            try:
                # 트랜잭션을 시작하기 전에 연결에 표시해 둡니다.
                self.session.connection(execution_options={READ_ONLY: True})
            except sa_exc.SQLAlchemyError as e:
                self.__exit__(type(e), e, e.__traceback__)
                raise
        return self

    def __exit__(
        self, typ: Any = None, value: Any = None, traceback: Any = None
    ) -> None:
        """``with`` 블록을 빠져나갈 때 세션을 close합니다.

        예외가 발생했다면 먼저 롤백합니다. 커밋되지 않은 트랜잭션은 close 할 때
        연결과 함께 롤백됩니다. 로드된 객체는 만료되지 않은 채 분리(detach)되므로
        블록 밖에서도 읽을 수 있습니다.

        블록 안에서 발생한 SqlAlchemy 에러는 도메인 에러로 변환해 다시 던집니다.
        """
        try:
            if value is not None:
                self.rollback()
        except sa_exc.SQLAlchemyError as e:
            logger.warning("rollback failed: %s", e)
        finally:
            if self.session:
                self.session.close()
                self.session = None

        if isinstance(value, sa_exc.IntegrityError):
            logger.warning("integrity error: %s", value.orig)
            raise ConflictError(
                "A record with the same unique value already exists"
            ) from value
        if isinstance(value, TRANSIENT_ERRORS):
            logger.warning("storage unavailable: %s", value)
            raise TransientError("Storage is temporarily unavailable") from value

    def _commit(self) -> None:
        if self.session is not None:
            self.session.commit()
            self.committed = True

    def rollback(self) -> None:
        if self.session is not None:
            self.session.rollback()


def sqlalchemy_uow_factory(get_session: SessionMaker) -> UnitOfWorkFactory:
    """`get_session` 을 사용하는 :class:`SqlAlchemyUnitOfWork` 팩토리를 만듭니다."""

    def factory(read_only: bool = False) -> AbstractUnitOfWork:
        return SqlAlchemyUnitOfWork(get_session, read_only)

    return factory
