"""저장소 추상화: Repository 와 UnitOfWork 인터페이스."""
from __future__ import annotations

import abc
from contextlib import AbstractContextManager
from typing import Any, Generic, List, Optional, Protocol, Type, TypeVar


class Entity(Protocol):
    """레포지터리에 저장할 수 있는 객체."""

    id: Any  # 기본 키


E = TypeVar("E", bound=Entity)


class AbstractRepository(Generic[E], abc.ABC):
    """하나의 엔티티 타입에 대한 컬렉션 인터페이스.

    조회하거나 추가한 객체는 `seen` 에 기록됩니다.
    """

    entity_class: Type[E]

    def __init__(self):
        self.seen = set[E]()

    def add(self, item: E) -> None:
        self._add(item)
        self.seen.add(item)

    def get(self, id: Any = "", **kwargs: Any) -> Optional[E]:
        """`id` 로 엔티티를 찾습니다. 없으면 ``None`` 을 리턴합니다.

        ``get(by_name="Ladoo")`` 처럼 ``by_<필드>`` 인자를 주면 하위 클래스에
        정의된 ``_get_by_<필드>`` 조회 메소드를 사용합니다. 그 밖의 키워드 인자는
        필드 값이 모두 같은 엔티티를 찾는 조건으로 :meth:`_get` 에 넘깁니다.
        """
        finders = [k for k in kwargs if k.startswith("by_")]
        if finders:
            item = getattr(self, f"_get_{finders[0]}")(kwargs[finders[0]])
        elif kwargs:
            item = self._get(**kwargs)
        else:
            item = self._get(id)

        if item is not None:
            self.seen.add(item)
        return item

    @abc.abstractmethod
    def _add(self, item: E) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, id: Any = "", **kwargs: Any) -> Optional[E]:
        raise NotImplementedError

    @abc.abstractmethod
    def all(self) -> List[E]:
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, item: E) -> None:
        raise NotImplementedError


ReposMap = dict[Type[Any], AbstractRepository]
"""엔티티 클래스별 레포지터리."""


class AbstractUnitOfWork(AbstractContextManager["AbstractUnitOfWork"]):
    """영구 저장소에 접근하는 유일한 통로.

    ``with`` 블록 하나가 트랜잭션 하나입니다. 블록 안에서 :meth:`commit` 하지
    않은 변경은 반영되지 않습니다. 레포지터리는 ``uow[Sweet]`` 처럼 엔티티
    클래스로 꺼냅니다.
    """

    repos: ReposMap

    def __enter__(self) -> AbstractUnitOfWork:
        return self

    def __exit__(self, *args: Any) -> None:
        # 커밋된 뒤라면 아무 일도 일어나지 않습니다.
        self.rollback()

    def __getitem__(self, entity_class: Type[Any]) -> Any:
        try:
            return self.repos[entity_class]
        except KeyError:
            raise LookupError(f"no repository for {entity_class!r}") from None

    def commit(self) -> None:
        self._commit()

    @abc.abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError
