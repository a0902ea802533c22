"""결과(Result) 타입.

코어 연산은 컴포넌트 경계를 넘어 예외를 던지지 않고 :class:`Ok` 또는
:class:`Failure` 를 리턴합니다. 호출자는 ``result.ok`` 로 분기합니다. ::

    result = catalog.get_by_id(sweet_id)
    if not result.ok:
        return result  # Failure 를 그대로 전파
    sweet = result.value
"""
from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Generic, NoReturn, TypeVar, Union

from sweetshop.core.errors import ERRORS_BY_KIND, ErrorKind, SweetShopError

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class Ok(Generic[T]):
    """성공 결과."""

    value: T
    ok: ClassVar[bool] = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """실패 결과. 종류(`kind`), 메세지, 필드별 상세 내용을 가집니다."""

    kind: ErrorKind
    message: str
    details: tuple[str, ...] = field(default=())
    ok: ClassVar[bool] = False

    @classmethod
    def from_error(cls, error: SweetShopError) -> Failure:
        return cls(error.kind, error.message, error.details)

    def to_error(self) -> SweetShopError:
        """같은 종류의 :class:`SweetShopError` 로 되돌립니다."""
        return ERRORS_BY_KIND[self.kind](self.message, self.details)

    def unwrap(self) -> NoReturn:
        raise self.to_error()

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": list(self.details),
        }


Result = Union[Ok[T], Failure]


def returns_result(func: F) -> F:
    """함수가 던진 :class:`SweetShopError` 를 :class:`Failure` 로 바꾸는 데코레이터.

    함수의 리턴 값이 이미 :class:`Ok` 나 :class:`Failure` 라면 그대로 전달하고,
    아니면 :class:`Ok` 로 감쌉니다. 그 밖의 예외(프로그래밍 오류)는 전파합니다.
    """

    @functools.wraps(func)
    def _wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            value = func(*args, **kwargs)
        except SweetShopError as e:
            return Failure.from_error(e)
        if isinstance(value, (Ok, Failure)):
            return value
        return Ok(value)

    return _wrapper  # type: ignore
