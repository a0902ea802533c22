"""에러 분류 체계.

모든 실패는 안정적인 종류(:class:`ErrorKind`)와 사람이 읽을 수 있는 메세지를
가집니다. 컴포넌트 내부에서는 예외로 던지고, 컴포넌트 경계에서는
:func:`sweetshop.core.result.returns_result` 가 :class:`~.Failure` 로 바꿉니다.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable


class ErrorKind(str, Enum):
    """실패 종류. 값은 외부에 노출되는 기계 판독용 문자열입니다."""

    UNAUTHENTICATED = "Unauthenticated"
    FORBIDDEN = "Forbidden"
    VALIDATION_FAILED = "ValidationFailed"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    INSUFFICIENT_STOCK = "InsufficientStock"
    TRANSIENT = "Transient"

    @property
    def status_code(self) -> int:
        """HTTP 경계에서 사용할 상태 코드."""
        return HTTP_STATUS[self]


HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 400,
    ErrorKind.INSUFFICIENT_STOCK: 400,
    ErrorKind.TRANSIENT: 503,
}


class SweetShopError(Exception):
    """``sweetshop`` 와 관련된 모든 에러의 기본 클래스."""

    kind: ErrorKind

    def __init__(self, message: str, details: Iterable[str] = ()):
        super().__init__(message)
        self.message = message
        self.details = tuple(details)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class UnauthenticatedError(SweetShopError):
    """자격 증명이 없거나 검증에 실패했습니다."""

    kind = ErrorKind.UNAUTHENTICATED


class ForbiddenError(SweetShopError):
    """역할(role)이 부족합니다."""

    kind = ErrorKind.FORBIDDEN


class ValidationFailedError(SweetShopError):
    """페이로드 형태나 범위가 잘못되었습니다. `details` 에 필드별 메세지가 담깁니다."""

    kind = ErrorKind.VALIDATION_FAILED


class NotFoundError(SweetShopError):
    """엔티티 id 에 해당하는 객체가 없습니다."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(SweetShopError):
    """이름이나 이메일의 유일성 제약을 위반했습니다."""

    kind = ErrorKind.CONFLICT


class InsufficientStockError(SweetShopError):
    """구매 수량이 재고보다 많습니다."""

    kind = ErrorKind.INSUFFICIENT_STOCK


class TransientError(SweetShopError):
    """저장소를 일시적으로 사용할 수 없습니다. 호출자가 재시도할 수 있습니다."""

    kind = ErrorKind.TRANSIENT


ERRORS_BY_KIND: dict[ErrorKind, type[SweetShopError]] = {
    cls.kind: cls
    for cls in (
        UnauthenticatedError,
        ForbiddenError,
        ValidationFailedError,
        NotFoundError,
        ConflictError,
        InsufficientStockError,
        TransientError,
    )
}
