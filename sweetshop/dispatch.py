"""연산(Operation) 디스패치.

모든 코어 연산은 :class:`OperationBus` 를 통해 호출되며, 다음 순서로 처리됩니다.

    1. 신원 확인: :class:`~sweetshop.security.IdentityGate` 가 자격 증명을 검증
    2. 권한 확인: :data:`~sweetshop.policy.OPERATION_ROLES` 에 정의된 역할 검사
    3. 페이로드 검증: 핸들러에 지정된 스키마로 :func:`~sweetshop.schema.validate`
    4. 핸들러 실행

앞 단계가 실패하면 그 :class:`~sweetshop.core.Failure` 를 바로 리턴하고 뒤 단계는
실행하지 않습니다. 따라서 인증되지 않은 요청은 페이로드가 잘못되었더라도
``Unauthenticated`` 를 받습니다.

핸들러는 :func:`on_operation` 데코레이터로 등록하며, 핸들러의 파라메터 이름을
보고 의존성(`catalog`, `ledger`, `users`, `gate`)과 요청 값(`identity`,
`data`, 경로 파라메터)을 주입합니다. ::

    @on_operation("sweets.purchase", schema=StockChange)
    def purchase_sweet(id: str, data: StockChange, ledger: InventoryLedger):
        return ledger.purchase(id, data.quantity)
"""
from __future__ import annotations

from dataclasses import dataclass
from inspect import Parameter, signature
from typing import Any, Callable, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

from sweetshop.core import Result
from sweetshop.logging import get_logger
from sweetshop.policy import OPERATION_ROLES, authorize
from sweetshop.schema import validate
from sweetshop.security import IdentityGate

F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger("sweetshop.dispatch")


class HandlerRegistrationError(Exception):
    """연산 핸들러를 등록할 수 없을 때 발생합니다."""


@dataclass(frozen=True)
class Operation:
    """이름으로 호출 가능한 코어 연산 하나."""

    name: str
    handler: Callable[..., Result[Any]]
    schema: Optional[Type[BaseModel]] = None
    auth: bool = True
    """참이면 인증된 호출자만 실행할 수 있습니다."""

    @property
    def params(self) -> Mapping[str, Parameter]:
        return signature(self.handler).parameters


OPERATION_HANDLERS: dict[str, Operation] = {}
"""전역 연산 레지스트리."""


def on_operation(
    name: str, schema: Optional[Type[BaseModel]] = None, auth: bool = True
) -> Callable[[F], F]:
    """연산 핸들러 데코레이터.

    함수를 전역 연산 레지스트리에 등록합니다.
    """

    def _wrapper(func: F) -> F:
        # 이미 등록된 핸들러가 덮어씌워지지 않도록 방지
        if name in OPERATION_HANDLERS:
            raise HandlerRegistrationError(
                f"Handler already exists for {name}: {OPERATION_HANDLERS[name]}"
            )
        if auth and name not in OPERATION_ROLES:
            raise HandlerRegistrationError(f"No role policy defined for {name}")
        OPERATION_HANDLERS[name] = Operation(name, func, schema, auth)
        return func

    return _wrapper


class OperationBus:
    """신원 확인, 권한 확인, 검증을 거쳐 연산 핸들러를 실행합니다."""

    def __init__(
        self,
        gate: IdentityGate,
        dependencies: Optional[dict[str, Any]] = None,
        handlers: Optional[Mapping[str, Operation]] = None,
    ):
        self.gate = gate
        self.handlers = OPERATION_HANDLERS if handlers is None else handlers
        self.dependencies = {"gate": gate, **(dependencies or {})}

    def dispatch(
        self,
        name: str,
        credential: Optional[str] = None,
        payload: Any = None,
        **params: Any,
    ) -> Result[Any]:
        """`name` 연산을 실행하고 그 결과를 리턴합니다.

        Args:
            name: 연산 이름. 예: ``"sweets.purchase"``
            credential: 베어러 토큰 문자열.
            payload: 검증되지 않은 요청 본문 또는 쿼리 파라메터.
            params: 경로 파라메터 같은 추가 인자. 예: ``id=...``
        """
        operation = self.handlers.get(name)
        if operation is None:
            raise LookupError(f"unknown operation: {name}")

        kwargs: dict[str, Any] = dict(params)

        if operation.auth:
            identified = self.gate.resolve(credential)
            if not identified.ok:
                return identified

            authorized = authorize(identified.value, OPERATION_ROLES[name])
            if not authorized.ok:
                logger.info("forbidden: %s by %s", name, identified.value.email)
                return authorized
            kwargs["identity"] = authorized.value

        if operation.schema is not None:
            validated = validate(operation.schema, payload)
            if not validated.ok:
                return validated
            kwargs["data"] = validated.value

        logger.debug("dispatch %s %r", name, params)
        return operation.handler(**self._inject(operation, kwargs))

    def _inject(self, operation: Operation, kwargs: dict[str, Any]) -> dict[str, Any]:
        """핸들러 파라메터 이름을 보고 필요한 인자만 골라 넘깁니다."""
        args = {}
        missing = []
        for pname, param in operation.params.items():
            if pname in kwargs:
                args[pname] = kwargs[pname]
            elif pname in self.dependencies:
                args[pname] = self.dependencies[pname]
            elif param.default is Parameter.empty:
                missing.append(pname)

        if missing:
            raise TypeError(
                f"missing dependencies for {operation.name}: {', '.join(missing)}"
            )
        return args
