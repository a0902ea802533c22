"""요청 페이로드의 스키마 정의와 검증 기능을 담당하는 모듈입니다.

:func:`validate` 는 비즈니스 로직이 실행되기 전에 페이로드의 타입과 범위를
검사하고, 위반 사항이 있으면 필드별 메세지 목록을 담은
``ValidationFailed`` 실패를 리턴합니다. 페이로드를 부분적으로 적용하는 일은
없습니다.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from sweetshop.core import Failure, Ok, Result, ValidationFailedError
from sweetshop.domain import MAX_QUANTITY

M = TypeVar("M", bound=BaseModel)


class Schema(BaseModel):
    """모든 요청 스키마의 기본 클래스."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=False,
        extra="ignore",
    )


class SweetCreate(Schema):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    quantity: int = Field(ge=0, le=MAX_QUANTITY)
    description: Optional[str] = None


class SweetUpdate(Schema):
    """부분 변경 스키마. 주어진 필드만 검증하고, 주어진 필드만 적용합니다."""

    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)
    description: Optional[str] = None

    @field_validator("name", "category", "price", "quantity", mode="before")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        # 기본값에는 실행되지 않으므로, 명시적으로 null 을 준 경우에만 걸립니다.
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    def changes(self) -> dict[str, Any]:
        """요청에 포함된 필드만 딕셔너리로 리턴합니다."""
        return self.model_dump(exclude_unset=True)


class SearchCriteria(Schema):
    name: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[Decimal] = Field(None, alias="minPrice", gt=0)
    max_price: Optional[Decimal] = Field(None, alias="maxPrice", gt=0)

    @field_validator("max_price")
    @classmethod
    def check_price_range(
        cls, v: Optional[Decimal], info: ValidationInfo
    ) -> Optional[Decimal]:
        min_price = info.data.get("min_price")
        if v is not None and min_price is not None and min_price > v:
            raise ValueError("minPrice must be less than or equal to maxPrice")
        return v


class StockChange(Schema):
    """구매(purchase)와 재입고(restock) 요청."""

    quantity: int = Field(gt=0, le=MAX_QUANTITY)


class UserCreate(Schema):
    email: EmailStr
    password: str = Field(min_length=6)
    name: Optional[str] = None


class Login(Schema):
    email: EmailStr
    password: str = Field(min_length=1)


def _field_name(schema: Type[BaseModel], loc: tuple[Any, ...]) -> str:
    if not loc:
        return "body"
    head = loc[0]
    field = schema.model_fields.get(head) if isinstance(head, str) else None
    if field and field.alias:
        head = field.alias
    return ".".join(str(it) for it in (head, *loc[1:]))


def format_errors(schema: Type[BaseModel], error: ValidationError) -> list[str]:
    """pydantic 에러를 ``"<field>: <message>"`` 형식의 메세지 목록으로 바꿉니다."""
    messages = []
    for err in error.errors():
        msg = err["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, ") :]
        messages.append(f"{_field_name(schema, err['loc'])}: {msg}")
    return messages


def validate(schema: Type[M], payload: Any) -> Result[M]:
    """`payload` 를 `schema` 로 검증해 타입이 지정된 값을 리턴합니다.

    Returns:
        성공하면 ``Ok(schema 인스턴스)``, 실패하면 ``Failure(VALIDATION_FAILED)``.
    """
    if payload is None:
        payload = {}
    try:
        return Ok(schema.model_validate(payload))
    except ValidationError as e:
        details = format_errors(schema, e)
        return Failure.from_error(ValidationFailedError("Validation failed", details))
