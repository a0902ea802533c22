"""역할(Role) 정책.

:func:`authorize` 는 I/O 와 부수효과가 없는 순수 함수입니다.
"""
from __future__ import annotations

from typing import Optional

from sweetshop.core import Failure, ForbiddenError, Ok, Result
from sweetshop.domain import Identity, Role

OPERATION_ROLES: dict[str, Optional[Role]] = {
    "sweets.create": None,
    "sweets.list": None,
    "sweets.search": None,
    "sweets.get": None,
    "sweets.update": None,
    "sweets.delete": Role.ADMIN,
    "sweets.purchase": None,
    "sweets.restock": Role.ADMIN,
    "users.profile": None,
}
"""연산별 필요 역할. ``None`` 은 인증된 모든 사용자에게 허용됩니다."""


def authorize(
    identity: Identity, required_role: Optional[Role] = None
) -> Result[Identity]:
    """`identity` 가 `required_role` 을 만족하는지 검사합니다."""
    if required_role is None:
        return Ok(identity)
    if required_role == Role.ADMIN and not identity.is_admin:
        return Failure.from_error(ForbiddenError("administrator role required"))
    return Ok(identity)
