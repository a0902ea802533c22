"""인증 관련 기능: 비밀번호 해시와 베어러 토큰(JWT) 발급/검증."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from sweetshop.config import SweetShop
from sweetshop.core import Ok, Result, UnauthenticatedError, returns_result
from sweetshop.domain import Identity, Role, User
from sweetshop.logging import get_logger

logger = get_logger("sweetshop.security")

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Argon2 로 비밀번호를 해시합니다."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """비밀번호가 저장된 해시와 일치하면 참을 리턴합니다."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """``Authorization`` 헤더 값에서 베어러 토큰을 꺼냅니다."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


class IdentityGate:
    """베어러 자격 증명을 검증해 호출자 :class:`Identity` 로 바꿉니다.

    토큰의 서명된 페이로드만으로 신원을 확인하며 DB를 조회하지 않습니다.
    """

    def __init__(
        self, secret: str, algorithm: str = "HS256", ttl: int = 24 * 60 * 60
    ):
        if not secret:
            raise ValueError("JWT secret must be provided")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_config(cls, config: SweetShop) -> IdentityGate:
        return cls(
            config.get_jwt_secret(),
            config.get_jwt_algorithm(),
            config.get_jwt_ttl(),
        )

    def issue(self, user: User, now: Optional[datetime] = None) -> str:
        """`user` 의 신원 정보를 담은 서명된 토큰을 발급합니다."""
        now = now or datetime.now(timezone.utc)
        identity = user.identity
        payload: dict[str, Any] = {
            "sub": identity.id,
            "email": identity.email,
            "role": identity.role.value,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self.ttl)).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    @returns_result
    def resolve(self, credential: Optional[str]) -> Result[Identity]:
        """자격 증명 문자열을 검증합니다.

        Returns:
            ``Ok(Identity)`` 또는 ``Failure(UNAUTHENTICATED)``.
        """
        if not credential:
            raise UnauthenticatedError("no credential supplied")

        try:
            payload = jwt.decode(
                credential,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.InvalidTokenError as e:
            logger.info("rejected credential: %s", e)
            raise UnauthenticatedError("credential invalid") from e

        user_id = payload.get("sub")
        email, role = payload.get("email"), payload.get("role")
        if (
            not user_id
            or not email
            or not isinstance(role, str)
            or role not in Role.__members__
        ):
            raise UnauthenticatedError("credential invalid")

        return Ok(Identity(str(user_id), str(email), Role(role)))
