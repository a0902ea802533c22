"""사용자 계정 서비스: 가입, 로그인, 프로필 조회."""
from __future__ import annotations

from typing import Any, Optional

from sweetshop.core import (
    ConflictError,
    NotFoundError,
    Result,
    UnauthenticatedError,
    returns_result,
)
from sweetshop.domain import Clock, Role, User, utcnow
from sweetshop.logging import get_logger
from sweetshop.schema import Login, UserCreate
from sweetshop.security import IdentityGate, hash_password, verify_password
from sweetshop.uow import UnitOfWorkFactory

logger = get_logger("sweetshop.services.users")

USER_EXISTS = "User already exists"
USER_NOT_FOUND = "User not found"
INVALID_CREDENTIALS = "Invalid credentials"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        gate: IdentityGate,
        clock: Clock = utcnow,
    ):
        self.uow_factory = uow_factory
        self.gate = gate
        self.clock = clock

    @returns_result
    def register(self, data: UserCreate) -> Result[User]:
        """일반 사용자(``USER``) 계정을 만듭니다.

        가입 경로로는 관리자 계정을 만들 수 없습니다. 관리자는
        :meth:`create_user` 로 (CLI 에서) 만듭니다.
        """
        return self.create_user(data.email, data.password, data.name, Role.USER)

    @returns_result
    def create_user(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: Role = Role.USER,
    ) -> Result[User]:
        email = normalize_email(email)
        with self.uow_factory() as uow:
            repo = uow[User]
            if repo.get(by_email=email):
                raise ConflictError(USER_EXISTS)

            user = User(
                email=email,
                password_hash=hash_password(password),
                role=role,
                name=name,
                created_at=self.clock(),
            )
            repo.add(user)
            uow.commit()

        logger.info("user created: %s (%s)", user.email, Role(role).value)
        return user

    @returns_result
    def login(self, data: Login) -> Result[dict[str, Any]]:
        """자격 증명을 확인하고 베어러 토큰을 발급합니다.

        이메일이 없는 경우와 비밀번호가 틀린 경우를 구분하지 않습니다.
        """
        with self.uow_factory(read_only=True) as uow:
            user = uow[User].get(by_email=normalize_email(data.email))

        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("login failed: %s", data.email)
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        token = self.gate.issue(user)
        return {"token": token, "user": user}

    @returns_result
    def get_profile(self, id: str) -> Result[User]:
        with self.uow_factory(read_only=True) as uow:
            user = uow[User].get(id)
            if user is None:
                raise NotFoundError(USER_NOT_FOUND)
            return user
