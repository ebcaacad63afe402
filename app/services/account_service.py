"""Account Service — registration, login, profile, and password change.

Invariants:
    - Emails are compared and stored lower-cased
    - Login failure message is identical for unknown email and wrong password
    - A password change increments token_version in the same UPDATE that stores
      the new hash (atomic increment); every older token then fails the session check
    - Every successful register/login/profile update returns a token carrying the
      account's current token_version

Design Decisions:
    - token_version = token_version + 1 evaluated by the database: concurrent
      password changes for one account serialize on the row, never lose an increment
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.core.domain_types import Role, UserId
from app.core.errors import (
    BusinessRuleError, ConflictError, ErrorContext, InvalidLoginError,
    ResourceNotFoundError,
)
from app.infrastructure.security import hash_password, sign_token, verify_password
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    user: User
    token: str


class SqlAccountLookup:
    """AccountLookup over the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_account(self, user_id: UserId) -> User | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()


class AccountService:
    """Request-scoped account operations."""

    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    def issue_token(self, user: User) -> str:
        return sign_token(
            user.id, user.role, user.email, user.token_version or 0, self.settings,
        )

    async def _get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == email.lower()),
        )
        return result.scalar_one_or_none()

    async def register(
        self, name: str, email: str, password: str, role: Role = Role.USER,
    ) -> AuthResult:
        email = email.lower()
        if await self._get_by_email(email):
            raise ConflictError("Email already registered")

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password, self.settings.bcrypt_rounds),
            role=role.value,
            token_version=0,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration for the same email
            await self.db.rollback()
            raise ConflictError("Email already registered")
        await self.db.refresh(user)
        logger.info("User registered", extra={"user_id": str(user.id)})
        return AuthResult(user=user, token=self.issue_token(user))

    async def login(self, email: str, password: str) -> AuthResult:
        user = await self._get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidLoginError()
        return AuthResult(user=user, token=self.issue_token(user))

    async def get_profile(self, user_id: UserId) -> User:
        user = await SqlAccountLookup(self.db).get_account(user_id)
        if not user:
            raise ResourceNotFoundError("User", str(user_id))
        return user

    async def update_profile(
        self,
        user_id: UserId,
        name: str | None = None,
        current_password: str | None = None,
        new_password: str | None = None,
    ) -> AuthResult:
        """Apply a name and/or password change; returns a fresh token."""
        if name is None and not new_password and not current_password:
            raise BusinessRuleError(
                "Nothing to update. Provide name or password fields.",
            )
        user = await self.get_profile(user_id)

        values: dict = {}
        if name is not None:
            values["name"] = name

        if new_password:
            if not current_password:
                raise BusinessRuleError(
                    "current_password is required to change password",
                )
            if not verify_password(current_password, user.password_hash):
                raise InvalidLoginError(
                    "Current password is incorrect",
                    context=ErrorContext(user_id=str(user_id)),
                )
            values["password_hash"] = hash_password(
                new_password, self.settings.bcrypt_rounds,
            )
            values["token_version"] = User.token_version + 1

        if values:
            await self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(**values)
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
            await self.db.refresh(user)
            if new_password:
                logger.info(
                    "Password changed; earlier sessions revoked",
                    extra={"user_id": str(user_id)},
                )

        return AuthResult(user=user, token=self.issue_token(user))
