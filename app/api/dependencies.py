"""Auth Dependencies — bearer-token authentication and role gates for routes.

Invariants:
    - Every protected route runs get_current_user before its handler
    - No token → MissingCredentialError (401)
    - Bad signature/expired token, unknown subject, or token_version mismatch →
      StaleOrInvalidCredentialError (401); no partial trust is granted
    - require_role(...) → InsufficientPermissionsError (403) for other roles

Design Decisions:
    - The account row is re-read on every request; the token is never trusted
      for role/version on its own
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.domain_types import Role
from app.core.errors import (
    ErrorContext, InsufficientPermissionsError, MissingCredentialError,
    StaleOrInvalidCredentialError,
)
from app.core.repository_protocols import AccountLookup
from app.core.session_validity import SessionRejection, check_session
from app.infrastructure.database import get_db
from app.infrastructure.security import decode_token
from app.services.account_service import SqlAccountLookup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller, as read from the live account row."""
    id: UUID
    role: str
    email: str
    token_version: int


def bearer_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth[7:].strip() or None


def _subject_id(claims: dict) -> UUID:
    try:
        return UUID(str(claims.get("sub")))
    except ValueError:
        raise StaleOrInvalidCredentialError("Invalid or expired token")


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    """Authenticate the request or raise."""
    token = bearer_token(request)
    claims = decode_token(token, settings) if token else None

    accounts: AccountLookup = SqlAccountLookup(db)
    account = None
    if claims is not None:
        account = await accounts.get_account(_subject_id(claims))

    check = check_session(claims, account)
    if check.reason is SessionRejection.MISSING_CREDENTIAL:
        raise MissingCredentialError()
    if not check.valid:
        logger.info(
            "Rejected stale or invalid credential",
            extra={"user_id": claims.get("sub"), "path": request.url.path},
        )
        raise StaleOrInvalidCredentialError(
            context=ErrorContext(user_id=str(claims.get("sub"))),
        )

    return CurrentUser(
        id=account.id,
        role=account.role,
        email=account.email,
        token_version=account.token_version,
    )


def require_role(*roles: Role):
    """Dependency factory for role-based access control."""
    allowed = {r.value for r in roles}

    async def role_checker(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in allowed:
            raise InsufficientPermissionsError(
                sorted(allowed), context=ErrorContext(user_id=str(current_user.id)),
            )
        return current_user

    return role_checker


require_admin = require_role(Role.ADMIN)
