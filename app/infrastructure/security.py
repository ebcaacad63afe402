"""Credential Primitives — bcrypt password hashing and JWT bearer tokens.

Invariants:
    - Plain-text passwords never leave this module's call frames
    - Issued tokens always carry sub, role, email, tv, iat, exp
    - decode_token raises StaleOrInvalidCredentialError on any signature/expiry/format fault

Design Decisions:
    - bcrypt directly (no passlib wrapper)
    - Tokens are not stored server-side; revocation is the token_version
      comparison in core/session_validity.py
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
import jwt

from app.config import Settings
from app.core.errors import StaleOrInvalidCredentialError

logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Verify a password against its hash; malformed hashes never verify."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def sign_token(
    subject: UUID,
    role: str,
    email: str,
    token_version: int,
    settings: Settings,
) -> str:
    """Issue a signed bearer token embedding the account's current token_version."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(subject),
        "role": role,
        "email": email,
        "tv": token_version,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict:
    """Verify signature and expiry; return the claims."""
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.InvalidTokenError:  # includes ExpiredSignatureError
        raise StaleOrInvalidCredentialError("Invalid or expired token")
    return claims
