"""Auth Schemas — registration, login, and the shared password policy.

Invariants:
    - Passwords: >= 8 chars with at least one upper-case, one lower-case, one digit
    - Passwords are at most 72 UTF-8 bytes (bcrypt input limit)
    - Emails are lower-cased at the boundary (uniqueness is case-insensitive)
"""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


BCRYPT_MAX_BYTES = 72

_PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "Add an uppercase letter"),
    (re.compile(r"[a-z]"), "Add a lowercase letter"),
    (re.compile(r"[0-9]"), "Add a number"),
)


def check_password_strength(value: str) -> str:
    """Raise ValueError naming the first unmet rule."""
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(value):
            raise ValueError(message)
    return value


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=80)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name Required")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class UserPublic(BaseModel):
    """Public-facing account data."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: str


class UserProfile(UserPublic):
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    message: str
    user: UserPublic
    token: str
