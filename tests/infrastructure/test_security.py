"""Credential Primitives — bcrypt hashing and JWT sign/verify."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from app.config import Settings
from app.core.errors import StaleOrInvalidCredentialError
from app.infrastructure.security import (
    decode_token, hash_password, sign_token, verify_password,
)

SETTINGS = Settings(jwt_secret="unit-test-secret-0123456789abcdef0123456789")


def test_hash_then_verify():
    hashed = hash_password("StrongPass1", rounds=4)
    assert hashed != "StrongPass1"
    assert verify_password("StrongPass1", hashed) is True
    assert verify_password("WrongPass1", hashed) is False


def test_verify_rejects_missing_or_malformed_hash():
    assert verify_password("StrongPass1", None) is False
    assert verify_password("StrongPass1", "not-a-bcrypt-hash") is False


def test_signed_token_carries_version_claim():
    subject = uuid4()
    token = sign_token(subject, "user", "a@example.com", 3, SETTINGS)
    claims = decode_token(token, SETTINGS)
    assert claims["sub"] == str(subject)
    assert claims["tv"] == 3
    assert claims["role"] == "user"
    assert claims["email"] == "a@example.com"
    assert claims["exp"] > claims["iat"]


def test_wrong_secret_rejected():
    token = sign_token(uuid4(), "user", "a@example.com", 0, SETTINGS)
    other = Settings(jwt_secret="a-different-secret-0123456789abcdef0123456")
    with pytest.raises(StaleOrInvalidCredentialError):
        decode_token(token, other)


def test_expired_token_rejected():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": str(uuid4()), "tv": 0, "iat": now - timedelta(hours=2),
         "exp": now - timedelta(hours=1)},
        SETTINGS.jwt_secret, algorithm=SETTINGS.jwt_algorithm,
    )
    with pytest.raises(StaleOrInvalidCredentialError):
        decode_token(token, SETTINGS)


def test_token_without_subject_rejected():
    token = jwt.encode(
        {"exp": datetime.now(timezone.utc) + timedelta(hours=1)},
        SETTINGS.jwt_secret, algorithm=SETTINGS.jwt_algorithm,
    )
    with pytest.raises(StaleOrInvalidCredentialError):
        decode_token(token, SETTINGS)


def test_garbage_rejected():
    with pytest.raises(StaleOrInvalidCredentialError):
        decode_token("not.a.jwt", SETTINGS)
