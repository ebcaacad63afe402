"""Session Validity — decides whether a decoded bearer credential is still live.

Invariants:
    - A credential is valid iff its embedded `tv` equals the account's token_version
    - Missing or non-numeric versions (either side) read as 0
    - Pure: no IO, no mutation, no caching; the caller fetches the account

Design Decisions:
    - Per-account monotonic counter instead of a server-side session table:
      bumping token_version revokes every previously issued credential at once
    - bool is excluded from "numeric" (True == 1 in Python)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class SessionRejection(str, Enum):
    """Reason codes for a rejected session check."""
    MISSING_CREDENTIAL = "MissingCredential"
    STALE_OR_INVALID_CREDENTIAL = "StaleOrInvalidCredential"


@dataclass(frozen=True)
class SessionCheck:
    """Result of a session check: valid flag plus reason on rejection."""
    valid: bool
    reason: SessionRejection | None = None


class AccountVersion(Protocol):
    token_version: int


def read_token_version(value: Any) -> int | float:
    """Coerce a stored/embedded version to a number; absent or junk → 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def is_session_valid(claims: Mapping[str, Any], current_token_version: Any) -> bool:
    """True iff the credential's `tv` matches the account's live counter."""
    issued = read_token_version(claims.get("tv"))
    current = read_token_version(current_token_version)
    return issued == current


def check_session(
    claims: Mapping[str, Any] | None, account: AccountVersion | None,
) -> SessionCheck:
    """Full check with reason codes. account=None means the subject no longer exists."""
    if claims is None:
        return SessionCheck(False, SessionRejection.MISSING_CREDENTIAL)
    if account is None:
        return SessionCheck(False, SessionRejection.STALE_OR_INVALID_CREDENTIAL)
    if not is_session_valid(claims, getattr(account, "token_version", None)):
        return SessionCheck(False, SessionRejection.STALE_OR_INVALID_CREDENTIAL)
    return SessionCheck(True)
