"""Session Validity — tests for the token_version comparison.

Tests cover:
    - valid iff issued tv == current token_version
    - absent / non-numeric tv reads as 0 on both sides
    - check_session reason codes (missing credential, stale, unknown account)
"""

from dataclasses import dataclass

import pytest

from app.core.session_validity import (
    SessionCheck,
    SessionRejection,
    check_session,
    is_session_valid,
    read_token_version,
)


@dataclass
class _Account:
    token_version: object = 0


# ─── read_token_version ──────────────────────────────────────────

@pytest.mark.parametrize("value, expected", [
    (None, 0), ("3", 0), ([], 0), (True, 0), (False, 0),
    (0, 0), (4, 4), (2.0, 2.0),
])
def test_read_token_version_coerces_junk_to_zero(value, expected):
    assert read_token_version(value) == expected


# ─── is_session_valid ────────────────────────────────────────────

@pytest.mark.parametrize("issued", [0, 1, 2, 7])
@pytest.mark.parametrize("current", [0, 1, 2, 7])
def test_valid_iff_versions_equal(issued, current):
    assert is_session_valid({"tv": issued}, current) is (issued == current)


def test_missing_tv_treated_as_zero():
    assert is_session_valid({"sub": "x"}, 0) is True
    assert is_session_valid({"sub": "x"}, 1) is False


def test_missing_account_version_treated_as_zero():
    assert is_session_valid({"tv": 0}, None) is True
    assert is_session_valid({"tv": 1}, None) is False


def test_non_numeric_versions_both_read_as_zero():
    assert is_session_valid({"tv": "1"}, "abc") is True


def test_bool_tv_does_not_match_one():
    assert is_session_valid({"tv": True}, 1) is False


# ─── check_session ───────────────────────────────────────────────

def test_check_session_accepts_matching_version():
    assert check_session({"tv": 3}, _Account(3)) == SessionCheck(True, None)


def test_check_session_without_claims_is_missing_credential():
    result = check_session(None, _Account(0))
    assert result.valid is False
    assert result.reason is SessionRejection.MISSING_CREDENTIAL


def test_check_session_rejects_stale_version():
    """Account tokenVersion=2, credential tv=1 → StaleOrInvalidCredential."""
    result = check_session({"tv": 1}, _Account(2))
    assert result.valid is False
    assert result.reason is SessionRejection.STALE_OR_INVALID_CREDENTIAL


def test_check_session_rejects_unknown_account():
    result = check_session({"tv": 0}, None)
    assert result.reason is SessionRejection.STALE_OR_INVALID_CREDENTIAL


def test_rejection_codes_match_taxonomy_names():
    assert SessionRejection.MISSING_CREDENTIAL.value == "MissingCredential"
    assert (
        SessionRejection.STALE_OR_INVALID_CREDENTIAL.value
        == "StaleOrInvalidCredential"
    )
