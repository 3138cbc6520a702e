"""Unit tests for token issuance and verification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from wrenchlog.core.config import TokenSettings
from wrenchlog.services._shared.errors import InvalidTokenError
from wrenchlog.services.auth.tokens import TokenService

SECRET = "unit-test-secret-with-some-length"


@pytest.fixture()
def tokens() -> TokenService:
    return TokenService(TokenSettings(secret=SECRET, issuer="wrenchlog", audience="wrenchlog"))


def test_access_token_carries_expected_claims(tokens: TokenService) -> None:
    claims = tokens.verify(tokens.issue_access("user-1"))

    assert claims["sub"] == "user-1"
    assert claims["userId"] == "user-1"
    assert claims["type"] == "access"
    assert claims["iss"] == "wrenchlog"
    assert claims["aud"] == "wrenchlog"
    assert claims["exp"] - claims["iat"] == 15 * 60


def test_refresh_token_lives_seven_days(tokens: TokenService) -> None:
    claims = tokens.verify(tokens.issue_refresh("user-1"))

    assert claims["type"] == "refresh"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


def test_tokens_issued_together_differ(tokens: TokenService) -> None:
    assert tokens.issue_refresh("user-1") != tokens.issue_refresh("user-1")


def test_type_and_user_id_helpers(tokens: TokenService) -> None:
    token = tokens.issue_refresh("user-7")

    assert tokens.type_of(token) == "refresh"
    assert tokens.user_id_of(token) == "user-7"
    assert tokens.type_of("garbage") is None
    assert tokens.user_id_of("garbage") is None


def test_wrong_secret_is_rejected(tokens: TokenService) -> None:
    forged = TokenService(TokenSettings(secret="another-secret-entirely")).issue_access("user-1")

    with pytest.raises(InvalidTokenError):
        tokens.verify(forged)


def test_wrong_audience_is_rejected(tokens: TokenService) -> None:
    other = TokenService(TokenSettings(secret=SECRET, audience="someone-else"))

    with pytest.raises(InvalidTokenError):
        tokens.verify(other.issue_access("user-1"))


def test_expired_token_is_rejected(tokens: TokenService) -> None:
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    stale = TokenService(tokens.settings, clock=lambda: past).issue_access("user-1")

    with pytest.raises(InvalidTokenError):
        tokens.verify(stale)


def test_expiry_is_judged_by_the_injected_clock(tokens: TokenService) -> None:
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    behind = TokenService(tokens.settings, clock=lambda: past)

    token = behind.issue_access("user-1")

    assert behind.user_id_of(token) == "user-1"
    assert tokens.user_id_of(token) is None


def test_advancing_the_clock_past_exp_rejects_the_token(tokens: TokenService) -> None:
    now = datetime.now(timezone.utc)
    token = tokens.issue_access("user-1")
    later = TokenService(tokens.settings, clock=lambda: now + timedelta(minutes=16))

    with pytest.raises(InvalidTokenError, match="expired"):
        later.verify(token)


def test_unsigned_token_is_rejected(tokens: TokenService) -> None:
    now = datetime.now(timezone.utc)
    unsigned = jwt.encode(
        {
            "sub": "user-1",
            "type": "access",
            "iss": "wrenchlog",
            "aud": "wrenchlog",
            "iat": now,
            "exp": now + timedelta(minutes=5),
        },
        key=None,
        algorithm="none",
    )

    with pytest.raises(InvalidTokenError):
        tokens.verify(unsigned)


@pytest.mark.parametrize("value", ["", "a.b.c", "not a token"])
def test_malformed_tokens_are_rejected(tokens: TokenService, value: str) -> None:
    with pytest.raises(InvalidTokenError):
        tokens.verify(value)


def test_storage_hash_is_deterministic_and_not_the_token(tokens: TokenService) -> None:
    token = tokens.issue_refresh("user-1")

    digest = tokens.hash_for_storage(token)

    assert digest == tokens.hash_for_storage(token)
    assert digest != token
    assert len(digest) == 64


def test_storage_hash_depends_on_secret(tokens: TokenService) -> None:
    other = TokenService(TokenSettings(secret="different-secret-value"))

    assert tokens.hash_for_storage("t") != other.hash_for_storage("t")
