"""Unit tests for the authentication lifecycle."""

from __future__ import annotations

import dataclasses
from datetime import timedelta

import pytest
from sqlalchemy import select, update

from wrenchlog.container import build_services
from wrenchlog.models import RefreshToken, User
from wrenchlog.models.base import utcnow
from wrenchlog.services._shared.errors import (
    AuthenticationRequiredError,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TokenExpiredError,
)
from wrenchlog.services._shared.ports import InMemoryRefreshTokenStore
from wrenchlog.services.auth.dto import LoginIn, RefreshIn, RegisterIn

from tests.factories.user import DEFAULT_PASSWORD, UserFactory


@pytest.fixture()
def auth(services):
    return services.auth


def _register(auth, email: str = "a@b.com", password: str = "Secure123A"):
    return auth.register(RegisterIn(email=email, password=password, name="Ada"))


def _stored_digests(session, user_id: str) -> list[str]:
    stmt = select(RefreshToken.token_hash).where(RefreshToken.user_id == user_id)
    return list(session.execute(stmt).scalars())


# --------------------------------------------------------------------------- #
# Register / login
# --------------------------------------------------------------------------- #


def test_register_hides_password_and_stores_a_hash(auth, session) -> None:
    result = _register(auth)

    field_names = {f.name for f in dataclasses.fields(result.user)}
    assert not any("password" in name for name in field_names)
    row = session.get(User, result.user.id)
    assert row.password_hash
    assert row.password_hash != "Secure123A"


def test_register_normalises_email(auth) -> None:
    result = _register(auth, email="  Mixed@Example.COM ")

    assert result.user.email == "mixed@example.com"


def test_register_persists_only_the_refresh_digest(auth, session) -> None:
    result = _register(auth)

    digests = _stored_digests(session, result.user.id)
    assert digests == [auth.tokens.hash_for_storage(result.tokens.refresh_token)]
    assert result.tokens.refresh_token not in digests


def test_register_duplicate_email_conflicts(auth) -> None:
    _register(auth)

    with pytest.raises(ConflictError) as exc_info:
        _register(auth, email="A@B.com")

    assert exc_info.value.reason == "email_exists"
    assert exc_info.value.code == "conflict"


def test_login_with_wrong_password_issues_nothing(auth, session) -> None:
    user = UserFactory()

    with pytest.raises(InvalidCredentialsError) as exc_info:
        auth.login(LoginIn(email=user.email, password="Wrong123A"))

    assert exc_info.value.code == "invalid_credentials"
    assert _stored_digests(session, user.id) == []


def test_login_with_unknown_email_fails_the_same_way(auth) -> None:
    with pytest.raises(InvalidCredentialsError):
        auth.login(LoginIn(email="nobody@example.com", password=DEFAULT_PASSWORD))


def test_login_issues_a_verifiable_pair(auth, session) -> None:
    user = UserFactory()

    pair = auth.login(LoginIn(email=user.email.upper(), password=DEFAULT_PASSWORD))

    assert auth.authenticate(pair.access_token) == user.id
    assert len(_stored_digests(session, user.id)) == 1


# --------------------------------------------------------------------------- #
# Refresh
# --------------------------------------------------------------------------- #


def test_refresh_returns_new_access_token(auth) -> None:
    tokens = _register(auth).tokens

    out = auth.refresh(RefreshIn(refresh_token=tokens.refresh_token))

    assert auth.tokens.type_of(out.access_token) == "access"
    assert auth.tokens.user_id_of(out.access_token) == auth.tokens.user_id_of(tokens.access_token)


def test_refresh_token_is_not_rotated_on_use(auth) -> None:
    refresh = _register(auth).tokens.refresh_token

    auth.refresh(RefreshIn(refresh_token=refresh))
    second = auth.refresh(RefreshIn(refresh_token=refresh))

    assert second.access_token


def test_refresh_with_access_token_is_rejected(auth) -> None:
    tokens = _register(auth).tokens

    with pytest.raises(InvalidTokenError):
        auth.refresh(RefreshIn(refresh_token=tokens.access_token))


def test_refresh_with_unknown_token_is_rejected(auth) -> None:
    user_id = _register(auth).user.id
    unknown = auth.tokens.issue_refresh(user_id)

    with pytest.raises(InvalidTokenError):
        auth.refresh(RefreshIn(refresh_token=unknown))


def test_refresh_after_stored_expiry_deletes_the_row(auth, session) -> None:
    refresh = _register(auth).tokens.refresh_token
    digest = auth.tokens.hash_for_storage(refresh)
    session.execute(
        update(RefreshToken)
        .where(RefreshToken.token_hash == digest)
        .values(expires_at=utcnow() - timedelta(minutes=1))
    )

    with pytest.raises(TokenExpiredError) as exc_info:
        auth.refresh(RefreshIn(refresh_token=refresh))

    assert exc_info.value.code == "token_expired"
    assert auth.refresh_store.find_by_hash(digest) is None


def test_refresh_row_of_another_user_is_rejected(auth, session) -> None:
    alice = _register(auth, email="alice@example.com")
    bob = _register(auth, email="bob@example.com")
    digest = auth.tokens.hash_for_storage(alice.tokens.refresh_token)
    session.execute(
        update(RefreshToken)
        .where(RefreshToken.token_hash == digest)
        .values(user_id=bob.user.id)
    )

    with pytest.raises(InvalidTokenError):
        auth.refresh(RefreshIn(refresh_token=alice.tokens.refresh_token))


# --------------------------------------------------------------------------- #
# Logout / identity
# --------------------------------------------------------------------------- #


def test_logout_removes_every_refresh_token(auth) -> None:
    result = _register(auth)
    auth.login(LoginIn(email="a@b.com", password="Secure123A"))

    assert auth.logout(result.user.id) == 2

    with pytest.raises(InvalidTokenError):
        auth.refresh(RefreshIn(refresh_token=result.tokens.refresh_token))


def test_me_returns_public_profile(auth) -> None:
    result = _register(auth)

    me = auth.me(result.user.id)

    assert me == result.user


def test_me_for_missing_user(auth) -> None:
    with pytest.raises(NotFoundError):
        auth.me("00000000-0000-0000-0000-000000000000")


@pytest.mark.parametrize("token", [None, ""])
def test_authenticate_without_token(auth, token) -> None:
    with pytest.raises(AuthenticationRequiredError):
        auth.authenticate(token)


def test_authenticate_rejects_refresh_tokens(auth) -> None:
    tokens = _register(auth).tokens

    with pytest.raises(InvalidTokenError):
        auth.authenticate(tokens.refresh_token)


def test_authenticate_rejects_expired_access_token(auth, freeze_time) -> None:
    with freeze_time("2024-01-01 12:00:00"):
        token = auth.tokens.issue_access("user-1")

    with pytest.raises(InvalidTokenError):
        auth.authenticate(token)


def test_purge_expired_drops_only_stale_rows(auth, session) -> None:
    result = _register(auth)
    stale = _register(auth, email="stale@example.com")
    session.execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == stale.user.id)
        .values(expires_at=utcnow() - timedelta(days=1))
    )

    assert auth.purge_expired() == 1
    assert len(_stored_digests(session, result.user.id)) == 1


def test_refresh_after_stored_expiry_with_in_memory_store(app, session) -> None:
    store = InMemoryRefreshTokenStore()
    auth = build_services(session, app.config, refresh_store=store).auth
    refresh = _register(auth).tokens.refresh_token
    digest = auth.tokens.hash_for_storage(refresh)
    store.backdate(digest, utcnow() - timedelta(seconds=1))

    with pytest.raises(TokenExpiredError):
        auth.refresh(RefreshIn(refresh_token=refresh))

    assert store.find_by_hash(digest) is None
