"""Contract tests shared by the in-memory and SQL refresh token stores."""

from __future__ import annotations

from datetime import timedelta

import pytest

from wrenchlog.infra.sql import SQLAlchemyRefreshTokenStore
from wrenchlog.models.base import utcnow
from wrenchlog.services._shared.ports import InMemoryRefreshTokenStore

from tests.factories.user import UserFactory


@pytest.fixture(params=["memory", "sql"])
def store(request, session):
    if request.param == "memory":
        return InMemoryRefreshTokenStore()
    return SQLAlchemyRefreshTokenStore(session)


@pytest.fixture()
def user_ids(session) -> tuple[str, str]:
    return UserFactory().id, UserFactory().id


def test_save_then_find_by_hash(store, user_ids) -> None:
    alice, _ = user_ids
    expires = utcnow() + timedelta(days=7)

    store.save(user_id=alice, token_hash="h1", expires_at=expires)
    found = store.find_by_hash("h1")

    assert found is not None
    assert found.user_id == alice
    assert found.token_hash == "h1"
    assert abs(found.expires_at - expires) < timedelta(seconds=1)


def test_find_unknown_hash_returns_none(store) -> None:
    assert store.find_by_hash("missing") is None


def test_delete_by_hash(store, user_ids) -> None:
    alice, _ = user_ids
    store.save(user_id=alice, token_hash="h1", expires_at=utcnow() + timedelta(days=1))

    assert store.delete_by_hash("h1") is True
    assert store.delete_by_hash("h1") is False
    assert store.find_by_hash("h1") is None


def test_delete_all_for_user_leaves_other_users(store, user_ids) -> None:
    alice, bob = user_ids
    later = utcnow() + timedelta(days=1)
    store.save(user_id=alice, token_hash="a1", expires_at=later)
    store.save(user_id=alice, token_hash="a2", expires_at=later)
    store.save(user_id=bob, token_hash="b1", expires_at=later)

    assert store.delete_all_for_user(alice) == 2
    assert store.find_by_hash("a1") is None
    assert store.find_by_hash("b1") is not None


def test_delete_expired_only_removes_past_rows(store, user_ids) -> None:
    alice, _ = user_ids
    now = utcnow()
    store.save(user_id=alice, token_hash="old", expires_at=now - timedelta(minutes=1))
    store.save(user_id=alice, token_hash="new", expires_at=now + timedelta(minutes=1))

    assert store.delete_expired(now) == 1
    assert store.find_by_hash("old") is None
    assert store.find_by_hash("new") is not None
