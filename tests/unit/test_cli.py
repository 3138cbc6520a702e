"""Tests for the Flask CLI commands."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from wrenchlog.models import RefreshToken
from wrenchlog.models.base import utcnow

from tests.factories.user import RefreshTokenFactory


@pytest.fixture()
def runner(app, services, monkeypatch):
    """CLI runner whose commands use services bound to the test session."""
    monkeypatch.setitem(app.extensions, "wrenchlog", services)
    return app.test_cli_runner()


def test_tokens_purge_removes_only_expired_rows(runner, session, user) -> None:
    RefreshTokenFactory(user_id=user.id, expires_at=utcnow() - timedelta(minutes=1))
    RefreshTokenFactory(user_id=user.id, expires_at=utcnow() - timedelta(days=3))
    RefreshTokenFactory(user_id=user.id)

    result = runner.invoke(args=["tokens", "purge"])

    assert result.exit_code == 0, result.output
    assert "Removed 2 expired refresh token(s)." in result.output
    remaining = session.execute(select(func.count()).select_from(RefreshToken)).scalar_one()
    assert remaining == 1


def test_tokens_purge_with_nothing_to_do(runner) -> None:
    result = runner.invoke(args=["tokens", "purge"])

    assert result.exit_code == 0
    assert "Removed 0 expired refresh token(s)." in result.output


def test_commands_are_registered(app) -> None:
    commands = app.cli.list_commands(ctx=None)

    assert "tokens" in commands
    assert "init-db" in commands
