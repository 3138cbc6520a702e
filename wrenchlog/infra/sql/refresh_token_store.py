# comments in English; reST docstrings
from __future__ import annotations

from datetime import datetime

from wrenchlog.models.base import utcnow
from wrenchlog.repositories.views import RefreshTokenView
from wrenchlog.services._shared.ports import RefreshTokenStore
from wrenchlog.uow import SessionFactory, SQLAlchemyUnitOfWork


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh token store.

    Every call runs in its own unit of work and is committed before it
    returns, so a digest is durable before the raw token leaves the service.

    :param session_factory: Callable returning the session to run on.
    :type session_factory: SessionFactory
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory

    def _uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(self.session_factory)

    def save(self, *, user_id: str, token_hash: str, expires_at: datetime) -> RefreshTokenView:
        with self._uow() as uow:
            return uow.refresh_tokens.save(user_id, token_hash, expires_at)

    def find_by_hash(self, token_hash: str) -> RefreshTokenView | None:
        with self._uow() as uow:
            return uow.refresh_tokens.find_by_hash(token_hash)

    def delete_by_hash(self, token_hash: str) -> bool:
        with self._uow() as uow:
            return uow.refresh_tokens.delete_by_hash(token_hash)

    def delete_all_for_user(self, user_id: str) -> int:
        with self._uow() as uow:
            return uow.refresh_tokens.delete_all_for_user(user_id)

    def delete_expired(self, now: datetime | None = None) -> int:
        with self._uow() as uow:
            return uow.refresh_tokens.delete_expired(now or utcnow())
