"""Refresh token repository: digests only, never raw tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select

from wrenchlog.models import RefreshToken
from wrenchlog.repositories.base import BaseRepository
from wrenchlog.repositories.hydration import as_utc
from wrenchlog.repositories.views import RefreshTokenView


def refresh_token_view(row: RefreshToken) -> RefreshTokenView:
    return RefreshTokenView(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        expires_at=as_utc(row.expires_at),  # type: ignore[arg-type]
        created_at=as_utc(row.created_at),  # type: ignore[arg-type]
    )


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`."""

    model = RefreshToken

    def save(self, user_id: str, token_hash: str, expires_at: datetime) -> RefreshTokenView:
        """Insert a refresh token digest for ``user_id``."""
        row = self.add(RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at))
        return refresh_token_view(row)

    def find_by_hash(self, token_hash: str) -> RefreshTokenView | None:
        stmt = select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        row = self.session.execute(stmt).scalars().first()
        return None if row is None else refresh_token_view(row)

    def delete_by_hash(self, token_hash: str) -> bool:
        stmt = delete(RefreshToken).where(RefreshToken.token_hash == token_hash)
        return bool(self.session.execute(stmt).rowcount)

    def delete_all_for_user(self, user_id: str) -> int:
        stmt = delete(RefreshToken).where(RefreshToken.user_id == user_id)
        return int(self.session.execute(stmt).rowcount or 0)

    def delete_expired(self, now: datetime) -> int:
        """Remove rows whose expiry is strictly before ``now``."""
        stmt = delete(RefreshToken).where(RefreshToken.expires_at < now)
        return int(self.session.execute(stmt).rowcount or 0)
