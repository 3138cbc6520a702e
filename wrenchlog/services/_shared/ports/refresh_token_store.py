"""Persistence port for refresh-token records."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Protocol

from wrenchlog.models.base import new_id, utcnow
from wrenchlog.repositories.views import RefreshTokenView


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh token digests.

    Implementations only ever see the keyed digest of a token, never the raw
    value. Each call is atomic on its own.
    """

    def save(self, *, user_id: str, token_hash: str, expires_at: datetime) -> RefreshTokenView:
        """
        Record a digest for ``user_id``.

        This MUST be executed *before* the raw token is handed to the client.
        """

    def find_by_hash(self, token_hash: str) -> RefreshTokenView | None:
        """Fetch the stored row for a digest (if present)."""

    def delete_by_hash(self, token_hash: str) -> bool:
        """Remove a single digest. :returns: True if it existed."""

    def delete_all_for_user(self, user_id: str) -> int:
        """
        Remove every digest of the given user.

        :returns: Number of rows removed.
        """

    def delete_expired(self, now: datetime | None = None) -> int:
        """
        Remove digests whose recorded expiry is before ``now``.

        :returns: Number of rows removed.
        """


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store.

    .. note::
       Uses a threading lock to simulate atomicity in unit tests.
    """

    def __init__(self) -> None:
        self._by_hash: dict[str, RefreshTokenView] = {}
        self._lock = threading.Lock()

    def save(self, *, user_id: str, token_hash: str, expires_at: datetime) -> RefreshTokenView:
        with self._lock:
            if token_hash in self._by_hash:
                raise ValueError("Duplicate refresh token digest")
            view = RefreshTokenView(
                id=new_id(),
                user_id=user_id,
                token_hash=token_hash,
                expires_at=_aware(expires_at),
                created_at=utcnow(),
            )
            self._by_hash[token_hash] = view
            return view

    def find_by_hash(self, token_hash: str) -> RefreshTokenView | None:
        with self._lock:
            return self._by_hash.get(token_hash)

    def delete_by_hash(self, token_hash: str) -> bool:
        with self._lock:
            return self._by_hash.pop(token_hash, None) is not None

    def delete_all_for_user(self, user_id: str) -> int:
        with self._lock:
            doomed = [h for h, v in self._by_hash.items() if v.user_id == user_id]
            for h in doomed:
                del self._by_hash[h]
            return len(doomed)

    def delete_expired(self, now: datetime | None = None) -> int:
        cutoff = _aware(now or utcnow())
        with self._lock:
            doomed = [h for h, v in self._by_hash.items() if v.expires_at < cutoff]
            for h in doomed:
                del self._by_hash[h]
            return len(doomed)

    def backdate(self, token_hash: str, expires_at: datetime) -> None:
        """Rewrite a stored expiry; tests use it to simulate elapsed time."""
        with self._lock:
            view = self._by_hash[token_hash]
            self._by_hash[token_hash] = replace(view, expires_at=_aware(expires_at))
