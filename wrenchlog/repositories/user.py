"""User repository for persistence and authentication lookups."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from wrenchlog.models import User
from wrenchlog.repositories.base import BaseRepository
from wrenchlog.repositories.hydration import as_utc
from wrenchlog.repositories.views import UserView


def user_view(user: User) -> UserView:
    """Project a user without its password hash."""
    return UserView(
        id=user.id,
        email=user.email,
        name=user.name,
        created_at=as_utc(user.created_at),  # type: ignore[arg-type]
    )


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    This repository never handles tokens; it only manages user rows.
    """

    model = User

    def _filterable_fields(self):
        """Whitelist fields safe for equality filters."""
        return {"email": User.email}

    def _updatable_fields(self):
        """Publicly allowed updatable fields (not including the hash)."""
        return {"email", "name"}

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())
