"""Identity models: users and their persisted refresh tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from wrenchlog.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin


class User(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Authentication identity; owns every other row transitively.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    name : str | None
        Optional display name.
    password_hash : str
        Adaptive hash produced by the credential store. The raw password is
        never assigned to the model.
    created_at : datetime
        Creation timestamp (from mixin).
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and sanity-check the email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens in the schemas.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v


class RefreshToken(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Server-side record of an issued refresh token.

    Only the keyed digest of the token is stored, never the token itself.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_refresh_tokens_token_hash"),
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )
