"""Authentication lifecycle: register, login, refresh, logout."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from wrenchlog.core.logger import fingerprint
from wrenchlog.core.security import CredentialStore
from wrenchlog.models import User
from wrenchlog.repositories.user import user_view
from wrenchlog.repositories.views import UserView
from wrenchlog.services._shared.base import BaseService
from wrenchlog.services._shared.dto import OwnerId
from wrenchlog.services._shared.errors import (
    AuthenticationRequiredError,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    TokenExpiredError,
    violates,
)
from wrenchlog.services._shared.ports import RefreshTokenStore
from wrenchlog.services.auth.dto import (
    AccessTokenOut,
    AuthResultOut,
    LoginIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from wrenchlog.services.auth.tokens import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenService,
)
from wrenchlog.uow.base import SessionFactory

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle service.

    Passwords are hashed by a :class:`CredentialStore`, tokens are signed by a
    :class:`TokenService`, and refresh token digests live in a
    :class:`RefreshTokenStore`. A refresh token is **not** rotated on use: it
    stays valid until it expires or the user logs out.

    :param session_factory: Callable returning the session units of work run on.
    :param credentials: Password hasher/verifier.
    :param tokens: Token issuer/verifier.
    :param refresh_store: Storage for refresh token digests.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        credentials: CredentialStore,
        tokens: TokenService,
        refresh_store: RefreshTokenStore,
    ) -> None:
        super().__init__(session_factory)
        self.credentials = credentials
        self.tokens = tokens
        self.refresh_store = refresh_store

    # ------------------------------------------------------------------ #
    # Register / Login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create a user and issue its first token pair.

        :param dto: Registration input.
        :returns: Public user plus tokens.
        :raises ConflictError: ``email_exists`` when the email is taken.
        """
        email = dto.email.strip().lower()
        # Hash before opening the transaction; it is deliberately slow.
        password_hash = self.credentials.hash(dto.password)

        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(email):
                    raise ConflictError("User", "Email already registered", reason="email_exists")
                user = uow.users.add(
                    User(email=email, name=dto.name, password_hash=password_hash)
                )
                view = user_view(user)
        except IntegrityError as exc:
            if violates(exc, "uq_users_email", "unique constraint failed: users.email"):
                raise ConflictError("User", "Email already registered", reason="email_exists") from exc
            raise

        log.info("user registered", extra={"user_id": view.id})
        return AuthResultOut(user=view, tokens=self._issue_pair(view.id))

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email and wrong password fail identically.

        :param dto: Login input.
        :returns: Access/Refresh token pair.
        :raises InvalidCredentialsError: If credentials do not match.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            user_id = user.id if user is not None else None
            password_hash = user.password_hash if user is not None else None

        if user_id is None or not self.credentials.verify(dto.password, password_hash):
            log.info("login rejected", extra={"user_id": user_id})
            raise InvalidCredentialsError()

        log.info("login succeeded", extra={"user_id": user_id})
        return self._issue_pair(user_id)

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> AccessTokenOut:
        """
        Exchange a refresh token for a new access token.

        Steps
        -----
        1. The token must verify and carry ``type=refresh``.
        2. Its digest is looked up in the store.
        3. No stored row ⇒ :class:`InvalidTokenError`.
        4. Row past its recorded expiry ⇒ row deleted, :class:`TokenExpiredError`.
        5. Row owned by another user than the token claims ⇒ :class:`InvalidTokenError`.
        6. Otherwise a new access token is issued. The refresh token is kept.
        """
        token = dto.refresh_token
        claims = self.tokens.verify(token)
        if claims.get("type") != REFRESH_TOKEN_TYPE:
            raise InvalidTokenError("Wrong token type: refresh token required")

        digest = self.tokens.hash_for_storage(token)
        token_fp = fingerprint(digest)
        row = self.refresh_store.find_by_hash(digest)
        if row is None:
            log.info("refresh rejected: unknown token", extra={"token_fp": token_fp})
            raise InvalidTokenError("Refresh token not recognised")

        if row.expires_at < self.tokens.clock():
            self.refresh_store.delete_by_hash(digest)
            log.info(
                "refresh rejected: expired",
                extra={"user_id": row.user_id, "token_fp": token_fp},
            )
            raise TokenExpiredError()

        if row.user_id != str(claims.get("sub")):
            log.warning(
                "refresh rejected: owner mismatch",
                extra={"user_id": row.user_id, "token_fp": token_fp},
            )
            raise InvalidTokenError("Refresh token does not belong to subject")

        return AccessTokenOut(access_token=self.tokens.issue_access(row.user_id))

    # ------------------------------------------------------------------ #
    # Logout / identity
    # ------------------------------------------------------------------ #

    def logout(self, user_id: OwnerId) -> int:
        """Delete every stored refresh token of ``user_id``; return how many."""
        removed = self.refresh_store.delete_all_for_user(user_id)
        log.info("logout", extra={"user_id": user_id, "count": removed})
        return removed

    def me(self, user_id: OwnerId) -> UserView:
        """
        Return the public profile of ``user_id``.

        :raises NotFoundError: When the user no longer exists.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return user_view(user)

    def authenticate(self, access_token: str | None) -> OwnerId:
        """
        Resolve an access token into the caller's identity.

        :param access_token: Encoded access JWT, or ``None`` when absent.
        :returns: Verified owner id.
        :raises AuthenticationRequiredError: When no token is presented.
        :raises InvalidTokenError: When the token does not verify or is not
            an access token.
        """
        if not access_token:
            raise AuthenticationRequiredError()
        claims = self.tokens.verify(access_token)
        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidTokenError("Wrong token type: access token required")
        return OwnerId(str(claims["sub"]))

    def purge_expired(self) -> int:
        """Drop refresh token rows past their expiry; return how many."""
        removed = self.refresh_store.delete_expired(self.tokens.clock())
        log.info("expired refresh tokens purged", extra={"count": removed})
        return removed

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user_id: str) -> TokenPairOut:
        """Persist the refresh digest first, then hand out both tokens."""
        refresh = self.tokens.issue_refresh(user_id)
        digest = self.tokens.hash_for_storage(refresh)
        self.refresh_store.save(
            user_id=user_id,
            token_hash=digest,
            expires_at=self.tokens.refresh_expires_at(),
        )
        log.info(
            "refresh token stored",
            extra={"user_id": user_id, "token_fp": fingerprint(digest)},
        )
        return TokenPairOut(access_token=self.tokens.issue_access(user_id), refresh_token=refresh)
