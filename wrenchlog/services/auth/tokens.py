"""Signed access/refresh tokens (HS256 JWTs via PyJWT)."""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt

from wrenchlog.core.config import TokenSettings
from wrenchlog.services._shared.errors import InvalidTokenError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ["exp", "iat", "iss", "aud", "sub", "type"]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issue, verify and digest tokens.

    Every token carries ``sub`` (user id), ``userId`` (same value),
    ``type`` (``access``/``refresh``), ``iss``, ``aud``, ``iat``, ``exp`` and a
    random ``jti`` so two tokens issued in the same second still differ.
    Verification is pure computation; no state is consulted. Expiry is
    judged against ``clock`` so issuing and verifying share one notion of now.

    :param settings: Frozen signing configuration.
    :type settings: TokenSettings
    :param clock: Source of "now"; tests pass a fixed clock.
    :type clock: Callable[[], datetime]
    """

    def __init__(
        self,
        settings: TokenSettings,
        *,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.settings = settings
        self.clock = clock

    @property
    def access_ttl(self) -> timedelta:
        return timedelta(seconds=self.settings.access_ttl_seconds)

    @property
    def refresh_ttl(self) -> timedelta:
        return timedelta(seconds=self.settings.refresh_ttl_seconds)

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def _issue(self, user_id: str, token_type: str, ttl: timedelta) -> str:
        issued_at = self.clock()
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "userId": str(user_id),
            "type": token_type,
            "iss": self.settings.issuer,
            "aud": self.settings.audience,
            "iat": issued_at,
            "exp": issued_at + ttl,
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self.settings.secret, algorithm=ALGORITHM)

    def issue_access(self, user_id: str) -> str:
        """Sign an access token valid for the access TTL (15 minutes by default)."""
        return self._issue(user_id, ACCESS_TOKEN_TYPE, self.access_ttl)

    def issue_refresh(self, user_id: str) -> str:
        """Sign a refresh token valid for the refresh TTL (7 days by default)."""
        return self._issue(user_id, REFRESH_TOKEN_TYPE, self.refresh_ttl)

    def refresh_expires_at(self) -> datetime:
        """Expiry to record next to a refresh token issued now."""
        return self.clock() + self.refresh_ttl

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def verify(self, token: str) -> dict[str, Any]:
        """
        Check signature, issuer, audience and expiry.

        :param token: Encoded JWT.
        :type token: str
        :returns: Decoded claims.
        :rtype: dict[str, Any]
        :raises InvalidTokenError: On any failure, including expiry.
        """
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token missing")
        try:
            claims = jwt.decode(
                token,
                self.settings.secret,
                algorithms=[ALGORITHM],
                audience=self.settings.audience,
                issuer=self.settings.issuer,
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("Token invalid") from exc
        exp = claims["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise InvalidTokenError("Token invalid")
        if exp <= self.clock().timestamp():
            raise InvalidTokenError("Token expired")
        if claims.get("type") not in (ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE):
            raise InvalidTokenError("Unknown token type")
        return claims

    def type_of(self, token: str) -> str | None:
        """Return the ``type`` claim, or ``None`` if the token does not verify."""
        try:
            return str(self.verify(token)["type"])
        except InvalidTokenError:
            return None

    def user_id_of(self, token: str) -> str | None:
        """Return the user id claim, or ``None`` if the token does not verify."""
        try:
            return str(self.verify(token)["sub"])
        except InvalidTokenError:
            return None

    # ------------------------------------------------------------------ #
    # Storage digest
    # ------------------------------------------------------------------ #

    def hash_for_storage(self, token: str) -> str:
        """
        Deterministic keyed digest (HMAC-SHA256) of a refresh token.

        The same token always maps to the same digest so the store can look it
        up; without the signing secret the digest cannot be recomputed.

        :param token: Raw refresh token.
        :type token: str
        :returns: 64 hex characters.
        :rtype: str
        """
        key = self.settings.secret.encode("utf-8")
        return hmac.new(key, token.encode("utf-8"), hashlib.sha256).hexdigest()
