# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass

from wrenchlog.repositories.views import UserView

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: User email (normalized by the service).
    :type email: str
    :param password: Raw password (hashed, never stored).
    :type password: str
    :param name: Optional display name.
    :type name: str | None
    """

    email: str
    password: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    """
    Output DTO of a refresh: a new access token only.

    :param access_token: Encoded access JWT.
    :type access_token: str
    """

    access_token: str


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Public user plus a freshly issued token pair.

    :param user: User read model (no password hash).
    :type user: UserView
    :param tokens: Access/refresh pair.
    :type tokens: TokenPairOut
    """

    user: UserView
    tokens: TokenPairOut
