"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP.
Each carries a stable machine-readable ``code`` that callers surface as-is.

The translation to HTTP responses (RFC 7807) is handled by
``wrenchlog/core/errors.py``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str, *aliases: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite reports the offending
    columns (``tags.owner_id, tags.name``) or only the constraint kind, so
    callers pass those forms as ``aliases``.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :type exc: IntegrityError
    :param constraint_name: Constraint name to look for.
    :type constraint_name: str
    :param aliases: Other message fragments identifying the same constraint.
    :type aliases: str
    :returns: ``True`` if the message mentions any of the fragments.
    :rtype: bool
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return any(fragment.lower() in message for fragment in (constraint_name, *aliases))


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - ``code`` is the stable error kind reported to callers.
    """

    code: ClassVar[str] = "internal_error"


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ValidationFailedError(ServiceError):
    """
    Raised when a request payload is malformed or out of range.

    :param errors: Field name → list of messages.
    :type errors: Mapping[str, Any]
    """

    errors: Mapping[str, Any] = field(default_factory=dict)

    code: ClassVar[str] = "validation_error"

    def __str__(self) -> str:
        fields = ", ".join(sorted(self.errors)) or "payload"
        return f"Validation failed for: {fields}"


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an owner-scoped lookup returns nothing.

    :param entity: Entity name (e.g., "Vehicle").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    code: ClassVar[str] = "not_found"

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "Tag").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    :param reason: Narrower machine code (``email_exists``, ``tag_exists``...).
    :type reason: str | None
    """

    entity: str
    detail: str
    reason: str | None = None

    code: ClassVar[str] = "conflict"

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


@dataclass(slots=True)
class InvalidReferenceError(ServiceError):
    """
    Raised when caller-supplied foreign ids do not resolve for the owner.

    :param entity: Referenced entity name ("Tag" or "Part").
    :type entity: str
    :param missing: Ids that did not resolve.
    :type missing: tuple[str, ...]
    """

    entity: str
    missing: tuple[str, ...] = ()

    _CODES: ClassVar[dict[str, str]] = {"Tag": "invalid_tags", "Part": "invalid_parts"}

    @property
    def code(self) -> str:  # type: ignore[override]
        return self._CODES.get(self.entity, "validation_error")

    @classmethod
    def of(cls, entity: str, missing: Iterable[str]) -> InvalidReferenceError:
        return cls(entity=entity, missing=tuple(sorted(set(missing))))

    def __str__(self) -> str:
        return f"Unknown {self.entity} ids: {', '.join(self.missing)}"


class AuthenticationRequiredError(ServiceError):
    """Raised when no verified identity accompanies a request."""

    code: ClassVar[str] = "authentication_required"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class InvalidCredentialsError(ServiceError):
    """Raised when an email/password pair does not authenticate."""

    code: ClassVar[str] = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class InvalidTokenError(ServiceError):
    """Raised when a token is malformed, badly signed, expired or unknown."""

    code: ClassVar[str] = "invalid_token"

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class TokenExpiredError(ServiceError):
    """Raised when a stored refresh token has passed its recorded expiry."""

    code: ClassVar[str] = "token_expired"

    def __init__(self, message: str = "Refresh token expired") -> None:
        super().__init__(message)
