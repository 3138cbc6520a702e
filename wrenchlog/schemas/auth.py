"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

import re
from typing import Any

from marshmallow import Schema, ValidationError, fields, post_load, validate

from wrenchlog.services.auth.dto import LoginIn, RefreshIn, RegisterIn

_PASSWORD_RULES = (
    (re.compile(r"[A-Z]"), "Password must contain an upper case letter."),
    (re.compile(r"[a-z]"), "Password must contain a lower case letter."),
    (re.compile(r"\d"), "Password must contain a digit."),
)


def validate_password_strength(value: str) -> None:
    """Require at least one upper case letter, one lower case letter and one digit."""
    errors = [message for pattern, message in _PASSWORD_RULES if not pattern.search(value)]
    if errors:
        raise ValidationError(errors)


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(
        required=True,
        load_only=True,
        validate=[validate.Length(min=8, max=128), validate_password_strength],
    )
    name = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=100))

    @post_load
    def make_dto(self, data: dict[str, Any], **_: Any) -> RegisterIn:
        return RegisterIn(**data)


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1, max=128))

    @post_load
    def make_dto(self, data: dict[str, Any], **_: Any) -> LoginIn:
        return LoginIn(**data)


class RefreshSchema(Schema):
    """Input payload for exchanging a refresh token."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))

    @post_load
    def make_dto(self, data: dict[str, Any], **_: Any) -> RefreshIn:
        return RefreshIn(**data)


class UserSchema(Schema):
    """Public user payload; there is no password field to leak."""

    id = fields.String(dump_only=True)
    email = fields.Email(dump_only=True)
    name = fields.String(dump_only=True, allow_none=True)
    created_at = fields.DateTime(dump_only=True)


class TokenPairSchema(Schema):
    """Response payload containing an access/refresh pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.Constant("bearer")
