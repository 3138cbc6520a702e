"""Flask CLI commands for stored refresh tokens."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
def tokens_cli() -> None:
    """Collection of refresh token housekeeping commands."""


@tokens_cli.command("purge")
@with_appcontext
def purge_command() -> None:
    """Delete refresh tokens whose recorded expiry has passed."""
    services = current_app.extensions["wrenchlog"]
    removed = services.auth.purge_expired()
    LOGGER.info("tokens purge finished", extra={"count": removed})
    click.echo(f"Removed {removed} expired refresh token(s).")
