"""Command-line interface registration for the Flask application."""

from __future__ import annotations

from flask import Flask

from .database import init_db_command
from .tokens import tokens_cli


def init_app(app: Flask) -> None:
    """Register application-specific CLI commands.

    Parameters
    ----------
    app:
        Flask application instance whose CLI registry will receive the
        ``tokens`` group and the ``init-db`` command.
    """
    app.cli.add_command(tokens_cli)
    app.cli.add_command(init_db_command)
