"""Flask CLI command creating the relational schema."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from wrenchlog.core.extensions import db


@click.command("init-db")
@click.option("--drop", is_flag=True, help="Drop every table before creating it again.")
@with_appcontext
def init_db_command(drop: bool) -> None:
    """Create all tables known to the model metadata."""
    if drop:
        db.drop_all()
    db.create_all()
    click.echo("Database schema ready.")
