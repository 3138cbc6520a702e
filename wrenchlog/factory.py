"""Application factory wiring Flask extensions, error handlers and services."""

from __future__ import annotations

from flask import Flask

from wrenchlog.core.config import BaseConfig, get_config
from wrenchlog.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    The wired services are exposed as ``app.extensions["wrenchlog"]``.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from wrenchlog.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from wrenchlog.core import errors

    errors.init_app(app)

    from wrenchlog.container import build_services

    app.extensions["wrenchlog"] = build_services(extensions.db.session, app.config)

    from wrenchlog import cli as app_cli

    app_cli.init_app(app)

    return app
