"""Application settings with environment-based simple classes."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Placeholder shipped in BaseConfig; only tolerated in debug/testing runs.
DEFAULT_JWT_SECRET: Final[str] = "CHANGE_ME_JWT"

log = logging.getLogger(__name__)

# Loads .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    SECRET_KEY: str
        Flask secret. Unused by the token layer, which has its own key.
    JWT_SECRET_KEY: str
        HMAC key used to sign access and refresh tokens and to key refresh
        token digests. Must be overridden in production.
    JWT_ISSUER, JWT_AUDIENCE: str
        Registered ``iss``/``aud`` claims written and enforced on every token.
    JWT_ACCESS_TTL_SECONDS, JWT_REFRESH_TTL_SECONDS: int
        Token lifetimes (15 minutes and 7 days by default).
    PASSWORD_HASH_METHOD: str
        Werkzeug hashing method string used by the credential store.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE: int
        Paging defaults applied by the listing services.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("WRENCHLOG_JWT_SECRET", DEFAULT_JWT_SECRET)
    JWT_ISSUER = os.getenv("WRENCHLOG_JWT_ISSUER", "wrenchlog")
    JWT_AUDIENCE = os.getenv("WRENCHLOG_JWT_AUDIENCE", "wrenchlog")
    JWT_ACCESS_TTL_SECONDS = env_int("JWT_ACCESS_TTL_SECONDS", 15 * 60)
    JWT_REFRESH_TTL_SECONDS = env_int("JWT_REFRESH_TTL_SECONDS", 7 * 24 * 60 * 60)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt:32768:8:1")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./wrenchlog.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Paging
    DEFAULT_PAGE_SIZE = env_int("DEFAULT_PAGE_SIZE", 20)
    MAX_PAGE_SIZE = env_int("MAX_PAGE_SIZE", 100)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a cheap password hash so the suite stays fast.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    JWT_SECRET_KEY = "testing-secret-key-with-enough-entropy"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Immutable signing configuration handed to the token service.

    :param secret: HMAC signing key.
    :type secret: str
    :param issuer: ``iss`` claim written and required on verification.
    :type issuer: str
    :param audience: ``aud`` claim written and required on verification.
    :type audience: str
    :param access_ttl_seconds: Access token lifetime.
    :type access_ttl_seconds: int
    :param refresh_ttl_seconds: Refresh token lifetime.
    :type refresh_ttl_seconds: int
    """

    secret: str
    issuer: str = "wrenchlog"
    audience: str = "wrenchlog"
    access_ttl_seconds: int = 15 * 60
    refresh_ttl_seconds: int = 7 * 24 * 60 * 60

    def __post_init__(self) -> None:
        if not self.secret or not self.secret.strip():
            raise ValueError("A non-empty JWT signing secret is required.")
        if self.access_ttl_seconds <= 0 or self.refresh_ttl_seconds <= 0:
            raise ValueError("Token TTLs must be positive.")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> TokenSettings:
        """
        Build settings from a Flask-style config mapping.

        The placeholder secret is refused unless ``DEBUG`` or ``TESTING`` is
        on, in which case a warning is logged.

        :param config: Mapping holding the ``JWT_*`` keys.
        :type config: Mapping[str, Any]
        :returns: Frozen settings.
        :rtype: TokenSettings
        :raises ValueError: If the secret is missing, or is the placeholder
            outside debug/testing.
        """
        secret = str(config.get("JWT_SECRET_KEY") or "")
        if secret == DEFAULT_JWT_SECRET:
            if not (config.get("DEBUG") or config.get("TESTING")):
                raise ValueError(
                    "WRENCHLOG_JWT_SECRET must be set; refusing the placeholder secret."
                )
            log.warning("Using the placeholder JWT secret; set WRENCHLOG_JWT_SECRET.")
        return cls(
            secret=secret,
            issuer=str(config.get("JWT_ISSUER", "wrenchlog")),
            audience=str(config.get("JWT_AUDIENCE", "wrenchlog")),
            access_ttl_seconds=int(config.get("JWT_ACCESS_TTL_SECONDS", 15 * 60)),
            refresh_ttl_seconds=int(config.get("JWT_REFRESH_TTL_SECONDS", 7 * 24 * 60 * 60)),
        )
