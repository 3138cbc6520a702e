"""Explicit wiring of services from configuration and a session factory."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from wrenchlog.core.config import TokenSettings
from wrenchlog.core.security import DEFAULT_METHOD, CredentialStore
from wrenchlog.infra.sql import SQLAlchemyRefreshTokenStore
from wrenchlog.services._shared.ports import RefreshTokenStore
from wrenchlog.services.auth.service import AuthService
from wrenchlog.services.auth.tokens import TokenService
from wrenchlog.services.maintenance.service import MaintenanceService
from wrenchlog.services.parts.service import PartService
from wrenchlog.services.tags.service import TagService
from wrenchlog.services.vehicles.service import VehicleService
from wrenchlog.uow.base import SessionFactory


@dataclass(frozen=True, slots=True)
class Services:
    """Every application service, built once per process."""

    auth: AuthService
    vehicles: VehicleService
    tags: TagService
    parts: PartService
    maintenance: MaintenanceService


def build_services(
    session_factory: SessionFactory,
    config: Mapping[str, Any],
    *,
    refresh_store: RefreshTokenStore | None = None,
) -> Services:
    """
    Construct all services with constructor injection.

    :param session_factory: Callable returning the session to run on
        (``db.session`` in the app, a test-bound session in tests).
    :param config: Flask config or any mapping with the same keys.
    :param refresh_store: Override for the refresh token store; defaults to
        the SQL store on ``session_factory``.
    :returns: The wired services.
    :rtype: Services
    """
    paging = {
        "default_page_size": int(config.get("DEFAULT_PAGE_SIZE", 20)),
        "max_page_size": int(config.get("MAX_PAGE_SIZE", 100)),
    }
    tokens = TokenService(TokenSettings.from_mapping(config))
    credentials = CredentialStore(config.get("PASSWORD_HASH_METHOD") or DEFAULT_METHOD)
    store = refresh_store or SQLAlchemyRefreshTokenStore(session_factory)
    return Services(
        auth=AuthService(
            session_factory, credentials=credentials, tokens=tokens, refresh_store=store
        ),
        vehicles=VehicleService(session_factory, **paging),
        tags=TagService(session_factory, **paging),
        parts=PartService(session_factory, **paging),
        maintenance=MaintenanceService(session_factory, **paging),
    )
