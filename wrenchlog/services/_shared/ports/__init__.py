"""
wrenchlog.services._shared.ports
================================

*Ports* (hexagonal interfaces) that the auth service depends on.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore` and an in-memory implementation
    used by unit tests.

Concrete adapters (e.g., the SQL store) implement these interfaces under
``wrenchlog.infra``.
"""

from __future__ import annotations

from .refresh_token_store import InMemoryRefreshTokenStore, RefreshTokenStore

__all__ = [
    "RefreshTokenStore",
    "InMemoryRefreshTokenStore",
]
