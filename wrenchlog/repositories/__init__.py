"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from wrenchlog.repositories.base import (
    BaseRepository,
    count_select,
    page_offset,
    paginate_select,
)
from wrenchlog.repositories.maintenance import (
    MaintenanceFilters,
    MaintenanceItemRepository,
    MaintenanceRecordRepository,
)
from wrenchlog.repositories.owned import OwnedRepository
from wrenchlog.repositories.part import PartFilters, PartRepository
from wrenchlog.repositories.refresh_token import RefreshTokenRepository
from wrenchlog.repositories.tag import TagRepository
from wrenchlog.repositories.tag_association import TagAssociationManager
from wrenchlog.repositories.user import UserRepository
from wrenchlog.repositories.vehicle import VehicleRepository

__all__ = [
    # Base
    "BaseRepository",
    "OwnedRepository",
    "count_select",
    "page_offset",
    "paginate_select",
    # Domain
    "MaintenanceFilters",
    "MaintenanceItemRepository",
    "MaintenanceRecordRepository",
    "PartFilters",
    "PartRepository",
    "RefreshTokenRepository",
    "TagAssociationManager",
    "TagRepository",
    "UserRepository",
    "VehicleRepository",
]
