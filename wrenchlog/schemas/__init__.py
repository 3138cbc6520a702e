"""Convenience exports for request/response schemas."""

from __future__ import annotations

from .auth import LoginSchema, RefreshSchema, RegisterSchema, TokenPairSchema, UserSchema
from .catalog import (
    PartCreateSchema,
    PartFilterSchema,
    PartSchema,
    PartUpdateSchema,
    TagCreateSchema,
    TagSchema,
    TagUpdateSchema,
)
from .common import MetaSchema, PaginationQuerySchema, build_meta, load_or_raise
from .maintenance import (
    MaintenanceCreateSchema,
    MaintenanceFilterSchema,
    MaintenanceItemSchema,
    MaintenanceItemUpdateSchema,
    MaintenanceRecordSchema,
    MaintenanceUpdateSchema,
)
from .vehicle import VehicleCreateSchema, VehicleSchema, VehicleUpdateSchema

__all__ = [
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UserSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "build_meta",
    "load_or_raise",
    "VehicleCreateSchema",
    "VehicleUpdateSchema",
    "VehicleSchema",
    "TagCreateSchema",
    "TagUpdateSchema",
    "TagSchema",
    "PartCreateSchema",
    "PartUpdateSchema",
    "PartFilterSchema",
    "PartSchema",
    "MaintenanceCreateSchema",
    "MaintenanceUpdateSchema",
    "MaintenanceItemSchema",
    "MaintenanceItemUpdateSchema",
    "MaintenanceFilterSchema",
    "MaintenanceRecordSchema",
]
