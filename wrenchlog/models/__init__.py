from wrenchlog.models.catalog import Part, PartTag, Tag
from wrenchlog.models.maintenance import MaintenanceItem, MaintenanceRecord
from wrenchlog.models.user import RefreshToken, User
from wrenchlog.models.vehicle import OdometerUnit, Vehicle

__all__ = [
    "MaintenanceItem",
    "MaintenanceRecord",
    "OdometerUnit",
    "Part",
    "PartTag",
    "RefreshToken",
    "Tag",
    "User",
    "Vehicle",
]
