"""
SQLAlchemy ORM models for the entity store.
"""
from .base import Base, metadata
from .equipment_model import (
    EquipmentInfoModel,
    EquipmentStatusModel,
    BreakdownReportModel,
    RepairRecordModel,
)

__all__ = [
    # Base
    "Base",
    "metadata",
    # Models
    "EquipmentInfoModel",
    "EquipmentStatusModel",
    "BreakdownReportModel",
    "RepairRecordModel",
]
