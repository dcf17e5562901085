"""
Equipment entities.

Equipment is the tracked physical machine; EquipmentStatus is its derived
operational state, written only by the synchronizer and the reconciler.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from .base import Entity


class EquipmentState(str, Enum):
    """Operational status of a piece of equipment."""
    RUNNING = "running"
    BREAKDOWN = "breakdown"
    STANDBY = "standby"
    MAINTENANCE = "maintenance"
    STOPPED = "stopped"


@dataclass(kw_only=True)
class Equipment(Entity):
    """
    A tracked physical machine.

    Identity and number are immutable once created; only the descriptive
    fields may change.
    """
    equipment_number: str
    equipment_name: str
    category: Optional[str] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    location: Optional[str] = None


@dataclass(kw_only=True)
class EquipmentStatus(Entity):
    """
    Current operational status of one piece of equipment.

    The store does not enforce one row per equipment; the reconciler does.
    """
    equipment_id: UUID
    status: EquipmentState = EquipmentState.STOPPED
    status_reason: Optional[str] = None
    status_changed_at: Optional[datetime] = None

    # Transition markers
    breakdown_start_time: Optional[datetime] = None
    maintenance_start_time: Optional[datetime] = None
    last_repair_date: Optional[datetime] = None

    notes: Optional[str] = None

    def is_breakdown(self) -> bool:
        """Check if equipment is currently broken down."""
        return self.status == EquipmentState.BREAKDOWN

    @property
    def last_activity(self) -> datetime:
        """Most recent change timestamp, used to pick a survivor among duplicates."""
        return self.status_changed_at or self.updated_at or self.created_at
