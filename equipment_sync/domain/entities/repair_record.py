"""
Repair record entities.

A repair record is one unit of repair work against a fault report.
Completion of a repair triggers equipment recovery.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from .base import Entity


class RepairStatus(str, Enum):
    """Repair execution status."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(kw_only=True)
class RepairRecord(Entity):
    """Repair work performed against a fault report."""
    fault_report_id: UUID
    equipment_id: UUID
    status: RepairStatus = RepairStatus.PENDING
    technician: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None

    def is_completed(self) -> bool:
        return self.status == RepairStatus.COMPLETED
