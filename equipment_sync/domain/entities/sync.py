"""
Synchronization value types.

Results and events produced when an equipment status change is applied
and cascaded to related records.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from .base import utc_now


class SyncReason(str, Enum):
    """Why an equipment status is being changed. Selects the cascade."""
    BREAKDOWN = "breakdown"
    REPAIR_COMPLETE = "repair_complete"
    MAINTENANCE = "maintenance"
    MANUAL = "manual"


class NotificationKind(str, Enum):
    """Kinds of notifications emitted to observers."""
    BREAKDOWN_DETECTED = "breakdown_detected"
    REPAIR_COMPLETED = "repair_completed"
    MAINTENANCE_STARTED = "maintenance_started"
    STATUS_CHANGED = "status_changed"


REASON_LABELS = {
    SyncReason.BREAKDOWN: "Breakdown",
    SyncReason.REPAIR_COMPLETE: "Repair complete",
    SyncReason.MAINTENANCE: "Maintenance started",
    SyncReason.MANUAL: "Manual change",
}


@dataclass
class UpdatedEntities:
    """Which entities a synchronization touched."""
    status: bool = False
    related_fault_reports: List[UUID] = field(default_factory=list)


@dataclass
class SyncResult:
    """
    Outcome of a status synchronization.

    ``success`` reflects the primary status write. A non-empty ``errors``
    list with ``success=True`` means a cascade write failed and the
    reconciler will have to close the gap.
    """
    success: bool
    updated_entities: UpdatedEntities = field(default_factory=UpdatedEntities)
    errors: List[str] = field(default_factory=list)

    @property
    def has_drift(self) -> bool:
        """True when the status was written but a cascade step failed."""
        return self.success and bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "updated_entities": {
                "status": self.updated_entities.status,
                "related_fault_reports": [str(i) for i in self.updated_entities.related_fault_reports],
            },
            "errors": list(self.errors),
        }


@dataclass
class StatusChangeEvent:
    """Record of one applied equipment status change."""
    equipment_id: UUID
    new_status: str
    reason: SyncReason
    old_status: Optional[str] = None
    related_entity_id: Optional[UUID] = None
    occurred_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "equipment_id": str(self.equipment_id),
            "old_status": self.old_status,
            "new_status": self.new_status,
            "reason": self.reason.value,
            "related_entity_id": str(self.related_entity_id) if self.related_entity_id else None,
            "occurred_at": self.occurred_at.isoformat(),
        }
