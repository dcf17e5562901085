"""
Fault report entities.

A fault report ("breakdown report") is a reported malfunction against a
piece of equipment, with its own lifecycle.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from .base import Entity, utc_now


class FaultStatus(str, Enum):
    """Fault report lifecycle status."""
    REPORTED = "reported"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    # Terminal values accepted from upstream data
    REJECTED = "rejected"
    CANCELLED = "cancelled"


OPEN_FAULT_STATUSES = frozenset({FaultStatus.REPORTED, FaultStatus.IN_PROGRESS})


class UrgencyLevel(str, Enum):
    """How urgently a fault needs attention."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueType(str, Enum):
    """Category of the reported malfunction."""
    MECHANICAL = "mechanical"
    ELECTRICAL = "electrical"
    SOFTWARE = "software"
    SAFETY = "safety"
    OTHER = "other"


@dataclass(kw_only=True)
class FaultReport(Entity):
    """A malfunction reported against a piece of equipment."""
    equipment_id: UUID
    description: str
    status: FaultStatus = FaultStatus.REPORTED
    urgency_level: UrgencyLevel = UrgencyLevel.MEDIUM
    issue_type: IssueType = IssueType.OTHER
    reporter_name: Optional[str] = None
    reported_at: Optional[datetime] = None
    resolution_date: Optional[datetime] = None
    notes: Optional[str] = None

    def __post_init__(self):
        if self.reported_at is None:
            self.reported_at = self.created_at

    def is_open(self) -> bool:
        """Check if fault still requires work (reported or in progress)."""
        return self.status in OPEN_FAULT_STATUSES

    def is_terminal(self) -> bool:
        """Check if fault is in a terminal or terminal-equivalent state."""
        return not self.is_open()

    def append_note(self, text: str) -> str:
        """Return notes with a new line appended."""
        return f"{self.notes}\n{text}" if self.notes else text


def resolution_note(timestamp: Optional[datetime] = None) -> str:
    """Annotation written when a fault is auto-completed by a repair."""
    ts = (timestamp or utc_now()).isoformat()
    return f"[{ts}] Automatically completed on repair completion"
