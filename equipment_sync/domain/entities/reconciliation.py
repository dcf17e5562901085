"""
Reconciliation value types.

Snapshots of the entity store, the issues found in them, and the
summaries produced by diagnose and repair passes.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from .base import utc_now
from .equipment import Equipment, EquipmentState, EquipmentStatus
from .fault_report import FaultReport


class IssueKind(str, Enum):
    """Cross-entity invariant violations detected by reconciliation."""
    MISSING_STATUS = "missing_status"
    ORPHAN_STATUS = "orphan_status"
    DUPLICATE_STATUS = "duplicate_status"
    UNDER_REPORTED_BREAKDOWN = "under_reported_breakdown"
    STALE_BREAKDOWN = "stale_breakdown"


@dataclass
class StoreSnapshot:
    """In-memory copy of the records reconciliation looks at."""
    equipment: List[Equipment] = field(default_factory=list)
    statuses: List[EquipmentStatus] = field(default_factory=list)
    open_faults: List[FaultReport] = field(default_factory=list)
    taken_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class ReconciliationPolicy:
    """Knobs for how drift is judged and corrected."""
    default_status: EquipmentState = EquipmentState.STOPPED
    # Equipment under active repair may sit in maintenance with open faults
    tolerate_maintenance: bool = True


@dataclass
class ReconciliationIssue:
    """One invariant violation and what it takes to fix it."""
    kind: IssueKind
    equipment_id: UUID
    description: str
    equipment_number: Optional[str] = None
    status_id: Optional[UUID] = None
    current_status: Optional[EquipmentState] = None
    target_status: Optional[EquipmentState] = None
    related_fault_id: Optional[UUID] = None
    redundant_status_ids: List[UUID] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "equipment_id": str(self.equipment_id),
            "equipment_number": self.equipment_number,
            "status_id": str(self.status_id) if self.status_id else None,
            "current_status": self.current_status.value if self.current_status else None,
            "target_status": self.target_status.value if self.target_status else None,
            "related_fault_id": str(self.related_fault_id) if self.related_fault_id else None,
            "redundant_status_ids": [str(i) for i in self.redundant_status_ids],
            "description": self.description,
        }


@dataclass
class IssueReport:
    """Result of a read-only diagnostic pass."""
    issues: List[ReconciliationIssue] = field(default_factory=list)
    equipment_checked: int = 0
    checked_at: datetime = field(default_factory=utc_now)

    @property
    def total(self) -> int:
        return len(self.issues)

    @property
    def counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for issue in self.issues:
            counts[issue.kind.value] = counts.get(issue.kind.value, 0) + 1
        return counts

    @property
    def descriptions(self) -> List[str]:
        return [issue.description for issue in self.issues]

    def of_kind(self, kind: IssueKind) -> List[ReconciliationIssue]:
        return [issue for issue in self.issues if issue.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "counts": self.counts,
            "equipment_checked": self.equipment_checked,
            "checked_at": self.checked_at.isoformat(),
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass
class RepairSummary:
    """Result of a mutating reconciliation pass."""
    synchronized_count: int = 0
    errors: List[str] = field(default_factory=list)
    issues_found: int = 0
    started_at: datetime = field(default_factory=utc_now)
    finished_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "synchronized_count": self.synchronized_count,
            "issues_found": self.issues_found,
            "errors": list(self.errors),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
