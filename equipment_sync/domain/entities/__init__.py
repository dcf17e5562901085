"""
Domain entities for equipment synchronization.
"""
from .base import Entity, utc_now
from .equipment import (
    EquipmentState,
    Equipment,
    EquipmentStatus,
)
from .fault_report import (
    FaultStatus,
    OPEN_FAULT_STATUSES,
    UrgencyLevel,
    IssueType,
    FaultReport,
)
from .repair_record import (
    RepairStatus,
    RepairRecord,
)
from .sync import (
    SyncReason,
    NotificationKind,
    UpdatedEntities,
    SyncResult,
    StatusChangeEvent,
)
from .reconciliation import (
    IssueKind,
    StoreSnapshot,
    ReconciliationPolicy,
    ReconciliationIssue,
    IssueReport,
    RepairSummary,
)

__all__ = [
    # Base
    "Entity",
    "utc_now",
    # Equipment
    "EquipmentState",
    "Equipment",
    "EquipmentStatus",
    # Fault reports
    "FaultStatus",
    "OPEN_FAULT_STATUSES",
    "UrgencyLevel",
    "IssueType",
    "FaultReport",
    # Repairs
    "RepairStatus",
    "RepairRecord",
    # Synchronization
    "SyncReason",
    "NotificationKind",
    "UpdatedEntities",
    "SyncResult",
    "StatusChangeEvent",
    # Reconciliation
    "IssueKind",
    "StoreSnapshot",
    "ReconciliationPolicy",
    "ReconciliationIssue",
    "IssueReport",
    "RepairSummary",
]
