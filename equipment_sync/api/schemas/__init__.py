# API Schemas
from .sync_schemas import (
    StatusChangeRequest,
    UpdatedEntitiesResponse,
    SyncResultResponse,
    EquipmentStatusResponse,
    TransitionsResponse,
    TransitionCheckResponse,
)
from .reconciliation_schemas import (
    IssueResponse,
    IssueReportResponse,
    RepairSummaryResponse,
)
from .lifecycle_schemas import (
    FaultCreateRequest,
    FaultStatusUpdateRequest,
    FaultReportResponse,
    FaultOutcomeResponse,
    RepairStartRequest,
    RepairStatusUpdateRequest,
    RepairRecordResponse,
    RepairOutcomeResponse,
)

__all__ = [
    # Sync
    "StatusChangeRequest",
    "UpdatedEntitiesResponse",
    "SyncResultResponse",
    "EquipmentStatusResponse",
    "TransitionsResponse",
    "TransitionCheckResponse",
    # Reconciliation
    "IssueResponse",
    "IssueReportResponse",
    "RepairSummaryResponse",
    # Lifecycle
    "FaultCreateRequest",
    "FaultStatusUpdateRequest",
    "FaultReportResponse",
    "FaultOutcomeResponse",
    "RepairStartRequest",
    "RepairStatusUpdateRequest",
    "RepairRecordResponse",
    "RepairOutcomeResponse",
]
