"""
Pydantic schemas for fault report and repair endpoints.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ...domain.entities import (
    FaultReport,
    FaultStatus,
    IssueType,
    RepairRecord,
    RepairStatus,
    UrgencyLevel,
)
from .sync_schemas import SyncResultResponse


class FaultCreateRequest(BaseModel):
    """Request to report a fault."""
    equipment_id: UUID
    description: str = Field(..., min_length=1, max_length=2000)
    urgency_level: UrgencyLevel = Field(default=UrgencyLevel.MEDIUM)
    issue_type: IssueType = Field(default=IssueType.OTHER)
    reporter_name: Optional[str] = Field(default=None, max_length=100)


class FaultStatusUpdateRequest(BaseModel):
    """Request to move a fault report along its lifecycle."""
    status: FaultStatus
    notes: Optional[str] = Field(default=None, max_length=2000)


class FaultReportResponse(BaseModel):
    """Response for fault report information."""
    id: UUID
    equipment_id: UUID
    description: str
    status: str
    urgency_level: str
    issue_type: str
    reporter_name: Optional[str] = None
    reported_at: Optional[datetime] = None
    resolution_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, fault: FaultReport) -> "FaultReportResponse":
        return cls(
            id=fault.id,
            equipment_id=fault.equipment_id,
            description=fault.description,
            status=fault.status.value,
            urgency_level=fault.urgency_level.value,
            issue_type=fault.issue_type.value,
            reporter_name=fault.reporter_name,
            reported_at=fault.reported_at,
            resolution_date=fault.resolution_date,
            notes=fault.notes,
            created_at=fault.created_at,
        )


class FaultOutcomeResponse(BaseModel):
    """Fault report plus the equipment synchronization it triggered, if any."""
    fault_report: FaultReportResponse
    sync_result: Optional[SyncResultResponse] = None


class RepairStartRequest(BaseModel):
    """Request to start a repair on a fault report."""
    technician: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=2000)


class RepairStatusUpdateRequest(BaseModel):
    """Request to move a repair record along its lifecycle."""
    status: RepairStatus
    notes: Optional[str] = Field(default=None, max_length=2000)


class RepairRecordResponse(BaseModel):
    """Response for repair record information."""
    id: UUID
    fault_report_id: UUID
    equipment_id: UUID
    status: str
    technician: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, repair: RepairRecord) -> "RepairRecordResponse":
        return cls(
            id=repair.id,
            fault_report_id=repair.fault_report_id,
            equipment_id=repair.equipment_id,
            status=repair.status.value,
            technician=repair.technician,
            started_at=repair.started_at,
            completed_at=repair.completed_at,
            notes=repair.notes,
            created_at=repair.created_at,
        )


class RepairOutcomeResponse(BaseModel):
    """Repair record plus the equipment synchronization it triggered, if any."""
    repair_record: RepairRecordResponse
    sync_result: Optional[SyncResultResponse] = None
