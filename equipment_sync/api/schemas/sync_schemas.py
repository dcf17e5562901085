"""
Pydantic schemas for equipment status and transition endpoints.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ...domain.entities import EquipmentState, EquipmentStatus, SyncReason, SyncResult


class StatusChangeRequest(BaseModel):
    """Request to change an equipment's status."""
    new_status: EquipmentState
    reason: SyncReason = Field(default=SyncReason.MANUAL)
    related_entity_id: Optional[UUID] = Field(
        default=None,
        description='Fault report (breakdown) or repair record (repair_complete) behind the change',
    )


class UpdatedEntitiesResponse(BaseModel):
    """Entities touched by a synchronization."""
    status: bool
    related_fault_reports: List[UUID] = []


class SyncResultResponse(BaseModel):
    """Outcome of a status synchronization."""
    success: bool
    updated_entities: UpdatedEntitiesResponse
    errors: List[str] = []

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResultResponse":
        return cls(
            success=result.success,
            updated_entities=UpdatedEntitiesResponse(
                status=result.updated_entities.status,
                related_fault_reports=result.updated_entities.related_fault_reports,
            ),
            errors=result.errors,
        )


class EquipmentStatusResponse(BaseModel):
    """Current status record of a piece of equipment."""
    id: UUID
    equipment_id: UUID
    status: str
    status_reason: Optional[str] = None
    status_changed_at: Optional[datetime] = None
    breakdown_start_time: Optional[datetime] = None
    maintenance_start_time: Optional[datetime] = None
    last_repair_date: Optional[datetime] = None
    notes: Optional[str] = None

    @classmethod
    def from_entity(cls, status: EquipmentStatus) -> "EquipmentStatusResponse":
        return cls(
            id=status.id,
            equipment_id=status.equipment_id,
            status=status.status.value,
            status_reason=status.status_reason,
            status_changed_at=status.status_changed_at,
            breakdown_start_time=status.breakdown_start_time,
            maintenance_start_time=status.maintenance_start_time,
            last_repair_date=status.last_repair_date,
            notes=status.notes,
        )


class TransitionsResponse(BaseModel):
    """Legal next states of an entity."""
    entity_type: str
    state: str
    valid_next_states: List[str]


class TransitionCheckResponse(BaseModel):
    """Whether a single transition is legal."""
    entity_type: str
    from_state: str
    to_state: str
    allowed: bool
