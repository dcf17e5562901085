"""
Repair record API endpoints.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_entity_store, get_lifecycle_service
from ..schemas import (
    RepairOutcomeResponse,
    RepairRecordResponse,
    RepairStatusUpdateRequest,
    SyncResultResponse,
)
from ...application.interfaces import EntityStore
from ...application.services import LifecycleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/repairs", tags=["Repairs"])


@router.get(
    "/{repair_id}",
    response_model=RepairRecordResponse,
    summary="Get repair record by ID",
)
async def get_repair(
    repair_id: UUID,
    store: EntityStore = Depends(get_entity_store),
) -> RepairRecordResponse:
    repair = await store.get_repair_record(repair_id)
    if not repair:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Repair record not found",
        )
    return RepairRecordResponse.from_entity(repair)


@router.patch(
    "/{repair_id}/status",
    response_model=RepairOutcomeResponse,
    summary="Change repair status",
    description="Completing a repair recovers the equipment and closes its open fault reports.",
)
async def change_repair_status(
    repair_id: UUID,
    request: RepairStatusUpdateRequest,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> RepairOutcomeResponse:
    repair, result = await service.change_repair_status(repair_id, request.status, notes=request.notes)
    return RepairOutcomeResponse(
        repair_record=RepairRecordResponse.from_entity(repair),
        sync_result=SyncResultResponse.from_result(result) if result else None,
    )
