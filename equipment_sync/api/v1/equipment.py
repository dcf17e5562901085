"""
Equipment status API endpoints.

Status changes go through the StatusSynchronizer; domain errors are mapped
to HTTP responses by the application's exception handlers.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_entity_store, get_synchronizer
from ..schemas import EquipmentStatusResponse, StatusChangeRequest, SyncResultResponse
from ...application.interfaces import EntityStore
from ...application.services import StatusSynchronizer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/equipment", tags=["Equipment"])


@router.get(
    "/{equipment_id}/status",
    response_model=EquipmentStatusResponse,
    summary="Get equipment status",
    description="Get the current status record of a piece of equipment.",
)
async def get_equipment_status(
    equipment_id: UUID,
    store: EntityStore = Depends(get_entity_store),
) -> EquipmentStatusResponse:
    current = await store.get_equipment_status(equipment_id)
    if current is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Equipment status not found",
        )
    return EquipmentStatusResponse.from_entity(current)


@router.post(
    "/{equipment_id}/status",
    response_model=SyncResultResponse,
    summary="Change equipment status",
    description=(
        "Apply a status transition and cascade it to related fault reports. "
        "A response with success=true and a non-empty errors list means a "
        "cascade step failed after the status was written."
    ),
)
async def change_equipment_status(
    equipment_id: UUID,
    request: StatusChangeRequest,
    synchronizer: StatusSynchronizer = Depends(get_synchronizer),
) -> SyncResultResponse:
    """
    Change equipment status.
    """
    result = await synchronizer.change_equipment_status(
        equipment_id,
        request.new_status,
        request.reason,
        related_entity_id=request.related_entity_id,
    )
    return SyncResultResponse.from_result(result)
