"""
Fault report API endpoints.

Handles fault reporting, fault status changes and repair start.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_entity_store, get_lifecycle_service
from ..schemas import (
    FaultCreateRequest,
    FaultOutcomeResponse,
    FaultReportResponse,
    FaultStatusUpdateRequest,
    RepairOutcomeResponse,
    RepairRecordResponse,
    RepairStartRequest,
    SyncResultResponse,
)
from ...application.interfaces import EntityStore
from ...application.services import LifecycleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/faults", tags=["Fault Reports"])


@router.post(
    "",
    response_model=FaultOutcomeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a fault",
    description="Create a fault report and put the equipment into breakdown.",
)
async def report_fault(
    request: FaultCreateRequest,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> FaultOutcomeResponse:
    fault, result = await service.report_fault(
        equipment_id=request.equipment_id,
        description=request.description,
        urgency_level=request.urgency_level,
        issue_type=request.issue_type,
        reporter_name=request.reporter_name,
    )
    return FaultOutcomeResponse(
        fault_report=FaultReportResponse.from_entity(fault),
        sync_result=SyncResultResponse.from_result(result) if result else None,
    )


@router.get(
    "/{fault_id}",
    response_model=FaultReportResponse,
    summary="Get fault report by ID",
)
async def get_fault(
    fault_id: UUID,
    store: EntityStore = Depends(get_entity_store),
) -> FaultReportResponse:
    fault = await store.get_fault_report(fault_id)
    if not fault:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Fault report not found",
        )
    return FaultReportResponse.from_entity(fault)


@router.patch(
    "/{fault_id}/status",
    response_model=FaultOutcomeResponse,
    summary="Change fault report status",
    description="Closing the last open fault of broken-down equipment returns it to running.",
)
async def change_fault_status(
    fault_id: UUID,
    request: FaultStatusUpdateRequest,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> FaultOutcomeResponse:
    fault, result = await service.change_fault_status(fault_id, request.status, notes=request.notes)
    return FaultOutcomeResponse(
        fault_report=FaultReportResponse.from_entity(fault),
        sync_result=SyncResultResponse.from_result(result) if result else None,
    )


@router.post(
    "/{fault_id}/repairs",
    response_model=RepairOutcomeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a repair",
    description="Open a repair record for the fault; equipment in breakdown moves to maintenance.",
)
async def start_repair(
    fault_id: UUID,
    request: RepairStartRequest,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> RepairOutcomeResponse:
    repair, result = await service.start_repair(
        fault_id,
        technician=request.technician,
        notes=request.notes,
    )
    return RepairOutcomeResponse(
        repair_record=RepairRecordResponse.from_entity(repair),
        sync_result=SyncResultResponse.from_result(result) if result else None,
    )
