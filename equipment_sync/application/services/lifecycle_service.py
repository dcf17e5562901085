"""
Lifecycle Service - write paths for fault reports and repair records.

Every equipment status change caused by these operations goes through the
StatusSynchronizer, so cascades and notifications stay in one place.
"""
import logging
from typing import Any, Dict, Optional, Tuple, Union
from uuid import UUID

from ...domain.entities import (
    EquipmentState,
    FaultReport,
    FaultStatus,
    IssueType,
    RepairRecord,
    RepairStatus,
    SyncReason,
    SyncResult,
    UrgencyLevel,
    utc_now,
)
from ...domain.exceptions import (
    CascadeSubFailure,
    EntityNotFoundException,
    EquipmentNotFoundException,
    IllegalTransitionException,
    SyncInProgressException,
)
from ...domain.services import EntityType, ensure_transition, parse_state
from ..interfaces import EntityStore
from .status_synchronizer import StatusSynchronizer

logger = logging.getLogger(__name__)

# Equipment in these states already reflects an open fault
_FAULT_AWARE_STATES = (EquipmentState.BREAKDOWN, EquipmentState.MAINTENANCE)


class LifecycleService:
    """
    Service for reporting faults and driving repairs.

    Handles:
    - Fault reporting with automatic breakdown
    - Fault status changes
    - Repair start and completion with equipment recovery
    """

    def __init__(
        self,
        store: EntityStore,
        synchronizer: StatusSynchronizer,
    ):
        self._store = store
        self._synchronizer = synchronizer

    def _ensure_not_syncing(self, equipment_id: UUID) -> None:
        """Reject a record change whose equipment sync is already running."""
        if self._synchronizer.is_in_flight(equipment_id):
            logger.info(f"Rejected record change for {equipment_id}: sync in progress")
            raise SyncInProgressException(equipment_id)

    # =========================================================================
    # Fault Reports
    # =========================================================================

    async def report_fault(
        self,
        equipment_id: UUID,
        description: str,
        urgency_level: UrgencyLevel = UrgencyLevel.MEDIUM,
        issue_type: IssueType = IssueType.OTHER,
        reporter_name: Optional[str] = None,
    ) -> Tuple[FaultReport, Optional[SyncResult]]:
        """
        Report a fault and put the equipment into breakdown.

        Args:
            equipment_id: Equipment UUID
            description: What is wrong
            urgency_level: How urgent the fault is
            issue_type: Category of the fault
            reporter_name: Who reported it

        Returns:
            Tuple of (fault report as stored after the cascade, sync result).
            The sync result is None when the equipment already reflected a
            fault.

        Raises:
            EquipmentNotFoundException: If equipment doesn't exist
        """
        equipment = await self._store.get_equipment(equipment_id)
        if equipment is None:
            raise EquipmentNotFoundException(equipment_id)

        fault = await self._store.create_fault_report(FaultReport(
            equipment_id=equipment_id,
            description=description,
            urgency_level=UrgencyLevel(urgency_level),
            issue_type=IssueType(issue_type),
            reporter_name=reporter_name,
        ))
        logger.info(f"Fault {fault.id} reported on equipment {equipment.equipment_number}")

        status = await self._store.get_equipment_status(equipment_id)
        if status is not None and status.status in _FAULT_AWARE_STATES:
            return fault, None

        result = await self._synchronizer.walk_equipment_status(
            equipment_id,
            EquipmentState.BREAKDOWN,
            SyncReason.BREAKDOWN,
            related_entity_id=fault.id,
        )
        refreshed = await self._store.get_fault_report(fault.id)
        return refreshed or fault, result

    async def change_fault_status(
        self,
        fault_id: UUID,
        new_status: Union[FaultStatus, str],
        notes: Optional[str] = None,
    ) -> Tuple[FaultReport, Optional[SyncResult]]:
        """
        Move a fault report along its lifecycle.

        Closing the last open fault of equipment in breakdown brings the
        equipment back to running.

        Raises:
            EntityNotFoundException: If the fault report doesn't exist
            IllegalTransitionException: If the change is not allowed
            SyncInProgressException: If the change would move equipment
                whose sync is already running
        """
        fault = await self._store.get_fault_report(fault_id)
        if fault is None:
            raise EntityNotFoundException("FaultReport", fault_id)

        ensure_transition(EntityType.FAULT_REPORT, fault.status, new_status)
        target = parse_state(EntityType.FAULT_REPORT, new_status)
        if target == FaultStatus.COMPLETED:
            self._ensure_not_syncing(fault.equipment_id)

        fields: Dict[str, Any] = {"status": target}
        if target == FaultStatus.COMPLETED:
            fields["resolution_date"] = utc_now()
        if notes:
            fields["notes"] = fault.append_note(notes)

        updated = await self._store.update_fault_report(fault_id, fields)
        logger.info(f"Fault {fault_id} status {fault.status.value} -> {target.value}")

        if not updated.is_terminal():
            return updated, None

        remaining = [
            f for f in await self._store.list_fault_reports_for_equipment(updated.equipment_id)
            if f.id != updated.id and f.is_open()
        ]
        if remaining:
            return updated, None

        status = await self._store.get_equipment_status(updated.equipment_id)
        if status is None or not status.is_breakdown():
            return updated, None

        try:
            result = await self._synchronizer.change_equipment_status(
                updated.equipment_id,
                EquipmentState.RUNNING,
                SyncReason.REPAIR_COMPLETE,
                related_entity_id=updated.id,
            )
        except SyncInProgressException as e:
            # Fault already closed; the reconciler recovers the stale breakdown
            logger.warning(e.message)
            result = SyncResult(success=False, errors=[e.message])
        return updated, result

    # =========================================================================
    # Repairs
    # =========================================================================

    async def start_repair(
        self,
        fault_id: UUID,
        technician: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Tuple[RepairRecord, Optional[SyncResult]]:
        """
        Open a repair record for a fault and start work on it.

        Equipment in breakdown moves to maintenance.

        Raises:
            EntityNotFoundException: If the fault report doesn't exist
            IllegalTransitionException: If the fault is already closed
        """
        fault = await self._store.get_fault_report(fault_id)
        if fault is None:
            raise EntityNotFoundException("FaultReport", fault_id)
        if fault.is_terminal():
            raise IllegalTransitionException(
                entity_type=EntityType.FAULT_REPORT.value,
                current_state=fault.status.value,
                target_state=FaultStatus.IN_PROGRESS.value,
                message=f"Cannot start a repair on a {fault.status.value} fault report",
            )

        repair = await self._store.create_repair_record(RepairRecord(
            fault_report_id=fault.id,
            equipment_id=fault.equipment_id,
            technician=technician,
            notes=notes,
        ))
        ensure_transition(EntityType.REPAIR_RECORD, repair.status, RepairStatus.IN_PROGRESS)
        repair = await self._store.update_repair_record(repair.id, {
            "status": RepairStatus.IN_PROGRESS,
            "started_at": utc_now(),
        })

        if fault.status == FaultStatus.REPORTED:
            await self._store.update_fault_report(fault.id, {"status": FaultStatus.IN_PROGRESS})

        logger.info(f"Repair {repair.id} started for fault {fault.id}")

        status = await self._store.get_equipment_status(fault.equipment_id)
        if status is None or not status.is_breakdown():
            return repair, None

        result = await self._synchronizer.change_equipment_status(
            fault.equipment_id,
            EquipmentState.MAINTENANCE,
            SyncReason.MAINTENANCE,
            related_entity_id=repair.id,
        )
        return repair, result

    async def change_repair_status(
        self,
        repair_id: UUID,
        new_status: Union[RepairStatus, str],
        notes: Optional[str] = None,
    ) -> Tuple[RepairRecord, Optional[SyncResult]]:
        """
        Move a repair record along its lifecycle.

        Completing a repair recovers the equipment to running and closes its
        open fault reports. A failed repair leaves the equipment untouched.

        Raises:
            EntityNotFoundException: If the repair record doesn't exist
            IllegalTransitionException: If the change is not allowed
            SyncInProgressException: If the change would move equipment
                whose sync is already running
        """
        repair = await self._store.get_repair_record(repair_id)
        if repair is None:
            raise EntityNotFoundException("RepairRecord", repair_id)

        ensure_transition(EntityType.REPAIR_RECORD, repair.status, new_status)
        target = parse_state(EntityType.REPAIR_RECORD, new_status)
        if target == RepairStatus.COMPLETED:
            self._ensure_not_syncing(repair.equipment_id)

        now = utc_now()
        fields: Dict[str, Any] = {"status": target}
        if target == RepairStatus.IN_PROGRESS:
            fields["started_at"] = now
        elif target in (RepairStatus.COMPLETED, RepairStatus.FAILED):
            fields["completed_at"] = now
        if notes:
            fields["notes"] = f"{repair.notes}\n{notes}" if repair.notes else notes

        updated = await self._store.update_repair_record(repair_id, fields)
        logger.info(f"Repair {repair_id} status {repair.status.value} -> {target.value}")

        if target != RepairStatus.COMPLETED:
            return updated, None

        try:
            result = await self._synchronizer.walk_equipment_status(
                updated.equipment_id,
                EquipmentState.RUNNING,
                SyncReason.REPAIR_COMPLETE,
                related_entity_id=updated.id,
            )
        except SyncInProgressException as e:
            logger.warning(e.message)
            result = SyncResult(success=False, errors=[e.message])

        # Cascade did not run (equipment already running or sync rejected): close the fault here
        fault = await self._store.get_fault_report(updated.fault_report_id)
        if fault is not None and fault.is_open():
            try:
                await self._synchronizer.complete_fault_report(fault)
                result.updated_entities.related_fault_reports.append(fault.id)
            except CascadeSubFailure as e:
                logger.warning(e.message)
                result.errors.append(e.message)

        return updated, result
