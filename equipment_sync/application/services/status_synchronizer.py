"""
Status Synchronizer for equipment.

Applies a validated equipment status transition and cascades the
consequential updates to related fault reports.
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Union
from uuid import UUID

from ...domain.entities import (
    EquipmentState,
    FaultReport,
    FaultStatus,
    NotificationKind,
    StatusChangeEvent,
    SyncReason,
    SyncResult,
    utc_now,
)
from ...domain.entities.fault_report import resolution_note
from ...domain.entities.sync import REASON_LABELS
from ...domain.exceptions import (
    CascadeSubFailure,
    DomainException,
    EquipmentNotFoundException,
    IllegalTransitionException,
    SyncInProgressException,
)
from ...domain.services.transition_rules import (
    EntityType,
    ensure_transition,
    parse_state,
    transition_path,
)
from ..interfaces import EntityStore, Notifier

logger = logging.getLogger(__name__)


class StatusSynchronizer:
    """
    Orchestrates equipment status changes.

    At most one synchronization per equipment id is in flight in this
    process. The in-flight set gives no exclusion across processes or
    against a reconciliation pass running elsewhere.

    Cascades are best-effort: a failed secondary write is recorded in the
    result and never rolls back the primary status write.
    """

    def __init__(
        self,
        store: EntityStore,
        notifier: Optional[Notifier] = None,
    ):
        self._store = store
        self._notifier = notifier
        self._in_flight: Set[UUID] = set()

    # =========================================================================
    # Status Changes
    # =========================================================================

    def is_in_flight(self, equipment_id: UUID) -> bool:
        """Check whether a synchronization for this equipment is running."""
        return equipment_id in self._in_flight

    async def change_equipment_status(
        self,
        equipment_id: UUID,
        new_status: Union[EquipmentState, str],
        reason: Union[SyncReason, str],
        related_entity_id: Optional[UUID] = None,
    ) -> SyncResult:
        """
        Change an equipment's status and cascade to related records.

        Args:
            equipment_id: Equipment UUID.
            new_status: Target status.
            reason: Why the status changes; selects the cascade.
            related_entity_id: Fault report (breakdown) or repair record
                (repair completion) that triggered the change.

        Returns:
            SyncResult. ``errors`` may be non-empty even when ``success`` is
            True, meaning a cascade step failed after the status was written.

        Raises:
            SyncInProgressException: Another call for this equipment is running.
            EquipmentNotFoundException: Equipment does not exist.
            IllegalTransitionException: Target is not reachable in one step.
        """
        if equipment_id in self._in_flight:
            logger.info(f"Rejected status change for {equipment_id}: sync in progress")
            raise SyncInProgressException(equipment_id)

        self._in_flight.add(equipment_id)
        try:
            return await self._apply(equipment_id, new_status, SyncReason(reason), related_entity_id)
        finally:
            self._in_flight.discard(equipment_id)

    async def _apply(
        self,
        equipment_id: UUID,
        new_status: Union[EquipmentState, str],
        reason: SyncReason,
        related_entity_id: Optional[UUID],
    ) -> SyncResult:
        equipment = await self._store.get_equipment(equipment_id)
        if equipment is None:
            raise EquipmentNotFoundException(equipment_id)

        target = parse_state(EntityType.EQUIPMENT, new_status)
        current = await self._store.get_equipment_status(equipment_id)
        old_state = current.status if current else None

        if target is None:
            raise IllegalTransitionException(
                entity_type=EntityType.EQUIPMENT.value,
                current_state=old_state.value if old_state else None,
                target_state=str(getattr(new_status, "value", new_status)),
            )
        if old_state is not None:
            ensure_transition(EntityType.EQUIPMENT, old_state, target)

        result = SyncResult(success=True)
        now = utc_now()
        fields = self._build_status_fields(old_state, target, reason, now)

        try:
            await self._store.upsert_equipment_status(equipment_id, fields)
        except Exception as e:
            logger.error(f"Status write failed for equipment {equipment_id}: {e}")
            result.success = False
            result.errors.append(f"Status update failed: {e}")
            return result

        result.updated_entities.status = True
        logger.info(
            f"Equipment {equipment.equipment_number} status "
            f"{old_state.value if old_state else 'none'} -> {target.value} ({reason.value})"
        )

        await self._cascade(reason, equipment_id, old_state, target, related_entity_id, result)

        event = StatusChangeEvent(
            equipment_id=equipment_id,
            old_status=old_state.value if old_state else None,
            new_status=target.value,
            reason=reason,
            related_entity_id=related_entity_id,
            occurred_at=now,
        )
        await self._notify(
            equipment_id,
            NotificationKind.STATUS_CHANGED,
            f"Equipment {equipment.equipment_number} is now {target.value}",
            event.to_dict(),
        )

        return result

    async def walk_equipment_status(
        self,
        equipment_id: UUID,
        target: EquipmentState,
        reason: SyncReason,
        related_entity_id: Optional[UUID] = None,
    ) -> SyncResult:
        """
        Drive equipment to ``target`` along the shortest legal path.

        Intermediate hops use reason ``manual``; the final hop carries
        ``reason`` and ``related_entity_id``. Equipment without a status row
        goes straight to ``target``.

        Returns:
            Result of the final hop, or of the first hop that failed to write.
            A no-op result when the equipment is already in ``target``.
        """
        current = await self._store.get_equipment_status(equipment_id)
        if current is None:
            return await self.change_equipment_status(equipment_id, target, reason, related_entity_id)

        path = transition_path(EntityType.EQUIPMENT, current.status, target)
        if path is None:
            raise IllegalTransitionException(
                entity_type=EntityType.EQUIPMENT.value,
                current_state=current.status.value,
                target_state=target.value,
            )
        if not path:
            return SyncResult(success=True)

        for hop in path[:-1]:
            result = await self.change_equipment_status(equipment_id, hop, SyncReason.MANUAL)
            if not result.success:
                return result

        return await self.change_equipment_status(equipment_id, path[-1], reason, related_entity_id)

    def _build_status_fields(
        self,
        old_state: Optional[EquipmentState],
        new_state: EquipmentState,
        reason: SyncReason,
        now: datetime,
    ) -> Dict[str, Any]:
        """Column values for the status write, including transition markers."""
        fields: Dict[str, Any] = {
            "status": new_state,
            "status_reason": REASON_LABELS[reason],
            "status_changed_at": now,
            "notes": (
                f"[{now.isoformat()}] {REASON_LABELS[reason]}: "
                f"{old_state.value if old_state else 'unknown'} -> {new_state.value}"
            ),
        }

        if new_state == EquipmentState.BREAKDOWN:
            fields["breakdown_start_time"] = now
        elif new_state == EquipmentState.RUNNING:
            if old_state == EquipmentState.BREAKDOWN:
                fields["last_repair_date"] = now
            fields["breakdown_start_time"] = None
        elif new_state == EquipmentState.MAINTENANCE:
            fields["maintenance_start_time"] = now

        return fields

    # =========================================================================
    # Cascades
    # =========================================================================

    async def _cascade(
        self,
        reason: SyncReason,
        equipment_id: UUID,
        old_state: Optional[EquipmentState],
        new_state: EquipmentState,
        related_entity_id: Optional[UUID],
        result: SyncResult,
    ) -> None:
        """Run the cascade selected by ``reason``. Never raises."""
        try:
            if reason == SyncReason.BREAKDOWN:
                await self._handle_breakdown(equipment_id, related_entity_id, result)
            elif reason == SyncReason.REPAIR_COMPLETE:
                await self._handle_repair_complete(equipment_id, result)
            elif reason == SyncReason.MAINTENANCE:
                await self._notify(
                    equipment_id,
                    NotificationKind.MAINTENANCE_STARTED,
                    f"Maintenance started on equipment {equipment_id}",
                )
            elif reason == SyncReason.MANUAL:
                if old_state == EquipmentState.BREAKDOWN and new_state == EquipmentState.RUNNING:
                    await self._handle_repair_complete(equipment_id, result)
        except Exception as e:
            logger.warning(f"Cascade for equipment {equipment_id} failed: {e}")
            result.errors.append(f"Related data sync failed: {e}")

    async def _handle_breakdown(
        self,
        equipment_id: UUID,
        fault_id: Optional[UUID],
        result: SyncResult,
    ) -> None:
        """Move the triggering fault report into work and raise an alert."""
        if fault_id is not None:
            try:
                fault = await self._store.get_fault_report(fault_id)
                if fault is not None:
                    if fault.equipment_id != equipment_id:
                        raise CascadeSubFailure(
                            "FaultReport", fault_id,
                            f"belongs to equipment {fault.equipment_id}",
                        )
                    if fault.status != FaultStatus.IN_PROGRESS:
                        await self._advance_fault(fault, FaultStatus.IN_PROGRESS)
                        result.updated_entities.related_fault_reports.append(fault.id)
            except DomainException as e:
                logger.warning(str(e))
                result.errors.append(e.message)

        await self._notify(
            equipment_id,
            NotificationKind.BREAKDOWN_DETECTED,
            f"Breakdown detected on equipment {equipment_id}",
            {"fault_report_id": str(fault_id) if fault_id else None},
        )

    async def _handle_repair_complete(
        self,
        equipment_id: UUID,
        result: SyncResult,
    ) -> None:
        """Close every open fault report of the equipment."""
        faults = await self._store.list_fault_reports_for_equipment(equipment_id, open_only=True)
        open_faults = [f for f in faults if f.is_open()]

        # Independent rows, no ordering between them
        outcomes = await asyncio.gather(
            *(self.complete_fault_report(fault) for fault in open_faults),
            return_exceptions=True,
        )

        for fault, outcome in zip(open_faults, outcomes):
            if isinstance(outcome, BaseException):
                message = outcome.message if isinstance(outcome, DomainException) else str(outcome)
                logger.warning(f"Could not complete fault report {fault.id}: {message}")
                result.errors.append(message)
            else:
                result.updated_entities.related_fault_reports.append(fault.id)

        await self._notify(
            equipment_id,
            NotificationKind.REPAIR_COMPLETED,
            f"Repair completed on equipment {equipment_id}",
            {"completed_fault_reports": [str(f.id) for f in open_faults]},
        )

    async def complete_fault_report(self, fault: FaultReport) -> None:
        """Walk a fault report to ``completed`` with a resolution note."""
        now = utc_now()
        await self._advance_fault(
            fault,
            FaultStatus.COMPLETED,
            final_fields={
                "resolution_date": now,
                "notes": fault.append_note(resolution_note(now)),
            },
        )

    async def _advance_fault(
        self,
        fault: FaultReport,
        target: FaultStatus,
        final_fields: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Walk a fault report to ``target`` one legal edge at a time.

        Raises:
            CascadeSubFailure: If the target is unreachable or a write fails.
        """
        path: Optional[List[FaultStatus]] = transition_path(
            EntityType.FAULT_REPORT, fault.status, target
        )
        if path is None:
            raise CascadeSubFailure(
                "FaultReport", fault.id,
                f"cannot move from '{fault.status.value}' to '{target.value}'",
            )

        for index, step in enumerate(path):
            fields: Dict[str, Any] = {"status": step}
            if index == len(path) - 1 and final_fields:
                fields.update(final_fields)
            try:
                await self._store.update_fault_report(fault.id, fields)
            except Exception as e:
                raise CascadeSubFailure("FaultReport", fault.id, str(e)) from e
            fault.status = step

    # =========================================================================
    # Notifications
    # =========================================================================

    async def _notify(
        self,
        equipment_id: UUID,
        kind: NotificationKind,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Send a notification; failures are logged and dropped."""
        if self._notifier is None:
            return
        try:
            await self._notifier.notify(equipment_id, kind, message, data)
        except Exception as e:
            logger.warning(f"Notification {kind.value} for {equipment_id} failed: {e}")
