"""
In-memory implementation of the entity store.

Used for local development (SYNC_STORE_BACKEND=memory) and tests. Records
are copied on the way in and out so callers never share state with the
store. Failures can be injected per operation to exercise partial cascades.
"""
import asyncio
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set, Tuple
from uuid import UUID, uuid4

from ...application.interfaces import EntityStore
from ...domain.entities import (
    Equipment,
    EquipmentStatus,
    FaultReport,
    RepairRecord,
    utc_now,
)
from ...domain.exceptions import EntityStoreException

logger = logging.getLogger(__name__)


class InMemoryEntityStore(EntityStore):
    """Dict-backed entity store with failure injection."""

    def __init__(self):
        self.equipment: Dict[UUID, Equipment] = {}
        self.statuses: Dict[UUID, EquipmentStatus] = {}
        self.fault_reports: Dict[UUID, FaultReport] = {}
        self.repair_records: Dict[UUID, RepairRecord] = {}

        # Write log of (operation, entity id), in call order
        self.writes: List[Tuple[str, UUID]] = []

        # operation -> ids that fail (None fails every call)
        self._failures: Dict[str, Optional[Set[UUID]]] = {}

    # =========================================================================
    # Seeding and failure injection
    # =========================================================================

    def add_equipment(self, equipment: Equipment) -> Equipment:
        self.equipment[equipment.id] = replace(equipment)
        return equipment

    def add_status(self, status: EquipmentStatus) -> EquipmentStatus:
        self.statuses[status.id] = replace(status)
        return status

    def add_fault_report(self, fault: FaultReport) -> FaultReport:
        self.fault_reports[fault.id] = replace(fault)
        return fault

    def add_repair_record(self, repair: RepairRecord) -> RepairRecord:
        self.repair_records[repair.id] = replace(repair)
        return repair

    def fail(self, operation: str, entity_id: Optional[UUID] = None) -> None:
        """
        Make ``operation`` raise EntityStoreException.

        Args:
            operation: Store method name, e.g. "update_fault_report".
            entity_id: Only fail for this id; every call fails when omitted.
        """
        if entity_id is None:
            self._failures[operation] = None
        else:
            ids = self._failures.setdefault(operation, set())
            if ids is not None:
                ids.add(entity_id)

    def clear_failures(self) -> None:
        """Stop every injected failure."""
        self._failures.clear()

    async def _enter(self, operation: str, entity_id: Optional[UUID] = None) -> None:
        # Yield so concurrent callers interleave like they would on a real store
        await asyncio.sleep(0)
        if operation not in self._failures:
            return
        ids = self._failures[operation]
        if ids is None or entity_id in ids:
            raise EntityStoreException(operation, f"injected failure for {entity_id}")

    # =========================================================================
    # Equipment
    # =========================================================================

    async def get_equipment(self, equipment_id: UUID) -> Optional[Equipment]:
        await self._enter("get_equipment", equipment_id)
        equipment = self.equipment.get(equipment_id)
        return replace(equipment) if equipment else None

    async def list_equipment(self) -> List[Equipment]:
        await self._enter("list_equipment")
        return [
            replace(e)
            for e in sorted(self.equipment.values(), key=lambda e: (e.equipment_number, str(e.id)))
        ]

    # =========================================================================
    # Equipment status
    # =========================================================================

    def statuses_for(self, equipment_id: UUID) -> List[EquipmentStatus]:
        """Every status row of one equipment, duplicates included."""
        return [s for s in self.statuses.values() if s.equipment_id == equipment_id]

    def _latest_status(self, equipment_id: UUID) -> Optional[EquipmentStatus]:
        rows = self.statuses_for(equipment_id)
        if not rows:
            return None
        return max(rows, key=lambda r: (r.last_activity, str(r.id)))

    async def get_equipment_status(self, equipment_id: UUID) -> Optional[EquipmentStatus]:
        await self._enter("get_equipment_status", equipment_id)
        row = self._latest_status(equipment_id)
        return replace(row) if row else None

    async def upsert_equipment_status(
        self,
        equipment_id: UUID,
        fields: Dict[str, Any],
    ) -> EquipmentStatus:
        await self._enter("upsert_equipment_status", equipment_id)
        row = self._latest_status(equipment_id)
        if row is None:
            row = EquipmentStatus(id=uuid4(), equipment_id=equipment_id)
        else:
            row.mark_updated()

        row = replace(row, **fields)
        self.statuses[row.id] = row
        self.writes.append(("upsert_equipment_status", equipment_id))
        return replace(row)

    async def delete_equipment_status(self, status_id: UUID) -> bool:
        await self._enter("delete_equipment_status", status_id)
        deleted = self.statuses.pop(status_id, None) is not None
        if deleted:
            self.writes.append(("delete_equipment_status", status_id))
        return deleted

    async def list_equipment_statuses(self) -> List[EquipmentStatus]:
        await self._enter("list_equipment_statuses")
        return [replace(s) for s in self.statuses.values()]

    # =========================================================================
    # Fault reports
    # =========================================================================

    async def get_fault_report(self, fault_id: UUID) -> Optional[FaultReport]:
        await self._enter("get_fault_report", fault_id)
        fault = self.fault_reports.get(fault_id)
        return replace(fault) if fault else None

    async def create_fault_report(self, fault: FaultReport) -> FaultReport:
        await self._enter("create_fault_report", fault.id)
        self.fault_reports[fault.id] = replace(fault)
        self.writes.append(("create_fault_report", fault.id))
        return replace(fault)

    async def update_fault_report(
        self,
        fault_id: UUID,
        fields: Dict[str, Any],
    ) -> FaultReport:
        await self._enter("update_fault_report", fault_id)
        fault = self.fault_reports.get(fault_id)
        if fault is None:
            raise EntityStoreException("update_fault_report", f"fault report {fault_id} not found")

        fault = replace(fault, updated_at=utc_now(), **fields)
        self.fault_reports[fault_id] = fault
        self.writes.append(("update_fault_report", fault_id))
        return replace(fault)

    async def list_non_terminal_fault_reports(self) -> List[FaultReport]:
        await self._enter("list_non_terminal_fault_reports")
        return [replace(f) for f in self.fault_reports.values() if f.is_open()]

    async def list_fault_reports_for_equipment(
        self,
        equipment_id: UUID,
        open_only: bool = True,
    ) -> List[FaultReport]:
        await self._enter("list_fault_reports_for_equipment", equipment_id)
        faults = [
            f for f in self.fault_reports.values()
            if f.equipment_id == equipment_id and (f.is_open() or not open_only)
        ]
        return [replace(f) for f in sorted(faults, key=lambda f: f.created_at)]

    # =========================================================================
    # Repair records
    # =========================================================================

    async def get_repair_record(self, repair_id: UUID) -> Optional[RepairRecord]:
        await self._enter("get_repair_record", repair_id)
        repair = self.repair_records.get(repair_id)
        return replace(repair) if repair else None

    async def create_repair_record(self, repair: RepairRecord) -> RepairRecord:
        await self._enter("create_repair_record", repair.id)
        self.repair_records[repair.id] = replace(repair)
        self.writes.append(("create_repair_record", repair.id))
        return replace(repair)

    async def update_repair_record(
        self,
        repair_id: UUID,
        fields: Dict[str, Any],
    ) -> RepairRecord:
        await self._enter("update_repair_record", repair_id)
        repair = self.repair_records.get(repair_id)
        if repair is None:
            raise EntityStoreException("update_repair_record", f"repair record {repair_id} not found")

        repair = replace(repair, updated_at=utc_now(), **fields)
        self.repair_records[repair_id] = repair
        self.writes.append(("update_repair_record", repair_id))
        return replace(repair)
