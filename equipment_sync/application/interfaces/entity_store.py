"""
Entity store interface (port).

Defines the persistence contract the synchronizer and reconciler depend on.
Each call commits on its own; there is no transaction spanning calls.
Implementations raise EntityStoreException when the underlying store fails.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from uuid import UUID

from ...domain.entities import (
    Equipment,
    EquipmentStatus,
    FaultReport,
    RepairRecord,
)


class EntityStore(ABC):
    """
    Storage for equipment, status rows, fault reports and repair records.

    Pure storage: no business rules are applied here.
    """

    # =========================================================================
    # Equipment
    # =========================================================================

    @abstractmethod
    async def get_equipment(self, equipment_id: UUID) -> Optional[Equipment]:
        """
        Get equipment by ID.

        Args:
            equipment_id: Equipment UUID

        Returns:
            Equipment if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_equipment(self) -> List[Equipment]:
        """List all equipment."""
        pass

    # =========================================================================
    # Equipment status
    # =========================================================================

    @abstractmethod
    async def get_equipment_status(self, equipment_id: UUID) -> Optional[EquipmentStatus]:
        """
        Get the status row for a piece of equipment.

        When duplicates exist, the most recently changed row is returned.
        """
        pass

    @abstractmethod
    async def upsert_equipment_status(
        self,
        equipment_id: UUID,
        fields: Dict[str, Any],
    ) -> EquipmentStatus:
        """
        Create or update the status row for a piece of equipment.

        Args:
            equipment_id: Equipment UUID
            fields: Column values to write

        Returns:
            The row as stored
        """
        pass

    @abstractmethod
    async def delete_equipment_status(self, status_id: UUID) -> bool:
        """
        Delete a status row by its own ID.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def list_equipment_statuses(self) -> List[EquipmentStatus]:
        """List every status row, including orphans and duplicates."""
        pass

    # =========================================================================
    # Fault reports
    # =========================================================================

    @abstractmethod
    async def get_fault_report(self, fault_id: UUID) -> Optional[FaultReport]:
        """Get fault report by ID."""
        pass

    @abstractmethod
    async def create_fault_report(self, fault: FaultReport) -> FaultReport:
        """Persist a new fault report."""
        pass

    @abstractmethod
    async def update_fault_report(
        self,
        fault_id: UUID,
        fields: Dict[str, Any],
    ) -> FaultReport:
        """
        Update columns of a fault report.

        Raises:
            EntityStoreException: If the report does not exist or the write fails
        """
        pass

    @abstractmethod
    async def list_non_terminal_fault_reports(self) -> List[FaultReport]:
        """List fault reports in 'reported' or 'in_progress'."""
        pass

    @abstractmethod
    async def list_fault_reports_for_equipment(
        self,
        equipment_id: UUID,
        open_only: bool = True,
    ) -> List[FaultReport]:
        """List fault reports of one piece of equipment."""
        pass

    # =========================================================================
    # Repair records
    # =========================================================================

    @abstractmethod
    async def get_repair_record(self, repair_id: UUID) -> Optional[RepairRecord]:
        """Get repair record by ID."""
        pass

    @abstractmethod
    async def create_repair_record(self, repair: RepairRecord) -> RepairRecord:
        """Persist a new repair record."""
        pass

    @abstractmethod
    async def update_repair_record(
        self,
        repair_id: UUID,
        fields: Dict[str, Any],
    ) -> RepairRecord:
        """Update columns of a repair record."""
        pass
