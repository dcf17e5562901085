"""
SQL implementation of the entity store.

Every call runs in its own session and commits before returning, so a
cascade of several calls is a sequence of independent writes.
"""
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.equipment_model import (
    BreakdownReportModel,
    EquipmentInfoModel,
    EquipmentStatusModel,
    RepairRecordModel,
)
from ....application.interfaces import EntityStore
from ....domain.entities import (
    Equipment,
    EquipmentState,
    EquipmentStatus,
    FaultReport,
    FaultStatus,
    IssueType,
    OPEN_FAULT_STATUSES,
    RepairRecord,
    RepairStatus,
    UrgencyLevel,
    utc_now,
)
from ....domain.exceptions import EntityStoreException

logger = logging.getLogger(__name__)

# Entity attribute -> column name where they differ
_FAULT_COLUMNS = {"reported_at": "occurred_at"}


def _column_value(value: Any) -> Any:
    """Enum members are stored as their raw value."""
    return value.value if isinstance(value, Enum) else value


class SqlEntityStore(EntityStore):
    """
    Entity store backed by PostgreSQL through SQLAlchemy.

    Args:
        session_factory: Callable returning a new AsyncSession; the shared
            one comes from DatabaseManager.entity_store().
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Entity store {operation} failed: {e}")
            raise EntityStoreException(operation, str(e), original_error=type(e).__name__) from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # =========================================================================
    # Equipment
    # =========================================================================

    async def get_equipment(self, equipment_id: UUID) -> Optional[Equipment]:
        async with self._session("get_equipment") as session:
            query = select(EquipmentInfoModel).where(EquipmentInfoModel.id == equipment_id)
            result = await session.execute(query)
            model = result.scalar_one_or_none()
            return self._equipment_to_entity(model) if model else None

    async def list_equipment(self) -> List[Equipment]:
        async with self._session("list_equipment") as session:
            query = select(EquipmentInfoModel).order_by(
                EquipmentInfoModel.equipment_number, EquipmentInfoModel.id
            )
            result = await session.execute(query)
            return [self._equipment_to_entity(m) for m in result.scalars().all()]

    # =========================================================================
    # Equipment status
    # =========================================================================

    async def get_equipment_status(self, equipment_id: UUID) -> Optional[EquipmentStatus]:
        async with self._session("get_equipment_status") as session:
            model = await self._latest_status_model(session, equipment_id)
            return self._status_to_entity(model) if model else None

    async def upsert_equipment_status(
        self,
        equipment_id: UUID,
        fields: Dict[str, Any],
    ) -> EquipmentStatus:
        """
        Update the latest status row of the equipment, or insert one.

        Args:
            equipment_id: Equipment UUID.
            fields: Column values to write.

        Returns:
            The row as stored.
        """
        async with self._session("upsert_equipment_status") as session:
            model = await self._latest_status_model(session, equipment_id)
            now = utc_now()

            if model is None:
                model = EquipmentStatusModel(
                    id=uuid4(),
                    equipment_id=equipment_id,
                    status=EquipmentState.STOPPED.value,
                    created_at=now,
                )
                session.add(model)
                logger.debug(f"Creating status row for equipment {equipment_id}")
            else:
                model.updated_at = now

            for name, value in fields.items():
                setattr(model, name, _column_value(value))

            await session.flush()
            return self._status_to_entity(model)

    async def delete_equipment_status(self, status_id: UUID) -> bool:
        async with self._session("delete_equipment_status") as session:
            stmt = delete(EquipmentStatusModel).where(EquipmentStatusModel.id == status_id)
            result = await session.execute(stmt)
            return result.rowcount > 0

    async def list_equipment_statuses(self) -> List[EquipmentStatus]:
        async with self._session("list_equipment_statuses") as session:
            result = await session.execute(select(EquipmentStatusModel))
            return [self._status_to_entity(m) for m in result.scalars().all()]

    async def _latest_status_model(
        self,
        session: AsyncSession,
        equipment_id: UUID,
    ) -> Optional[EquipmentStatusModel]:
        """Most recently changed status row; duplicates may exist."""
        last_activity = func.coalesce(
            EquipmentStatusModel.status_changed_at,
            EquipmentStatusModel.updated_at,
            EquipmentStatusModel.created_at,
        )
        query = (
            select(EquipmentStatusModel)
            .where(EquipmentStatusModel.equipment_id == equipment_id)
            .order_by(desc(last_activity), desc(EquipmentStatusModel.id))
            .limit(1)
        )
        result = await session.execute(query)
        return result.scalar_one_or_none()

    # =========================================================================
    # Fault reports
    # =========================================================================

    async def get_fault_report(self, fault_id: UUID) -> Optional[FaultReport]:
        async with self._session("get_fault_report") as session:
            query = select(BreakdownReportModel).where(BreakdownReportModel.id == fault_id)
            result = await session.execute(query)
            model = result.scalar_one_or_none()
            return self._fault_to_entity(model) if model else None

    async def create_fault_report(self, fault: FaultReport) -> FaultReport:
        async with self._session("create_fault_report") as session:
            model = BreakdownReportModel(
                id=fault.id,
                equipment_id=fault.equipment_id,
                description=fault.description,
                status=_column_value(fault.status),
                urgency_level=_column_value(fault.urgency_level),
                issue_type=_column_value(fault.issue_type),
                reporter_name=fault.reporter_name,
                occurred_at=fault.reported_at,
                resolution_date=fault.resolution_date,
                notes=fault.notes,
                created_at=fault.created_at,
            )
            session.add(model)
            await session.flush()

            logger.info(f"Created fault report {fault.id} for equipment {fault.equipment_id}")
            return fault

    async def update_fault_report(
        self,
        fault_id: UUID,
        fields: Dict[str, Any],
    ) -> FaultReport:
        async with self._session("update_fault_report") as session:
            model = await session.get(BreakdownReportModel, fault_id)
            if model is None:
                raise EntityStoreException("update_fault_report", f"fault report {fault_id} not found")

            for name, value in fields.items():
                setattr(model, _FAULT_COLUMNS.get(name, name), _column_value(value))
            model.updated_at = utc_now()

            await session.flush()
            return self._fault_to_entity(model)

    async def list_non_terminal_fault_reports(self) -> List[FaultReport]:
        async with self._session("list_non_terminal_fault_reports") as session:
            query = select(BreakdownReportModel).where(
                BreakdownReportModel.status.in_([s.value for s in OPEN_FAULT_STATUSES])
            )
            result = await session.execute(query)
            return [self._fault_to_entity(m) for m in result.scalars().all()]

    async def list_fault_reports_for_equipment(
        self,
        equipment_id: UUID,
        open_only: bool = True,
    ) -> List[FaultReport]:
        async with self._session("list_fault_reports_for_equipment") as session:
            query = select(BreakdownReportModel).where(
                BreakdownReportModel.equipment_id == equipment_id
            )
            if open_only:
                query = query.where(
                    BreakdownReportModel.status.in_([s.value for s in OPEN_FAULT_STATUSES])
                )
            query = query.order_by(BreakdownReportModel.created_at)
            result = await session.execute(query)
            return [self._fault_to_entity(m) for m in result.scalars().all()]

    # =========================================================================
    # Repair records
    # =========================================================================

    async def get_repair_record(self, repair_id: UUID) -> Optional[RepairRecord]:
        async with self._session("get_repair_record") as session:
            query = select(RepairRecordModel).where(RepairRecordModel.id == repair_id)
            result = await session.execute(query)
            model = result.scalar_one_or_none()
            return self._repair_to_entity(model) if model else None

    async def create_repair_record(self, repair: RepairRecord) -> RepairRecord:
        async with self._session("create_repair_record") as session:
            model = RepairRecordModel(
                id=repair.id,
                fault_report_id=repair.fault_report_id,
                equipment_id=repair.equipment_id,
                status=_column_value(repair.status),
                technician=repair.technician,
                started_at=repair.started_at,
                completed_at=repair.completed_at,
                notes=repair.notes,
                created_at=repair.created_at,
            )
            session.add(model)
            await session.flush()

            logger.info(f"Created repair record {repair.id} for fault {repair.fault_report_id}")
            return repair

    async def update_repair_record(
        self,
        repair_id: UUID,
        fields: Dict[str, Any],
    ) -> RepairRecord:
        async with self._session("update_repair_record") as session:
            model = await session.get(RepairRecordModel, repair_id)
            if model is None:
                raise EntityStoreException("update_repair_record", f"repair record {repair_id} not found")

            for name, value in fields.items():
                setattr(model, name, _column_value(value))
            model.updated_at = utc_now()

            await session.flush()
            return self._repair_to_entity(model)

    # =========================================================================
    # Model Conversion
    # =========================================================================

    def _equipment_to_entity(self, model: EquipmentInfoModel) -> Equipment:
        """Convert SQLAlchemy model to domain entity."""
        return Equipment(
            id=model.id,
            equipment_number=model.equipment_number,
            equipment_name=model.equipment_name,
            category=model.category,
            manufacturer=model.manufacturer,
            model=model.model,
            location=model.location,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _status_to_entity(self, model: EquipmentStatusModel) -> EquipmentStatus:
        """Convert SQLAlchemy model to domain entity."""
        return EquipmentStatus(
            id=model.id,
            equipment_id=model.equipment_id,
            status=EquipmentState(model.status) if model.status else EquipmentState.STOPPED,
            status_reason=model.status_reason,
            status_changed_at=model.status_changed_at,
            breakdown_start_time=model.breakdown_start_time,
            maintenance_start_time=model.maintenance_start_time,
            last_repair_date=model.last_repair_date,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _fault_to_entity(self, model: BreakdownReportModel) -> FaultReport:
        """Convert SQLAlchemy model to domain entity."""
        return FaultReport(
            id=model.id,
            equipment_id=model.equipment_id,
            description=model.description,
            status=FaultStatus(model.status) if model.status else FaultStatus.REPORTED,
            urgency_level=UrgencyLevel(model.urgency_level) if model.urgency_level else UrgencyLevel.MEDIUM,
            issue_type=IssueType(model.issue_type) if model.issue_type else IssueType.OTHER,
            reporter_name=model.reporter_name,
            reported_at=model.occurred_at,
            resolution_date=model.resolution_date,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _repair_to_entity(self, model: RepairRecordModel) -> RepairRecord:
        """Convert SQLAlchemy model to domain entity."""
        return RepairRecord(
            id=model.id,
            fault_report_id=model.fault_report_id,
            equipment_id=model.equipment_id,
            status=RepairStatus(model.status) if model.status else RepairStatus.PENDING,
            technician=model.technician,
            started_at=model.started_at,
            completed_at=model.completed_at,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
