"""
SQLAlchemy models for equipment, status, fault reports and repairs.

Status columns hold the raw enum values; conversion to the domain enums
happens in the repository.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    String,
    Text,
    DateTime,
    Index,
)
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from ....domain.entities import utc_now
from .base import Base


class EquipmentInfoModel(Base):
    """
    Tracked physical machines.
    """
    __tablename__ = "equipment_info"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    equipment_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    equipment_name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    manufacturer: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class EquipmentStatusModel(Base):
    """
    Operational status of equipment.

    No unique constraint on equipment_id and no foreign key: duplicates and
    orphans can appear through out-of-band writes and are cleaned up by
    reconciliation.
    """
    __tablename__ = "equipment_status"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    equipment_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="stopped")
    status_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status_changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Transition markers
    breakdown_start_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    maintenance_start_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_repair_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_equipment_status_status", "status"),
    )


class BreakdownReportModel(Base):
    """
    Fault reports raised against equipment.
    """
    __tablename__ = "breakdown_reports"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    equipment_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="reported")
    urgency_level: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    issue_type: Mapped[str] = mapped_column(String(20), nullable=False, default="other")
    reporter_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    occurred_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_breakdown_reports_equipment_status", "equipment_id", "status"),
    )


class RepairRecordModel(Base):
    """
    Repair work performed against a fault report.
    """
    __tablename__ = "repair_records"

    id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    fault_report_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)
    equipment_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    technician: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
