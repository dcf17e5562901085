"""
Fault report and repair record test data factories.
"""
from uuid import uuid4

import factory

from equipment_sync.domain.entities import (
    FaultReport,
    FaultStatus,
    IssueType,
    RepairRecord,
    RepairStatus,
    UrgencyLevel,
    utc_now,
)


class FaultReportFactory(factory.Factory):
    """
    Factory for FaultReport entities.

    Usage:
        fault = FaultReportFactory(equipment_id=equipment.id)
        fault = InProgressFaultFactory(equipment_id=equipment.id)
    """

    class Meta:
        model = FaultReport

    id = factory.LazyFunction(uuid4)
    equipment_id = factory.LazyFunction(uuid4)
    description = factory.Iterator([
        "Hydraulic pressure drop",
        "Motor overheating",
        "Controller not responding",
        "Emergency stop stuck",
    ])
    status = FaultStatus.REPORTED
    urgency_level = factory.Iterator(list(UrgencyLevel))
    issue_type = factory.Iterator(list(IssueType))
    reporter_name = factory.Sequence(lambda n: f"operator{n}")
    created_at = factory.LazyFunction(utc_now)


class ReportedFaultFactory(FaultReportFactory):
    """Factory for freshly reported faults."""

    status = FaultStatus.REPORTED


class InProgressFaultFactory(FaultReportFactory):
    """Factory for faults being worked on."""

    status = FaultStatus.IN_PROGRESS


class CompletedFaultFactory(FaultReportFactory):
    """Factory for resolved faults."""

    status = FaultStatus.COMPLETED
    resolution_date = factory.LazyFunction(utc_now)


class RejectedFaultFactory(FaultReportFactory):
    """Factory for faults rejected upstream."""

    status = FaultStatus.REJECTED


class RepairRecordFactory(factory.Factory):
    """Factory for RepairRecord entities."""

    class Meta:
        model = RepairRecord

    id = factory.LazyFunction(uuid4)
    fault_report_id = factory.LazyFunction(uuid4)
    equipment_id = factory.LazyFunction(uuid4)
    status = RepairStatus.PENDING
    technician = factory.Sequence(lambda n: f"tech{n}")
    created_at = factory.LazyFunction(utc_now)


class InProgressRepairFactory(RepairRecordFactory):
    """Factory for repairs under way."""

    status = RepairStatus.IN_PROGRESS
    started_at = factory.LazyFunction(utc_now)
