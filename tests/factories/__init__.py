"""
Test data factories.

Provides factory classes for generating domain entities.
"""
from .equipment_factory import (
    EquipmentFactory,
    EquipmentStatusFactory,
    RunningStatusFactory,
    BreakdownStatusFactory,
    StoppedStatusFactory,
    MaintenanceStatusFactory,
)
from .fault_factory import (
    FaultReportFactory,
    ReportedFaultFactory,
    InProgressFaultFactory,
    CompletedFaultFactory,
    RejectedFaultFactory,
    RepairRecordFactory,
    InProgressRepairFactory,
)

__all__ = [
    "EquipmentFactory",
    "EquipmentStatusFactory",
    "RunningStatusFactory",
    "BreakdownStatusFactory",
    "StoppedStatusFactory",
    "MaintenanceStatusFactory",
    "FaultReportFactory",
    "ReportedFaultFactory",
    "InProgressFaultFactory",
    "CompletedFaultFactory",
    "RejectedFaultFactory",
    "RepairRecordFactory",
    "InProgressRepairFactory",
]
