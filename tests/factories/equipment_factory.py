"""
Equipment-related test data factories.
"""
from uuid import uuid4

import factory

from equipment_sync.domain.entities import (
    Equipment,
    EquipmentState,
    EquipmentStatus,
    utc_now,
)


class EquipmentFactory(factory.Factory):
    """
    Factory for Equipment entities.

    Usage:
        equipment = EquipmentFactory()
        equipment = EquipmentFactory(equipment_number="EQ-0042")
    """

    class Meta:
        model = Equipment

    id = factory.LazyFunction(uuid4)
    equipment_number = factory.Sequence(lambda n: f"EQ-{n:04d}")
    equipment_name = factory.LazyAttribute(lambda o: f"Press {o.equipment_number}")
    category = factory.Iterator(["press", "lathe", "conveyor", "compressor"])
    manufacturer = "Acme"
    location = factory.Iterator(["Line 1", "Line 2", "Warehouse"])
    created_at = factory.LazyFunction(utc_now)


class EquipmentStatusFactory(factory.Factory):
    """Factory for EquipmentStatus rows."""

    class Meta:
        model = EquipmentStatus

    id = factory.LazyFunction(uuid4)
    equipment_id = factory.LazyFunction(uuid4)
    status = EquipmentState.RUNNING
    status_reason = "seed"
    status_changed_at = factory.LazyFunction(utc_now)
    created_at = factory.LazyFunction(utc_now)


class RunningStatusFactory(EquipmentStatusFactory):
    """Factory for equipment that is running."""

    status = EquipmentState.RUNNING


class BreakdownStatusFactory(EquipmentStatusFactory):
    """Factory for equipment in breakdown."""

    status = EquipmentState.BREAKDOWN
    breakdown_start_time = factory.LazyFunction(utc_now)


class StoppedStatusFactory(EquipmentStatusFactory):
    """Factory for stopped equipment."""

    status = EquipmentState.STOPPED


class MaintenanceStatusFactory(EquipmentStatusFactory):
    """Factory for equipment under maintenance."""

    status = EquipmentState.MAINTENANCE
    maintenance_start_time = factory.LazyFunction(utc_now)
