"""
Unit tests for Reconciler.

Tests diagnosis and repair passes against the in-memory store.
"""
from datetime import timedelta
from uuid import uuid4

import pytest

from equipment_sync.application.services import Reconciler
from equipment_sync.application.services.reconciler import INITIAL_STATE_REASON
from equipment_sync.domain.entities import (
    EquipmentState,
    FaultStatus,
    IssueKind,
    ReconciliationPolicy,
    utc_now,
)
from equipment_sync.domain.exceptions import EntityStoreException

from factories import (
    BreakdownStatusFactory,
    EquipmentFactory,
    InProgressFaultFactory,
    MaintenanceStatusFactory,
    ReportedFaultFactory,
    RunningStatusFactory,
    StoppedStatusFactory,
)


@pytest.fixture
def drifted_store(store):
    """
    Store with one example of every kind of drift.

    - EQ-A: no status row
    - EQ-B: running with an open fault
    - EQ-C: breakdown with no open faults
    - EQ-D: two status rows
    - one orphan status row
    """
    now = utc_now()
    missing = store.add_equipment(EquipmentFactory(equipment_number="EQ-A"))
    under = store.add_equipment(EquipmentFactory(equipment_number="EQ-B"))
    stale = store.add_equipment(EquipmentFactory(equipment_number="EQ-C"))
    duplicated = store.add_equipment(EquipmentFactory(equipment_number="EQ-D"))

    store.add_status(RunningStatusFactory(equipment_id=under.id))
    store.add_fault_report(ReportedFaultFactory(equipment_id=under.id))
    store.add_status(BreakdownStatusFactory(equipment_id=stale.id))
    store.add_status(StoppedStatusFactory(equipment_id=duplicated.id, status_changed_at=now - timedelta(hours=1)))
    store.add_status(StoppedStatusFactory(equipment_id=duplicated.id, status_changed_at=now))
    store.add_status(RunningStatusFactory(equipment_id=uuid4()))

    return store, [missing, under, stale, duplicated]


class TestDiagnose:
    """Test read-only diagnosis."""

    @pytest.mark.asyncio
    async def test_consistent_store(self, store, reconciler, equipment):
        store.add_status(RunningStatusFactory(equipment_id=equipment.id))

        report = await reconciler.diagnose()

        assert report.total == 0
        assert report.equipment_checked == 1

    @pytest.mark.asyncio
    async def test_reports_every_kind(self, drifted_store, reconciler):
        report = await reconciler.diagnose()

        assert report.counts == {
            "missing_status": 1,
            "under_reported_breakdown": 1,
            "stale_breakdown": 1,
            "duplicate_status": 1,
            "orphan_status": 1,
        }
        assert report.equipment_checked == 4

    @pytest.mark.asyncio
    async def test_writes_nothing(self, drifted_store, reconciler, emitted):
        store, _ = drifted_store

        await reconciler.diagnose()

        assert store.writes == []
        assert emitted() == []

    @pytest.mark.asyncio
    async def test_single_orphan(self, store, reconciler):
        """Test an orphan status row is the only issue reported."""
        missing_id = uuid4()
        store.add_status(RunningStatusFactory(equipment_id=missing_id))

        report = await reconciler.diagnose()

        assert report.total == 1
        assert report.issues[0].kind == IssueKind.ORPHAN_STATUS
        assert str(missing_id) in report.descriptions[0]


class TestRepairAll:
    """Test mutating reconciliation passes."""

    @pytest.mark.asyncio
    async def test_creates_missing_status(self, store, reconciler, equipment):
        summary = await reconciler.repair_all()

        assert summary.synchronized_count == 1
        assert summary.errors == []
        assert summary.finished_at is not None
        rows = store.statuses_for(equipment.id)
        assert len(rows) == 1
        assert rows[0].status == EquipmentState.STOPPED
        assert rows[0].status_reason == INITIAL_STATE_REASON

    @pytest.mark.asyncio
    async def test_second_pass_changes_nothing(self, store, reconciler, equipment):
        await reconciler.repair_all()
        writes = list(store.writes)

        summary = await reconciler.repair_all()

        assert summary.issues_found == 0
        assert summary.synchronized_count == 0
        assert store.writes == writes

    @pytest.mark.asyncio
    async def test_missing_status_with_open_fault(self, store, reconciler, equipment):
        store.add_fault_report(ReportedFaultFactory(equipment_id=equipment.id))

        await reconciler.repair_all()

        status = await store.get_equipment_status(equipment.id)
        assert status.status == EquipmentState.BREAKDOWN
        assert status.breakdown_start_time is not None

    @pytest.mark.asyncio
    async def test_policy_default_status(self, store, synchronizer, equipment):
        reconciler = Reconciler(store, synchronizer, ReconciliationPolicy(default_status=EquipmentState.STANDBY))

        await reconciler.repair_all()

        assert (await store.get_equipment_status(equipment.id)).status == EquipmentState.STANDBY

    @pytest.mark.asyncio
    async def test_deletes_orphan(self, store, reconciler):
        orphan = store.add_status(RunningStatusFactory(equipment_id=uuid4()))

        summary = await reconciler.repair_all()

        assert summary.synchronized_count == 1
        assert orphan.id not in store.statuses

    @pytest.mark.asyncio
    async def test_keeps_newest_duplicate(self, store, reconciler, equipment):
        now = utc_now()
        older = store.add_status(RunningStatusFactory(equipment_id=equipment.id, status_changed_at=now - timedelta(hours=1)))
        newer = store.add_status(RunningStatusFactory(equipment_id=equipment.id, status_changed_at=now))

        await reconciler.repair_all()

        assert [s.id for s in store.statuses_for(equipment.id)] == [newer.id]
        assert older.id not in store.statuses

    @pytest.mark.asyncio
    async def test_under_reported_breakdown(self, store, reconciler, equipment):
        """Test running equipment with an open fault goes to breakdown."""
        store.add_status(RunningStatusFactory(equipment_id=equipment.id))
        fault = store.add_fault_report(ReportedFaultFactory(equipment_id=equipment.id))

        summary = await reconciler.repair_all()

        assert summary.synchronized_count == 1
        assert (await store.get_equipment_status(equipment.id)).status == EquipmentState.BREAKDOWN
        assert store.fault_reports[fault.id].status == FaultStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_stopped_equipment_with_fault_walks_through_running(self, store, reconciler, equipment):
        store.add_status(StoppedStatusFactory(equipment_id=equipment.id))
        store.add_fault_report(ReportedFaultFactory(equipment_id=equipment.id))

        summary = await reconciler.repair_all()

        assert summary.errors == []
        assert store.writes.count(("upsert_equipment_status", equipment.id)) == 2
        assert (await store.get_equipment_status(equipment.id)).status == EquipmentState.BREAKDOWN

    @pytest.mark.asyncio
    async def test_maintenance_left_alone_by_default(self, store, reconciler, equipment):
        store.add_status(MaintenanceStatusFactory(equipment_id=equipment.id))
        store.add_fault_report(InProgressFaultFactory(equipment_id=equipment.id))

        summary = await reconciler.repair_all()

        assert summary.issues_found == 0
        assert store.writes == []

    @pytest.mark.asyncio
    async def test_stale_breakdown_recovers(self, store, reconciler, equipment):
        store.add_status(BreakdownStatusFactory(equipment_id=equipment.id))

        summary = await reconciler.repair_all()

        status = await store.get_equipment_status(equipment.id)
        assert summary.synchronized_count == 1
        assert status.status == EquipmentState.RUNNING
        assert status.last_repair_date is not None

    @pytest.mark.asyncio
    async def test_converges(self, drifted_store, reconciler):
        """Test one pass over mixed drift leaves nothing to fix."""
        summary = await reconciler.repair_all()

        assert summary.issues_found == 5
        assert summary.synchronized_count == 5
        assert summary.errors == []
        assert (await reconciler.diagnose()).total == 0


class TestRepairFailures:
    """Test error handling during a pass."""

    @pytest.mark.asyncio
    async def test_failing_issue_does_not_stop_pass(self, store, reconciler):
        first = store.add_equipment(EquipmentFactory(equipment_number="EQ-1"))
        second = store.add_equipment(EquipmentFactory(equipment_number="EQ-2"))
        store.fail("upsert_equipment_status", first.id)

        summary = await reconciler.repair_all()

        assert summary.synchronized_count == 1
        assert len(summary.errors) == 1
        assert summary.errors[0].startswith("EQ-1:")
        assert store.statuses_for(first.id) == []
        assert len(store.statuses_for(second.id)) == 1

    @pytest.mark.asyncio
    async def test_failed_issue_fixed_once_store_recovers(self, store, reconciler):
        """Test the next pass picks up what a failing store left behind."""
        equipment = store.add_equipment(EquipmentFactory())
        store.fail("upsert_equipment_status")

        summary = await reconciler.repair_all()

        assert summary.synchronized_count == 0
        assert store.statuses_for(equipment.id) == []

        store.clear_failures()
        summary = await reconciler.repair_all()

        assert summary.synchronized_count == 1
        assert summary.errors == []
        assert len(store.statuses_for(equipment.id)) == 1

    @pytest.mark.asyncio
    async def test_load_failure_propagates(self, store, reconciler, equipment):
        store.fail("list_equipment")

        with pytest.raises(EntityStoreException):
            await reconciler.repair_all()

    @pytest.mark.asyncio
    async def test_in_flight_equipment_retried_next_pass(self, store, synchronizer, reconciler, equipment):
        """Test equipment busy in a sync is skipped, then fixed later."""
        store.add_status(BreakdownStatusFactory(equipment_id=equipment.id))
        synchronizer._in_flight.add(equipment.id)

        summary = await reconciler.repair_all()

        assert summary.synchronized_count == 0
        assert "already in progress" in summary.errors[0]
        assert (await store.get_equipment_status(equipment.id)).status == EquipmentState.BREAKDOWN

        synchronizer._in_flight.discard(equipment.id)
        summary = await reconciler.repair_all()

        assert summary.synchronized_count == 1
        assert (await store.get_equipment_status(equipment.id)).status == EquipmentState.RUNNING

    @pytest.mark.asyncio
    async def test_cascade_errors_reported(self, store, reconciler, equipment):
        """Test a corrected issue still reports cascade failures."""
        store.add_status(RunningStatusFactory(equipment_id=equipment.id))
        fault = store.add_fault_report(ReportedFaultFactory(equipment_id=equipment.id))
        store.fail("update_fault_report", fault.id)

        summary = await reconciler.repair_all()

        assert summary.synchronized_count == 1
        assert len(summary.errors) == 1
        assert summary.errors[0].startswith(f"{equipment.equipment_number}:")
