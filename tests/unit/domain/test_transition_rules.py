"""
Unit tests for transition rules.

Tests the equipment, fault report and repair record state graphs.
"""
from itertools import product

import pytest

from equipment_sync.domain.entities import EquipmentState, FaultStatus, RepairStatus
from equipment_sync.domain.exceptions import IllegalTransitionException
from equipment_sync.domain.services import (
    EntityType,
    can_transition,
    ensure_transition,
    parse_state,
    transition_path,
    valid_next_states,
)


class TestEquipmentGraph:
    """Test equipment transitions."""

    @pytest.mark.parametrize("target", [
        EquipmentState.BREAKDOWN,
        EquipmentState.STANDBY,
        EquipmentState.MAINTENANCE,
        EquipmentState.STOPPED,
    ])
    def test_running_reaches_every_other_state(self, target):
        """Test running can move to every other state."""
        assert can_transition(EntityType.EQUIPMENT, EquipmentState.RUNNING, target)

    def test_breakdown_next_states(self):
        """Test breakdown can recover, go to maintenance, or stop."""
        assert valid_next_states(EntityType.EQUIPMENT, EquipmentState.BREAKDOWN) == {
            EquipmentState.RUNNING,
            EquipmentState.MAINTENANCE,
            EquipmentState.STOPPED,
        }

    def test_breakdown_only_entered_from_running(self):
        """Test no state other than running leads to breakdown."""
        for state in EquipmentState:
            allowed = can_transition(EntityType.EQUIPMENT, state, EquipmentState.BREAKDOWN)
            assert allowed == (state == EquipmentState.RUNNING)

    def test_breakdown_to_standby_rejected(self):
        assert not can_transition(EntityType.EQUIPMENT, EquipmentState.BREAKDOWN, EquipmentState.STANDBY)

    def test_self_transition_rejected(self):
        """Test a state is never its own successor."""
        for state in EquipmentState:
            assert not can_transition(EntityType.EQUIPMENT, state, state)

    def test_accepts_raw_strings(self):
        """Test raw enum values are accepted."""
        assert can_transition("equipment", "running", "breakdown")
        assert not can_transition("equipment", "stopped", "breakdown")


class TestFaultGraph:
    """Test fault report transitions."""

    def test_reported_to_in_progress(self):
        assert can_transition(EntityType.FAULT_REPORT, FaultStatus.REPORTED, FaultStatus.IN_PROGRESS)

    def test_reported_cannot_skip_to_completed(self):
        """Test completion requires passing through in_progress."""
        assert not can_transition(EntityType.FAULT_REPORT, FaultStatus.REPORTED, FaultStatus.COMPLETED)

    @pytest.mark.parametrize("terminal", [
        FaultStatus.COMPLETED,
        FaultStatus.REJECTED,
        FaultStatus.CANCELLED,
    ])
    def test_terminal_states_have_no_successors(self, terminal):
        assert valid_next_states(EntityType.FAULT_REPORT, terminal) == frozenset()

    def test_rejected_never_reachable(self):
        """Test rejected/cancelled are not targets of any edge."""
        for state in FaultStatus:
            assert not can_transition(EntityType.FAULT_REPORT, state, FaultStatus.REJECTED)
            assert not can_transition(EntityType.FAULT_REPORT, state, FaultStatus.CANCELLED)


class TestRepairGraph:
    """Test repair record transitions."""

    def test_in_progress_can_complete_or_fail(self):
        assert valid_next_states(EntityType.REPAIR_RECORD, RepairStatus.IN_PROGRESS) == {
            RepairStatus.COMPLETED,
            RepairStatus.FAILED,
        }

    def test_failed_can_be_retried(self):
        assert can_transition(EntityType.REPAIR_RECORD, RepairStatus.FAILED, RepairStatus.PENDING)

    def test_completed_is_terminal(self):
        assert valid_next_states(EntityType.REPAIR_RECORD, RepairStatus.COMPLETED) == frozenset()


class TestUnknownInput:
    """Test handling of unknown entity types and states."""

    def test_unknown_state_has_no_successors(self):
        assert valid_next_states(EntityType.EQUIPMENT, "flying") == frozenset()

    def test_unknown_target_rejected(self):
        assert not can_transition(EntityType.EQUIPMENT, "running", "flying")

    def test_unknown_entity_type_rejected(self):
        assert not can_transition("widget", "running", "stopped")
        assert parse_state("widget", "running") is None

    def test_parse_state_converts_between_enums(self):
        """Test a state of one entity type is not accepted as another's."""
        assert parse_state(EntityType.FAULT_REPORT, "in_progress") is FaultStatus.IN_PROGRESS
        assert parse_state(EntityType.EQUIPMENT, "in_progress") is None


class TestEnsureTransition:
    """Test transition validation."""

    def test_legal_transition_passes(self):
        ensure_transition(EntityType.EQUIPMENT, EquipmentState.RUNNING, EquipmentState.BREAKDOWN)

    def test_illegal_transition_raises_with_details(self):
        with pytest.raises(IllegalTransitionException) as exc_info:
            ensure_transition(EntityType.EQUIPMENT, EquipmentState.BREAKDOWN, EquipmentState.STANDBY)

        exc = exc_info.value
        assert exc.code == "INVALID_STATE_TRANSITION"
        assert exc.details == {
            "entity_type": "equipment",
            "current_state": "breakdown",
            "target_state": "standby",
        }


class TestTransitionPath:
    """Test shortest legal paths."""

    def test_direct_edge(self):
        assert transition_path(
            EntityType.EQUIPMENT, EquipmentState.RUNNING, EquipmentState.BREAKDOWN
        ) == [EquipmentState.BREAKDOWN]

    def test_stopped_to_breakdown_goes_through_running(self):
        assert transition_path(
            EntityType.EQUIPMENT, EquipmentState.STOPPED, EquipmentState.BREAKDOWN
        ) == [EquipmentState.RUNNING, EquipmentState.BREAKDOWN]

    def test_maintenance_to_breakdown_goes_through_running(self):
        assert transition_path(
            EntityType.EQUIPMENT, EquipmentState.MAINTENANCE, EquipmentState.BREAKDOWN
        ) == [EquipmentState.RUNNING, EquipmentState.BREAKDOWN]

    def test_same_state_is_empty_path(self):
        assert transition_path(EntityType.EQUIPMENT, "running", "running") == []

    def test_fault_completion_path(self):
        assert transition_path(
            EntityType.FAULT_REPORT, FaultStatus.REPORTED, FaultStatus.COMPLETED
        ) == [FaultStatus.IN_PROGRESS, FaultStatus.COMPLETED]

    def test_unreachable_returns_none(self):
        assert transition_path(
            EntityType.FAULT_REPORT, FaultStatus.COMPLETED, FaultStatus.IN_PROGRESS
        ) is None

    def test_every_step_is_legal(self):
        """Test each hop of every equipment path is a graph edge."""
        for start in EquipmentState:
            for goal in EquipmentState:
                path = transition_path(EntityType.EQUIPMENT, start, goal)
                assert path is not None
                current = start
                for step in path:
                    assert can_transition(EntityType.EQUIPMENT, current, step)
                    current = step
                assert current == goal


LEGAL_EDGES = {
    EntityType.EQUIPMENT: {
        ("running", "breakdown"), ("running", "standby"),
        ("running", "maintenance"), ("running", "stopped"),
        ("breakdown", "running"), ("breakdown", "maintenance"), ("breakdown", "stopped"),
        ("standby", "running"), ("standby", "maintenance"), ("standby", "stopped"),
        ("maintenance", "running"), ("maintenance", "standby"), ("maintenance", "stopped"),
        ("stopped", "running"), ("stopped", "standby"), ("stopped", "maintenance"),
    },
    EntityType.FAULT_REPORT: {
        ("reported", "in_progress"),
        ("in_progress", "completed"),
    },
    EntityType.REPAIR_RECORD: {
        ("pending", "in_progress"),
        ("in_progress", "completed"), ("in_progress", "failed"),
        ("failed", "pending"),
    },
}

ALL_PAIRS = [
    (entity_type, current.value, target.value)
    for entity_type, states in (
        (EntityType.EQUIPMENT, EquipmentState),
        (EntityType.FAULT_REPORT, FaultStatus),
        (EntityType.REPAIR_RECORD, RepairStatus),
    )
    for current, target in product(states, repeat=2)
]


class TestEveryPair:
    """Test legality of every (from, to) pair against the edge tables."""

    @pytest.mark.parametrize("entity_type,current,target", ALL_PAIRS)
    def test_pair(self, entity_type, current, target):
        expected = (current, target) in LEGAL_EDGES[entity_type]

        assert can_transition(entity_type, current, target) is expected

        if expected:
            ensure_transition(entity_type, current, target)
        else:
            with pytest.raises(IllegalTransitionException):
                ensure_transition(entity_type, current, target)
