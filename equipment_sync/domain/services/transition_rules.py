"""
Transition Rules Domain Service.

Legal state graphs for equipment, fault reports and repair records.
Everything here is pure: no store access, no clock, no logging.
"""
from collections import deque
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Type, Union

from ..entities.equipment import EquipmentState
from ..entities.fault_report import FaultStatus
from ..entities.repair_record import RepairStatus
from ..exceptions import IllegalTransitionException


class EntityType(str, Enum):
    """Entity types that carry a state machine."""
    EQUIPMENT = "equipment"
    FAULT_REPORT = "fault_report"
    REPAIR_RECORD = "repair_record"


State = Union[EquipmentState, FaultStatus, RepairStatus]


EQUIPMENT_TRANSITIONS: Dict[EquipmentState, FrozenSet[EquipmentState]] = {
    EquipmentState.RUNNING: frozenset({
        EquipmentState.BREAKDOWN,
        EquipmentState.STANDBY,
        EquipmentState.MAINTENANCE,
        EquipmentState.STOPPED,
    }),
    EquipmentState.BREAKDOWN: frozenset({
        EquipmentState.RUNNING,
        EquipmentState.MAINTENANCE,
        EquipmentState.STOPPED,
    }),
    EquipmentState.STANDBY: frozenset({
        EquipmentState.RUNNING,
        EquipmentState.MAINTENANCE,
        EquipmentState.STOPPED,
    }),
    EquipmentState.MAINTENANCE: frozenset({
        EquipmentState.RUNNING,
        EquipmentState.STANDBY,
        EquipmentState.STOPPED,
    }),
    EquipmentState.STOPPED: frozenset({
        EquipmentState.RUNNING,
        EquipmentState.STANDBY,
        EquipmentState.MAINTENANCE,
    }),
}

FAULT_TRANSITIONS: Dict[FaultStatus, FrozenSet[FaultStatus]] = {
    FaultStatus.REPORTED: frozenset({FaultStatus.IN_PROGRESS}),
    FaultStatus.IN_PROGRESS: frozenset({FaultStatus.COMPLETED}),
    FaultStatus.COMPLETED: frozenset(),
    FaultStatus.REJECTED: frozenset(),
    FaultStatus.CANCELLED: frozenset(),
}

REPAIR_TRANSITIONS: Dict[RepairStatus, FrozenSet[RepairStatus]] = {
    RepairStatus.PENDING: frozenset({RepairStatus.IN_PROGRESS}),
    RepairStatus.IN_PROGRESS: frozenset({RepairStatus.COMPLETED, RepairStatus.FAILED}),
    RepairStatus.COMPLETED: frozenset(),
    RepairStatus.FAILED: frozenset({RepairStatus.PENDING}),
}

_GRAPHS: Dict[EntityType, Dict] = {
    EntityType.EQUIPMENT: EQUIPMENT_TRANSITIONS,
    EntityType.FAULT_REPORT: FAULT_TRANSITIONS,
    EntityType.REPAIR_RECORD: REPAIR_TRANSITIONS,
}

_STATE_TYPES: Dict[EntityType, Type[Enum]] = {
    EntityType.EQUIPMENT: EquipmentState,
    EntityType.FAULT_REPORT: FaultStatus,
    EntityType.REPAIR_RECORD: RepairStatus,
}


def parse_state(entity_type: Union[EntityType, str], state: Union[State, str, None]) -> Optional[State]:
    """
    Convert a raw state string into the entity's state enum.

    Returns None for unknown entity types or state values.
    """
    try:
        state_type = _STATE_TYPES[EntityType(entity_type)]
    except ValueError:
        return None
    if state is None:
        return None
    if isinstance(state, state_type):
        return state
    try:
        return state_type(state.value if isinstance(state, Enum) else state)
    except ValueError:
        return None


def valid_next_states(
    entity_type: Union[EntityType, str],
    current_state: Union[State, str],
) -> FrozenSet[State]:
    """
    Get the states reachable in one step from ``current_state``.

    Args:
        entity_type: Which state machine to consult.
        current_state: Current state (enum member or raw value).

    Returns:
        Frozen set of legal next states; empty for terminal or unknown states.
    """
    state = parse_state(entity_type, current_state)
    if state is None:
        return frozenset()
    return _GRAPHS[EntityType(entity_type)].get(state, frozenset())


def can_transition(
    entity_type: Union[EntityType, str],
    from_state: Union[State, str],
    to_state: Union[State, str],
) -> bool:
    """Check whether ``from_state -> to_state`` is an edge of the graph."""
    target = parse_state(entity_type, to_state)
    if target is None:
        return False
    return target in valid_next_states(entity_type, from_state)


def ensure_transition(
    entity_type: Union[EntityType, str],
    from_state: Union[State, str],
    to_state: Union[State, str],
) -> None:
    """
    Validate a transition.

    Raises:
        IllegalTransitionException: If the transition is not an edge.
    """
    if not can_transition(entity_type, from_state, to_state):
        raise IllegalTransitionException(
            entity_type=EntityType(entity_type).value,
            current_state=_raw(from_state),
            target_state=_raw(to_state),
        )


def transition_path(
    entity_type: Union[EntityType, str],
    from_state: Union[State, str],
    to_state: Union[State, str],
) -> Optional[List[State]]:
    """
    Find the shortest sequence of legal steps from one state to another.

    The returned list excludes the starting state, so an empty list means
    the states are equal. Ties are broken by declaration order of the enum
    so the result is deterministic.

    Returns:
        List of states to pass through, or None if unreachable.
    """
    start = parse_state(entity_type, from_state)
    goal = parse_state(entity_type, to_state)
    if start is None or goal is None:
        return None
    if start == goal:
        return []

    state_type = _STATE_TYPES[EntityType(entity_type)]
    order = {member: index for index, member in enumerate(state_type)}

    previous: Dict[State, State] = {}
    queue = deque([start])
    visited = {start}

    while queue:
        current = queue.popleft()
        for nxt in sorted(valid_next_states(entity_type, current), key=order.__getitem__):
            if nxt in visited:
                continue
            visited.add(nxt)
            previous[nxt] = current
            if nxt == goal:
                path = [goal]
                while path[-1] in previous and previous[path[-1]] != start:
                    path.append(previous[path[-1]])
                path.reverse()
                return path
            queue.append(nxt)

    return None


def _raw(state: Union[State, str, None]) -> Optional[str]:
    if isinstance(state, Enum):
        return state.value
    return state
