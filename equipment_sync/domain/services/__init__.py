# Domain Services - Business logic that doesn't belong to a single entity

from .transition_rules import (
    EntityType,
    valid_next_states,
    can_transition,
    ensure_transition,
    transition_path,
    parse_state,
)
from .reconciliation_planner import (
    plan_reconciliation,
    select_current_status,
    equipment_sort_key,
)

__all__ = [
    'EntityType',
    'valid_next_states',
    'can_transition',
    'ensure_transition',
    'transition_path',
    'parse_state',
    'plan_reconciliation',
    'select_current_status',
    'equipment_sort_key',
]
