"""
Reconciliation Planner Domain Service.

Computes the set of cross-entity invariant violations in a store snapshot.
The planner is a pure function of its inputs so it can be exercised
without a store; the Reconciler application service executes the plan.
"""
from collections import defaultdict
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from ..entities.equipment import Equipment, EquipmentState, EquipmentStatus
from ..entities.fault_report import FaultReport
from ..entities.reconciliation import (
    IssueKind,
    ReconciliationIssue,
    ReconciliationPolicy,
    StoreSnapshot,
)


def equipment_sort_key(equipment: Equipment) -> Tuple[str, str]:
    """Stable processing order: equipment number, then id."""
    return (equipment.equipment_number or "", str(equipment.id))


def plan_reconciliation(
    snapshot: StoreSnapshot,
    policy: Optional[ReconciliationPolicy] = None,
) -> List[ReconciliationIssue]:
    """
    Find every invariant violation in a snapshot.

    Issues are grouped per equipment in stable equipment order, followed by
    orphan status rows ordered by their equipment id. Applying the returned
    plan and planning again over the result yields an empty list.

    Args:
        snapshot: Equipment, status rows and open fault reports.
        policy: How to judge and correct drift.

    Returns:
        Ordered list of issues.
    """
    policy = policy or ReconciliationPolicy()

    equipment_ids = {e.id for e in snapshot.equipment}

    statuses_by_equipment: Dict[UUID, List[EquipmentStatus]] = defaultdict(list)
    for row in snapshot.statuses:
        statuses_by_equipment[row.equipment_id].append(row)

    faults_by_equipment: Dict[UUID, List[FaultReport]] = defaultdict(list)
    for fault in snapshot.open_faults:
        if fault.is_open():
            faults_by_equipment[fault.equipment_id].append(fault)

    issues: List[ReconciliationIssue] = []

    for equipment in sorted(snapshot.equipment, key=equipment_sort_key):
        rows = statuses_by_equipment.get(equipment.id, [])
        faults = sorted(
            faults_by_equipment.get(equipment.id, []),
            key=lambda f: (f.reported_at or f.created_at, str(f.id)),
        )
        label = _label(equipment)

        if not rows:
            target = EquipmentState.BREAKDOWN if faults else policy.default_status
            issues.append(ReconciliationIssue(
                kind=IssueKind.MISSING_STATUS,
                equipment_id=equipment.id,
                equipment_number=equipment.equipment_number,
                target_status=target,
                related_fault_id=faults[0].id if faults else None,
                description=f"Equipment {label} has no status record",
            ))
            continue

        current = select_current_status(rows)

        if len(rows) > 1:
            redundant = [r.id for r in rows if r.id != current.id]
            issues.append(ReconciliationIssue(
                kind=IssueKind.DUPLICATE_STATUS,
                equipment_id=equipment.id,
                equipment_number=equipment.equipment_number,
                status_id=current.id,
                current_status=current.status,
                redundant_status_ids=redundant,
                description=(
                    f"Equipment {label} has {len(rows)} status records; "
                    f"{len(redundant)} redundant"
                ),
            ))

        if faults and not _reflects_open_faults(current.status, policy):
            issues.append(ReconciliationIssue(
                kind=IssueKind.UNDER_REPORTED_BREAKDOWN,
                equipment_id=equipment.id,
                equipment_number=equipment.equipment_number,
                status_id=current.id,
                current_status=current.status,
                target_status=EquipmentState.BREAKDOWN,
                related_fault_id=faults[0].id,
                description=(
                    f"Equipment {label} has {len(faults)} open fault report(s) "
                    f"but status is '{current.status.value}'"
                ),
            ))
        elif not faults and current.status == EquipmentState.BREAKDOWN:
            issues.append(ReconciliationIssue(
                kind=IssueKind.STALE_BREAKDOWN,
                equipment_id=equipment.id,
                equipment_number=equipment.equipment_number,
                status_id=current.id,
                current_status=current.status,
                target_status=EquipmentState.RUNNING,
                description=f"Equipment {label} is in breakdown with no open fault reports",
            ))

    orphans = [
        row for row in snapshot.statuses
        if row.equipment_id not in equipment_ids
    ]
    for row in sorted(orphans, key=lambda r: (str(r.equipment_id), str(r.id))):
        issues.append(ReconciliationIssue(
            kind=IssueKind.ORPHAN_STATUS,
            equipment_id=row.equipment_id,
            status_id=row.id,
            current_status=row.status,
            description=(
                f"Status record {row.id} references missing equipment {row.equipment_id}"
            ),
        ))

    return issues


def select_current_status(rows: List[EquipmentStatus]) -> EquipmentStatus:
    """Pick the authoritative row among duplicates: the most recently changed."""
    return max(rows, key=lambda r: (r.last_activity, str(r.id)))


def _reflects_open_faults(status: EquipmentState, policy: ReconciliationPolicy) -> bool:
    if status == EquipmentState.BREAKDOWN:
        return True
    return policy.tolerate_maintenance and status == EquipmentState.MAINTENANCE


def _label(equipment: Equipment) -> str:
    return equipment.equipment_number or str(equipment.id)
