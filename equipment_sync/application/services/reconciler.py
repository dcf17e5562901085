"""
Reconciler service.

Periodic or on-demand pass that detects and repairs cross-entity drift left
behind by partial cascade failures or out-of-band writes.
"""
import logging
from typing import List, Optional

from ...domain.entities import (
    EquipmentState,
    IssueKind,
    IssueReport,
    ReconciliationIssue,
    ReconciliationPolicy,
    RepairSummary,
    StoreSnapshot,
    SyncReason,
    utc_now,
)
from ...domain.exceptions import DomainException
from ...domain.services import plan_reconciliation
from ..interfaces import EntityStore
from .status_synchronizer import StatusSynchronizer

logger = logging.getLogger(__name__)

INITIAL_STATE_REASON = "initial state"


class Reconciler:
    """
    Detects and repairs invariant violations across equipment, status rows
    and fault reports.

    Not mutually excluded with the synchronizer; a correction can interleave
    with an in-flight synchronization and be redone on the next pass.
    """

    def __init__(
        self,
        store: EntityStore,
        synchronizer: StatusSynchronizer,
        policy: Optional[ReconciliationPolicy] = None,
    ):
        self._store = store
        self._synchronizer = synchronizer
        self._policy = policy or ReconciliationPolicy()

    @property
    def policy(self) -> ReconciliationPolicy:
        return self._policy

    async def load_snapshot(self) -> StoreSnapshot:
        """Read everything a pass needs. Store errors propagate."""
        equipment = await self._store.list_equipment()
        statuses = await self._store.list_equipment_statuses()
        open_faults = await self._store.list_non_terminal_fault_reports()
        return StoreSnapshot(
            equipment=equipment,
            statuses=statuses,
            open_faults=open_faults,
        )

    # =========================================================================
    # Diagnose
    # =========================================================================

    async def diagnose(self) -> IssueReport:
        """
        Report every invariant violation without changing anything.

        Returns:
            IssueReport with per-kind counts and descriptions
        """
        snapshot = await self.load_snapshot()
        issues = plan_reconciliation(snapshot, self._policy)

        report = IssueReport(
            issues=issues,
            equipment_checked=len(snapshot.equipment),
            checked_at=snapshot.taken_at,
        )
        logger.info(f"Diagnosis found {report.total} issue(s) across {report.equipment_checked} equipment")
        return report

    # =========================================================================
    # Repair
    # =========================================================================

    async def repair_all(self) -> RepairSummary:
        """
        Correct every invariant violation, one issue at a time.

        A failing issue is recorded in ``errors`` and the pass continues.

        Returns:
            RepairSummary with the number of corrected issues
        """
        summary = RepairSummary()
        snapshot = await self.load_snapshot()
        issues = plan_reconciliation(snapshot, self._policy)
        summary.issues_found = len(issues)

        for issue in issues:
            try:
                corrected = await self._repair_issue(issue, summary.errors)
            except DomainException as e:
                logger.warning(f"Reconciliation of {issue.kind.value} for {issue.equipment_id} failed: {e.message}")
                summary.errors.append(f"{self._label(issue)}: {e.message}")
                continue
            except Exception as e:
                logger.exception(f"Unexpected error reconciling {issue.kind.value} for {issue.equipment_id}")
                summary.errors.append(f"{self._label(issue)}: {e}")
                continue
            if corrected:
                summary.synchronized_count += 1

        summary.finished_at = utc_now()
        logger.info(
            f"Reconciliation complete: {summary.synchronized_count}/{summary.issues_found} "
            f"corrected, {len(summary.errors)} error(s)"
        )
        return summary

    async def _repair_issue(self, issue: ReconciliationIssue, errors: List[str]) -> bool:
        """Apply the correction for one issue. Returns True when corrected."""
        if issue.kind == IssueKind.MISSING_STATUS:
            await self._create_initial_status(issue)
            return True

        if issue.kind == IssueKind.ORPHAN_STATUS:
            deleted = await self._store.delete_equipment_status(issue.status_id)
            if deleted:
                logger.info(f"Deleted orphan status {issue.status_id} of missing equipment {issue.equipment_id}")
            return deleted

        if issue.kind == IssueKind.DUPLICATE_STATUS:
            for status_id in issue.redundant_status_ids:
                await self._store.delete_equipment_status(status_id)
            logger.info(
                f"Removed {len(issue.redundant_status_ids)} redundant status row(s) "
                f"for {self._label(issue)}, kept {issue.status_id}"
            )
            return True

        if issue.kind == IssueKind.UNDER_REPORTED_BREAKDOWN:
            result = await self._synchronizer.walk_equipment_status(
                issue.equipment_id,
                EquipmentState.BREAKDOWN,
                SyncReason.BREAKDOWN,
                related_entity_id=issue.related_fault_id,
            )
        elif issue.kind == IssueKind.STALE_BREAKDOWN:
            result = await self._synchronizer.change_equipment_status(
                issue.equipment_id,
                EquipmentState.RUNNING,
                SyncReason.REPAIR_COMPLETE,
            )
        else:
            return False

        errors.extend(f"{self._label(issue)}: {error}" for error in result.errors)
        return result.success

    async def _create_initial_status(self, issue: ReconciliationIssue) -> None:
        now = utc_now()
        target = issue.target_status or self._policy.default_status
        fields = {
            "status": target,
            "status_reason": INITIAL_STATE_REASON,
            "status_changed_at": now,
            "notes": f"[{now.isoformat()}] Created by reconciliation: {target.value}",
        }
        if target == EquipmentState.BREAKDOWN:
            fields["breakdown_start_time"] = now

        await self._store.upsert_equipment_status(issue.equipment_id, fields)
        logger.info(f"Created missing status for {self._label(issue)} as {target.value}")

    @staticmethod
    def _label(issue: ReconciliationIssue) -> str:
        return issue.equipment_number or str(issue.equipment_id)
