"""
Pydantic schemas for reconciliation endpoints.
"""
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from ...domain.entities import IssueReport, ReconciliationIssue, RepairSummary


class IssueResponse(BaseModel):
    """One invariant violation."""
    kind: str
    equipment_id: UUID
    equipment_number: Optional[str] = None
    status_id: Optional[UUID] = None
    current_status: Optional[str] = None
    target_status: Optional[str] = None
    related_fault_id: Optional[UUID] = None
    redundant_status_ids: List[UUID] = []
    description: str

    @classmethod
    def from_issue(cls, issue: ReconciliationIssue) -> "IssueResponse":
        return cls(
            kind=issue.kind.value,
            equipment_id=issue.equipment_id,
            equipment_number=issue.equipment_number,
            status_id=issue.status_id,
            current_status=issue.current_status.value if issue.current_status else None,
            target_status=issue.target_status.value if issue.target_status else None,
            related_fault_id=issue.related_fault_id,
            redundant_status_ids=issue.redundant_status_ids,
            description=issue.description,
        )


class IssueReportResponse(BaseModel):
    """Result of a diagnostic pass."""
    total: int
    counts: Dict[str, int]
    equipment_checked: int
    checked_at: datetime
    issues: List[IssueResponse]

    @classmethod
    def from_report(cls, report: IssueReport) -> "IssueReportResponse":
        return cls(
            total=report.total,
            counts=report.counts,
            equipment_checked=report.equipment_checked,
            checked_at=report.checked_at,
            issues=[IssueResponse.from_issue(i) for i in report.issues],
        )


class RepairSummaryResponse(BaseModel):
    """Result of a repair pass."""
    synchronized_count: int
    issues_found: int
    errors: List[str]
    started_at: datetime
    finished_at: Optional[datetime] = None

    @classmethod
    def from_summary(cls, summary: RepairSummary) -> "RepairSummaryResponse":
        return cls(
            synchronized_count=summary.synchronized_count,
            issues_found=summary.issues_found,
            errors=summary.errors,
            started_at=summary.started_at,
            finished_at=summary.finished_at,
        )
