"""
Reconciliation API endpoints.
"""
import logging

from fastapi import APIRouter, Depends

from ..dependencies import get_reconciler
from ..schemas import IssueReportResponse, RepairSummaryResponse
from ...application.services import Reconciler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reconciliation", tags=["Reconciliation"])


@router.get(
    "/diagnose",
    response_model=IssueReportResponse,
    summary="Diagnose drift",
    description="List every cross-entity inconsistency without changing anything.",
)
async def diagnose(
    reconciler: Reconciler = Depends(get_reconciler),
) -> IssueReportResponse:
    report = await reconciler.diagnose()
    return IssueReportResponse.from_report(report)


@router.post(
    "/repair",
    response_model=RepairSummaryResponse,
    summary="Repair drift",
    description="Correct every inconsistency found. Safe to run repeatedly.",
)
async def repair(
    reconciler: Reconciler = Depends(get_reconciler),
) -> RepairSummaryResponse:
    logger.info("Reconciliation pass requested over HTTP")
    summary = await reconciler.repair_all()
    return RepairSummaryResponse.from_summary(summary)
