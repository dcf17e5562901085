"""
Reconciliation worker.

Periodically runs a reconciliation pass so drift left by failed cascades or
out-of-band writes is corrected without operator action.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from ..application.services import Reconciler
from ..domain.entities import IssueReport, RepairSummary

logger = logging.getLogger(__name__)


class ReconciliationWorker:
    """
    Background worker for scheduled reconciliation.

    In ``repair`` mode each cycle corrects drift; in ``diagnose`` mode it
    only logs what it finds.
    """

    def __init__(
        self,
        reconciler: Reconciler,
        interval_seconds: int = 300,
        mode: str = "repair",
    ):
        """
        Initialize the reconciliation worker.

        Args:
            reconciler: Reconciler to run.
            interval_seconds: Time between the start of two cycles.
            mode: "repair" or "diagnose".
        """
        if mode not in ("repair", "diagnose"):
            raise ValueError(f"Unknown reconciliation mode: {mode}")

        self.reconciler = reconciler
        self.run_interval = timedelta(seconds=interval_seconds)
        self.mode = mode

        # State
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._shutdown_event = asyncio.Event()

        # Stats
        self._runs_completed = 0
        self._runs_failed = 0
        self._last_run_time: Optional[datetime] = None
        self._last_run_duration: Optional[float] = None
        self._last_result: Optional[Union[IssueReport, RepairSummary]] = None

    async def start(self) -> None:
        """Start the reconciliation worker."""
        if self._running:
            logger.warning("Reconciliation worker already running")
            return

        logger.info(f"Starting reconciliation worker ({self.mode}, every {self.run_interval.total_seconds():.0f}s)")
        self._running = True
        self._shutdown_event.clear()

        self._task = asyncio.create_task(
            self._run_loop(),
            name="reconciliation_worker",
        )

    async def stop(self) -> None:
        """Stop the reconciliation worker."""
        if not self._running:
            return

        logger.info("Stopping reconciliation worker")
        self._running = False
        self._shutdown_event.set()

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info(f"Reconciliation worker stopped. Runs completed: {self._runs_completed}")

    async def run_once(self) -> Union[IssueReport, RepairSummary]:
        """Run a single cycle in the configured mode."""
        if self.mode == "diagnose":
            report = await self.reconciler.diagnose()
            for description in report.descriptions:
                logger.warning(f"Drift detected: {description}")
            result = report
        else:
            result = await self.reconciler.repair_all()
            for error in result.errors:
                logger.warning(f"Reconciliation error: {error}")

        self._last_result = result
        return result

    async def _run_loop(self) -> None:
        """Main reconciliation loop."""
        logger.debug("Reconciliation worker loop started")

        while self._running:
            start_time = datetime.now(timezone.utc)
            self._last_run_time = start_time

            try:
                await self.run_once()
                self._runs_completed += 1
            except asyncio.CancelledError:
                break
            except Exception:
                self._runs_failed += 1
                logger.exception("Error in reconciliation worker loop")

            self._last_run_duration = (
                datetime.now(timezone.utc) - start_time
            ).total_seconds()

            # Wait for next cycle
            remaining = max(self.run_interval.total_seconds() - self._last_run_duration, 0)
            try:
                await asyncio.wait_for(
                    self._shutdown_event.wait(),
                    timeout=remaining,
                )
                break  # Shutdown requested
            except asyncio.TimeoutError:
                pass  # Normal timeout
            except asyncio.CancelledError:
                break

        logger.debug("Reconciliation worker loop ended")

    def get_stats(self) -> Dict[str, Any]:
        """Get worker statistics."""
        return {
            "running": self._running,
            "mode": self.mode,
            "runs_completed": self._runs_completed,
            "runs_failed": self._runs_failed,
            "last_run_time": self._last_run_time.isoformat() if self._last_run_time else None,
            "last_run_duration_seconds": self._last_run_duration,
            "run_interval_seconds": self.run_interval.total_seconds(),
            "last_result": self._last_result.to_dict() if self._last_result else None,
        }

    @property
    def is_running(self) -> bool:
        """Check if worker is running."""
        return self._running
