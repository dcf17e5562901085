"""
Reconciliation Worker - Main Entry Point.

Runs scheduled reconciliation passes without the HTTP API:

    python -m equipment_sync.workers.main
"""
import asyncio
import logging
import signal
import sys

from ..config import get_settings
from ..container import build_container
from .reconciliation_worker import ReconciliationWorker

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format=settings.log_format,
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

logger = logging.getLogger(__name__)


def setup_signal_handlers(shutdown_event: asyncio.Event, loop: asyncio.AbstractEventLoop):
    """Setup signal handlers for graceful shutdown."""
    def signal_handler():
        logger.info("Received shutdown signal")
        shutdown_event.set()

    # Handle both SIGINT and SIGTERM
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            signal.signal(sig, lambda s, f: signal_handler())


async def create_worker() -> ReconciliationWorker:
    """
    Build the worker from settings.

    On the SQL backend the entity store tables are created first.
    """
    if settings.sync.store_backend == 'sql':
        from ..infrastructure.database import init_db
        await init_db()

    container = build_container(settings)
    return ReconciliationWorker(
        container.reconciler,
        interval_seconds=settings.reconciler.interval_seconds,
        mode=settings.reconciler.mode,
    )


async def main():
    """Main entry point."""
    from ..infrastructure.database import DatabaseManager
    from ..infrastructure.messaging import RedisStreamManager

    worker = await create_worker()

    shutdown_event = asyncio.Event()
    setup_signal_handlers(shutdown_event, asyncio.get_running_loop())

    try:
        await worker.start()
        await shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        await worker.stop()
        await DatabaseManager.close()
        await RedisStreamManager.close()


if __name__ == "__main__":
    asyncio.run(main())
