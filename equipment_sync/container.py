"""
Service wiring shared by the HTTP app and the standalone worker.

One container per process: the synchronizer's in-flight set only guards
calls that go through the same instance.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .application.interfaces import EntityStore, Notifier
from .application.services import LifecycleService, Reconciler, StatusSynchronizer
from .config import AppSettings, get_settings
from .domain.entities import EquipmentState, ReconciliationPolicy

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Process-wide service instances."""
    store: EntityStore
    notifier: Notifier
    synchronizer: StatusSynchronizer
    reconciler: Reconciler
    lifecycle: LifecycleService


def build_store(settings: AppSettings) -> EntityStore:
    """Create the entity store selected by SYNC_STORE_BACKEND."""
    if settings.sync.store_backend == 'memory':
        from .infrastructure.memory import InMemoryEntityStore
        logger.warning("Using in-memory entity store; data is lost on restart")
        return InMemoryEntityStore()

    from .infrastructure.database import DatabaseManager
    return DatabaseManager.entity_store()


def build_notifier(settings: AppSettings) -> Notifier:
    """Create the notifier selected by SYNC_NOTIFIER_BACKEND."""
    from .infrastructure.messaging import LoggingNotifier, NotificationChannel, RedisStreamNotifier

    if settings.sync.notifier_backend == 'log':
        return LoggingNotifier()

    return RedisStreamNotifier(NotificationChannel(
        settings.redis.notification_stream,
        status_channel=settings.redis.status_channel,
    ))


def reconciliation_policy(settings: AppSettings) -> ReconciliationPolicy:
    return ReconciliationPolicy(
        default_status=EquipmentState(settings.reconciler.default_status),
        tolerate_maintenance=settings.reconciler.tolerate_maintenance,
    )


def build_container(
    settings: Optional[AppSettings] = None,
    store: Optional[EntityStore] = None,
    notifier: Optional[Notifier] = None,
) -> ServiceContainer:
    """
    Build the service graph.

    Args:
        settings: Application settings; defaults to the cached settings.
        store: Entity store override, otherwise built from settings.
        notifier: Notifier override, otherwise built from settings.
    """
    settings = settings or get_settings()
    if store is None:
        store = build_store(settings)
    if notifier is None:
        notifier = build_notifier(settings)

    synchronizer = StatusSynchronizer(store, notifier)
    return ServiceContainer(
        store=store,
        notifier=notifier,
        synchronizer=synchronizer,
        reconciler=Reconciler(store, synchronizer, reconciliation_policy(settings)),
        lifecycle=LifecycleService(store, synchronizer),
    )
