"""
Shared pytest fixtures.

Provides fixtures for:
- In-memory entity store
- Mock notifier
- Synchronizer, reconciler and lifecycle services
- Redis mock (fakeredis)
- API client (httpx)
"""
import os
from typing import List

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock

# Test environment configuration
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SYNC_STORE_BACKEND", "memory")
os.environ.setdefault("SYNC_NOTIFIER_BACKEND", "log")
os.environ.setdefault("RECONCILER_SCHEDULE_ENABLED", "false")

from equipment_sync.application.services import (  # noqa: E402
    LifecycleService,
    Reconciler,
    StatusSynchronizer,
)
from equipment_sync.domain.entities import NotificationKind  # noqa: E402
from equipment_sync.infrastructure.memory import InMemoryEntityStore  # noqa: E402

from factories import EquipmentFactory  # noqa: E402


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def store() -> InMemoryEntityStore:
    """Empty in-memory entity store."""
    return InMemoryEntityStore()


@pytest.fixture
def notifier():
    """
    Mock notifier.

    Inspect ``notifier.notify.await_args_list`` for emitted notifications.
    """
    mock = AsyncMock()
    mock.notify = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def synchronizer(store, notifier) -> StatusSynchronizer:
    return StatusSynchronizer(store, notifier)


@pytest.fixture
def reconciler(store, synchronizer) -> Reconciler:
    return Reconciler(store, synchronizer)


@pytest.fixture
def lifecycle_service(store, synchronizer) -> LifecycleService:
    return LifecycleService(store, synchronizer)


def notification_kinds(notifier) -> List[NotificationKind]:
    """Kinds of notifications emitted so far, in order."""
    return [call.args[1] for call in notifier.notify.await_args_list]


@pytest.fixture
def emitted(notifier):
    """Callable returning the notification kinds emitted so far."""
    return lambda: notification_kinds(notifier)


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture
def equipment(store):
    """A single piece of equipment registered in the store."""
    return store.add_equipment(EquipmentFactory())


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """
    Fake Redis installed as the shared stream client.

    Uses fakeredis for realistic stream and pub/sub behavior.
    """
    import fakeredis.aioredis
    from equipment_sync.infrastructure.messaging import RedisStreamManager

    redis = fakeredis.aioredis.FakeRedis(decode_responses=True)
    RedisStreamManager._client = redis
    yield redis
    await redis.flushall()
    await RedisStreamManager.close()


# ============================================================================
# API Client Fixtures
# ============================================================================

@pytest.fixture
def app(store, notifier):
    """
    FastAPI app backed by the in-memory store.

    Lifespan is not run; the service container is injected directly.
    """
    from equipment_sync.config import get_settings
    from equipment_sync.container import build_container
    from equipment_sync.main import create_app

    container = build_container(get_settings(), store=store, notifier=notifier)
    return create_app(container)


@pytest_asyncio.fixture
async def api_client(app):
    """Test API client for the in-memory app."""
    import httpx

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
