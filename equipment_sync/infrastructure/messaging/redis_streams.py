"""
Redis transport for equipment notifications.

Notifications land in a capped stream so consumers can replay them; status
changes are also broadcast on a pub/sub channel for live dashboards.
"""
import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from ...config import RedisSettings, get_settings

logger = logging.getLogger(__name__)


class RedisStreamManager:
    """Process-wide Redis client."""

    _client: Optional[redis.Redis] = None

    @classmethod
    async def get_client(cls, config: Optional[RedisSettings] = None) -> redis.Redis:
        if cls._client is None:
            config = config or get_settings().redis
            cls._client = redis.from_url(config.url, decode_responses=True)
        return cls._client

    @classmethod
    async def close(cls) -> None:
        if cls._client is not None:
            await cls._client.aclose()
            cls._client = None


class NotificationChannel:
    """
    Where equipment notifications are written in Redis.

    Stream entries carry ``equipment_id`` and ``type`` as plain fields so
    consumers can filter without decoding ``data``.

    Args:
        stream: Stream name, e.g. ``equipment:notifications``.
        status_channel: Pub/sub channel for status changes; None disables
            broadcasting.
        max_len: Approximate stream cap; defaults to REDIS_STREAM_MAX_LEN.
    """

    def __init__(
        self,
        stream: str,
        status_channel: Optional[str] = None,
        max_len: Optional[int] = None,
    ):
        self.stream = stream
        self.status_channel = status_channel
        self.max_len = max_len or get_settings().redis.stream_max_len

    async def append(self, payload: Dict[str, Any]) -> str:
        """Append a notification to the stream and return its entry id."""
        client = await RedisStreamManager.get_client()
        fields = {
            'equipment_id': payload['equipment_id'],
            'type': payload['type'],
            'data': json.dumps(payload, default=str),
        }
        return await client.xadd(self.stream, fields, maxlen=self.max_len, approximate=True)

    async def broadcast(self, payload: Dict[str, Any]) -> int:
        """Publish a status change; returns the number of live subscribers."""
        if not self.status_channel:
            return 0
        client = await RedisStreamManager.get_client()
        return await client.publish(self.status_channel, json.dumps(payload, default=str))


async def health_check() -> bool:
    """Check that Redis answers a ping."""
    try:
        client = await RedisStreamManager.get_client()
        return await client.ping()
    except (redis.RedisError, OSError) as e:
        logger.warning(f"Redis health check failed: {e}")
        return False
