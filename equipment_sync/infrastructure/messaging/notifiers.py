"""
Notifier implementations.

RedisStreamNotifier appends notifications to a Redis stream and publishes
status changes on a pub/sub channel; LoggingNotifier only logs them.
"""
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from ...application.interfaces import Notifier
from ...domain.entities import NotificationKind, utc_now
from .redis_streams import NotificationChannel

logger = logging.getLogger(__name__)


SEVERITY_BY_KIND = {
    NotificationKind.BREAKDOWN_DETECTED: "high",
    NotificationKind.REPAIR_COMPLETED: "normal",
    NotificationKind.MAINTENANCE_STARTED: "normal",
    NotificationKind.STATUS_CHANGED: "low",
}


def build_notification(
    equipment_id: UUID,
    kind: NotificationKind,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Payload shared by every notifier."""
    return {
        "equipment_id": str(equipment_id),
        "type": kind.value,
        "severity": SEVERITY_BY_KIND.get(kind, "normal"),
        "message": message,
        "data": data or {},
        "created_at": utc_now().isoformat(),
    }


class RedisStreamNotifier(Notifier):
    """
    Publishes notifications to Redis.

    Every notification is appended to the notification stream; status
    changes are additionally published on the live status channel.
    """

    def __init__(self, channel: NotificationChannel):
        self._channel = channel

    async def notify(
        self,
        equipment_id: UUID,
        kind: NotificationKind,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        payload = build_notification(equipment_id, kind, message, data)
        try:
            message_id = await self._channel.append(payload)
            logger.debug(f"Notification {kind.value} for {equipment_id} queued as {message_id}")

            if kind == NotificationKind.STATUS_CHANGED:
                await self._channel.broadcast(payload)
        except Exception as e:
            logger.warning(f"Failed to publish {kind.value} notification for {equipment_id}: {e}")


class LoggingNotifier(Notifier):
    """Writes notifications to the log. For deployments without Redis."""

    async def notify(
        self,
        equipment_id: UUID,
        kind: NotificationKind,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        level = logging.WARNING if kind == NotificationKind.BREAKDOWN_DETECTED else logging.INFO
        logger.log(level, f"[{kind.value}] {message}")
