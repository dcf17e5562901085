"""
Notifier interface (port).

Best-effort side channel for surfacing status changes to observers.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from uuid import UUID

from ...domain.entities import NotificationKind


class Notifier(ABC):
    """
    Fire-and-forget notification sink.

    Implementations must not raise: failures are logged and swallowed so a
    notification problem never turns into a synchronization error.
    """

    @abstractmethod
    async def notify(
        self,
        equipment_id: UUID,
        kind: NotificationKind,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Emit a notification.

        Args:
            equipment_id: Equipment the notification is about
            kind: Notification kind
            message: Human-readable message
            data: Optional structured payload
        """
        pass
