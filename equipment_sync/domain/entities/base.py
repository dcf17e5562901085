"""
Base domain classes for equipment synchronization.
"""
from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4


def utc_now() -> datetime:
    """Return current UTC timestamp."""
    return datetime.now(timezone.utc)


@dataclass
class Entity(ABC):
    """Base class for all entities with identity."""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    def mark_updated(self) -> None:
        """Mark entity as updated with current timestamp."""
        self.updated_at = utc_now()
