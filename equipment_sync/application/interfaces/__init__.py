# Application Interfaces (Ports)
from .entity_store import EntityStore
from .notifier import Notifier

__all__ = [
    'EntityStore',
    'Notifier',
]
