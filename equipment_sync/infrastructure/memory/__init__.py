# In-memory Infrastructure
from .entity_store import InMemoryEntityStore

__all__ = [
    'InMemoryEntityStore',
]
