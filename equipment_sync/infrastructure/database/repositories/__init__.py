# Database Repositories
from .sql_entity_store import SqlEntityStore

__all__ = [
    'SqlEntityStore',
]
