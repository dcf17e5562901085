# Database Infrastructure
from .connection import (
    DatabaseManager,
    init_db,
    health_check,
)
from .repositories import SqlEntityStore

__all__ = [
    'DatabaseManager',
    'init_db',
    'health_check',
    'SqlEntityStore',
]
