"""
PostgreSQL wiring for the entity store.

One engine per process; every SqlEntityStore built here shares its pool.
"""
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ...config import DatabaseSettings, get_settings
# Importing the package registers every table on Base.metadata
from .models import Base
from .repositories import SqlEntityStore

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Owns the engine behind the SQL entity store.

    ``configure`` may be called once before first use to point at a
    database other than the one in DATABASE_* settings.
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def configure(cls, database: DatabaseSettings) -> AsyncEngine:
        """Create the engine and session factory for ``database``."""
        cls._engine = create_async_engine(
            database.url,
            echo=database.echo_sql,
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_pre_ping=True,
        )
        # Entities are converted right after commit, so attributes must stay loaded
        cls._session_factory = async_sessionmaker(
            bind=cls._engine,
            expire_on_commit=False,
            autoflush=False,
        )
        return cls._engine

    @classmethod
    def get_engine(cls) -> AsyncEngine:
        if cls._engine is None:
            cls.configure(get_settings().database)
        return cls._engine

    @classmethod
    def entity_store(cls) -> SqlEntityStore:
        """Build an entity store on the shared session factory."""
        cls.get_engine()
        return SqlEntityStore(cls._session_factory)

    @classmethod
    async def close(cls) -> None:
        if cls._engine is not None:
            await cls._engine.dispose()
            cls._engine = None
            cls._session_factory = None


async def init_db() -> None:
    """Create the equipment, status, fault and repair tables if missing."""
    async with DatabaseManager.get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Entity store tables ready: {', '.join(sorted(Base.metadata.tables))}")


async def health_check() -> bool:
    """Check that the entity store database answers."""
    try:
        async with DatabaseManager.get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database health check failed: {e}")
        return False
