"""
Configuration management for the Equipment Status Synchronization service.

Uses Pydantic settings for validation and environment variable support.
"""
from functools import lru_cache
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """PostgreSQL configuration for the entity store."""

    model_config = SettingsConfigDict(
        env_prefix='DATABASE_',
        env_file='.env',
        extra='ignore'
    )

    host: str = Field(default='localhost', description='Database host')
    port: int = Field(default=5432, description='Database port')
    name: str = Field(default='equipment_sync', description='Database name')
    user: str = Field(default='postgres', description='Database user')
    password: str = Field(default='postgres', description='Database password')
    pool_size: int = Field(default=10, description='Connection pool size')
    max_overflow: int = Field(default=20, description='Max overflow connections')
    echo_sql: bool = Field(default=False, description='Echo SQL queries')

    @property
    def url(self) -> str:
        """Build database URL."""
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class RedisSettings(BaseSettings):
    """Redis configuration for notifications."""

    model_config = SettingsConfigDict(
        env_prefix='REDIS_',
        env_file='.env',
        extra='ignore'
    )

    host: str = Field(default='localhost', description='Redis host')
    port: int = Field(default=6379, description='Redis port')
    db: int = Field(default=0, description='Redis database number')
    password: Optional[str] = Field(default=None, description='Redis password')
    ssl: bool = Field(default=False, description='Use SSL connection')

    # Stream settings
    stream_max_len: int = Field(default=100000, description='Max stream length')
    notification_stream: str = Field(
        default='equipment:notifications',
        description='Stream receiving status change notifications'
    )
    status_channel: str = Field(
        default='equipment:status_change',
        description='Pub/sub channel for live status change events'
    )

    @property
    def url(self) -> str:
        """Build Redis URL."""
        auth = f":{self.password}@" if self.password else ""
        protocol = "rediss" if self.ssl else "redis"
        return f"{protocol}://{auth}{self.host}:{self.port}/{self.db}"


class SyncSettings(BaseSettings):
    """Synchronization engine wiring."""

    model_config = SettingsConfigDict(
        env_prefix='SYNC_',
        env_file='.env',
        extra='ignore'
    )

    store_backend: Literal['sql', 'memory'] = Field(
        default='sql',
        description='Entity store implementation'
    )
    notifier_backend: Literal['redis', 'log'] = Field(
        default='redis',
        description='Where notifications are sent'
    )


class ReconcilerSettings(BaseSettings):
    """Reconciliation pass configuration."""

    model_config = SettingsConfigDict(
        env_prefix='RECONCILER_',
        env_file='.env',
        extra='ignore'
    )

    default_status: Literal['running', 'breakdown', 'standby', 'maintenance', 'stopped'] = Field(
        default='stopped',
        description='Status given to equipment with no status record and no open faults'
    )
    tolerate_maintenance: bool = Field(
        default=True,
        description='Accept maintenance as reflecting open fault reports'
    )
    schedule_enabled: bool = Field(default=False, description='Run reconciliation periodically')
    interval_seconds: int = Field(default=300, description='Interval between scheduled passes')
    mode: Literal['repair', 'diagnose'] = Field(
        default='repair',
        description='Whether scheduled passes correct drift or only report it'
    )


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # Application
    app_name: str = Field(default='Equipment Status Sync')
    app_version: str = Field(default='1.0.0')
    debug: bool = Field(default=False)
    environment: str = Field(default='development')

    # Server
    host: str = Field(default='0.0.0.0')
    port: int = Field(default=8002)
    reload: bool = Field(default=False)

    # API
    api_prefix: str = Field(default='/api')
    api_version: str = Field(default='v1')

    # Logging
    log_level: str = Field(default='INFO')
    log_format: str = Field(default='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    reconciler: ReconcilerSettings = Field(default_factory=ReconcilerSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == 'production'

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == 'development'


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings.

    Uses LRU cache to avoid re-reading environment variables on every access.
    """
    return AppSettings()


# Convenience accessor
settings = get_settings()
