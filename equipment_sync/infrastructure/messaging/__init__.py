# Messaging Infrastructure
from .redis_streams import (
    RedisStreamManager,
    NotificationChannel,
    health_check,
)
from .notifiers import (
    RedisStreamNotifier,
    LoggingNotifier,
    build_notification,
)

__all__ = [
    'RedisStreamManager',
    'NotificationChannel',
    'health_check',
    'RedisStreamNotifier',
    'LoggingNotifier',
    'build_notification',
]
