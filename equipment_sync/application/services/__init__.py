# Application Services
from .status_synchronizer import StatusSynchronizer
from .reconciler import Reconciler
from .lifecycle_service import LifecycleService

__all__ = [
    'StatusSynchronizer',
    'Reconciler',
    'LifecycleService',
]
