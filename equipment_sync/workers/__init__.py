# Background Workers
from .reconciliation_worker import ReconciliationWorker

__all__ = [
    'ReconciliationWorker',
]
