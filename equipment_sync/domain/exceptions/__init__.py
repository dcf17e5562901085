# Domain Exceptions
from .domain_exceptions import (
    DomainException,
    EntityNotFoundException,
    EquipmentNotFoundException,
    IllegalTransitionException,
    SyncInProgressException,
    CascadeSubFailure,
    EntityStoreException,
)

__all__ = [
    'DomainException',
    'EntityNotFoundException',
    'EquipmentNotFoundException',
    'IllegalTransitionException',
    'SyncInProgressException',
    'CascadeSubFailure',
    'EntityStoreException',
]
