"""
Domain Exceptions - Custom exceptions for synchronization errors.
"""
from typing import Any, Dict, Optional
from uuid import UUID


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    All domain exceptions should inherit from this class to allow
    for consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details
        }


class EntityNotFoundException(DomainException):
    """Raised when a requested entity cannot be found."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Optional[UUID] = None,
        message: Optional[str] = None
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} not found"
        if entity_id:
            msg = f"{entity_type} with id '{entity_id}' not found"
        super().__init__(
            message=msg,
            code='ENTITY_NOT_FOUND',
            details={'entity_type': entity_type, 'entity_id': str(entity_id) if entity_id else None}
        )


class EquipmentNotFoundException(EntityNotFoundException):
    """Raised when a synchronization targets equipment that does not exist."""

    def __init__(self, equipment_id: UUID):
        super().__init__(entity_type='Equipment', entity_id=equipment_id)


class IllegalTransitionException(DomainException):
    """Raised when a state change is not an edge of the transition graph."""

    def __init__(
        self,
        entity_type: str,
        current_state: Optional[str],
        target_state: str,
        message: Optional[str] = None
    ):
        self.entity_type = entity_type
        self.current_state = current_state
        self.target_state = target_state
        msg = message or f"Cannot transition {entity_type} from '{current_state}' to '{target_state}'"
        super().__init__(
            message=msg,
            code='INVALID_STATE_TRANSITION',
            details={
                'entity_type': entity_type,
                'current_state': current_state,
                'target_state': target_state
            }
        )


class SyncInProgressException(DomainException):
    """
    Raised when a synchronization for the same equipment is already running.

    Soft rejection: nothing was written and the caller may retry later.
    """

    def __init__(self, equipment_id: UUID):
        self.equipment_id = equipment_id
        super().__init__(
            message=f"Synchronization already in progress for equipment '{equipment_id}'",
            code='SYNC_IN_PROGRESS',
            details={'equipment_id': str(equipment_id), 'retryable': True}
        )


class CascadeSubFailure(DomainException):
    """
    Raised when a secondary update of a cascade fails.

    The primary status write has already committed; the synchronizer
    records this into the result instead of propagating it.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: UUID,
        message: str
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            message=f"Failed to update {entity_type} '{entity_id}': {message}",
            code='CASCADE_SUB_FAILURE',
            details={'entity_type': entity_type, 'entity_id': str(entity_id)}
        )


class EntityStoreException(DomainException):
    """Raised when an entity store call fails."""

    def __init__(
        self,
        operation: str,
        message: str,
        original_error: Optional[str] = None
    ):
        self.operation = operation
        super().__init__(
            message=f"Entity store error ({operation}): {message}",
            code='ENTITY_STORE_ERROR',
            details={
                'operation': operation,
                'original_error': original_error
            }
        )
