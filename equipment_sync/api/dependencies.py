"""
FastAPI dependencies.

Service instances live on ``app.state.container`` so every request shares
one synchronizer and its in-flight set.
"""
from fastapi import Request

from ..application.interfaces import EntityStore
from ..application.services import LifecycleService, Reconciler, StatusSynchronizer
from ..container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    """Get the process-wide service container."""
    return request.app.state.container


def get_entity_store(request: Request) -> EntityStore:
    return get_container(request).store


def get_synchronizer(request: Request) -> StatusSynchronizer:
    return get_container(request).synchronizer


def get_reconciler(request: Request) -> Reconciler:
    return get_container(request).reconciler


def get_lifecycle_service(request: Request) -> LifecycleService:
    return get_container(request).lifecycle
