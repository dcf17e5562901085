"""
API Version 1 routes.

Includes equipment status, transitions, reconciliation, faults and repairs.
"""
from fastapi import APIRouter

from .equipment import router as equipment_router
from .transitions import router as transitions_router
from .reconciliation import router as reconciliation_router
from .faults import router as faults_router
from .repairs import router as repairs_router

# Main API router that includes all sub-routers
api_router = APIRouter(prefix="/api/v1")

api_router.include_router(equipment_router)
api_router.include_router(transitions_router)
api_router.include_router(reconciliation_router)
api_router.include_router(faults_router)
api_router.include_router(repairs_router)

__all__ = [
    "api_router",
    "equipment_router",
    "transitions_router",
    "reconciliation_router",
    "faults_router",
    "repairs_router",
]
