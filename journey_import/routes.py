"""
Main API router for Journey Import.

This module aggregates all API routes from individual modules.
"""

from fastapi import APIRouter

from journey_import.api.imports import router as imports_router

router = APIRouter(prefix="/api")

# Include sub-routers
router.include_router(imports_router)
