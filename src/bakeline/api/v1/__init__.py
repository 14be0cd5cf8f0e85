"""Bakeline API v1 endpoints."""

from bakeline.api.v1.records import router as records_router
from bakeline.api.v1.units import router as units_router

__all__ = [
    "records_router",
    "units_router",
]
