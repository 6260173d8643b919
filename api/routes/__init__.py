"""
API Routes Package

This module consolidates the checkout routes. They are served at the root
and again under /api, since checkout pages call both spellings.
"""

from fastapi import APIRouter

from . import orders

# Create main router
router = APIRouter()

router.include_router(orders.router)
router.include_router(orders.router, prefix="/api", include_in_schema=False)

# Export for use in main application
__all__ = ["router"]
