"""
Market widget API module.

Aggregates all endpoints into a single router under ``/api``.
"""

from fastapi import APIRouter

from . import health, news, performance, prices

# Create main router with common prefix
router = APIRouter(prefix="/api")

router.include_router(health.router, tags=["health"])
router.include_router(prices.router, tags=["Prices"])
router.include_router(news.router, tags=["News"])
router.include_router(performance.router, tags=["Performance"])

__all__ = ["router"]
