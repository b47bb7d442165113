"""Versioned API router."""

from fastapi import APIRouter

from . import availability, bookings, health, pricing

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(availability.router, prefix="/availability", tags=["availability"])
router.include_router(pricing.router, prefix="/pricing", tags=["pricing"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
