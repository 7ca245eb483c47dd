"""API v1 routes."""

from fastapi import APIRouter

from banddesigner.api.v1 import formulas, health, layout, reports

router = APIRouter()

# Include all v1 routes
router.include_router(health.router, tags=["health"])
router.include_router(formulas.router, prefix="/formulas", tags=["formulas"])
router.include_router(layout.router, prefix="/layout", tags=["layout"])
router.include_router(reports.router, prefix="/reports", tags=["reports"])
