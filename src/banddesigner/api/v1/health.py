"""Liveness and readiness probes."""

from fastapi import APIRouter
from pydantic import BaseModel

from banddesigner.api.deps import Engine
from banddesigner.core.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    environment: str
    version: str


class ReadinessResponse(BaseModel):
    """Ready once the formula engine has a function registry to offer."""

    status: str
    functions: int
    cached_formulas: int


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        environment=settings.environment,
        version=settings.app_version,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(engine: Engine) -> ReadinessResponse:
    """Report the registered function count and the parse cache fill."""
    count = len(engine.get_registered_functions())
    return ReadinessResponse(
        status="ready" if count else "not_ready",
        functions=count,
        cached_formulas=engine.cache_info().currsize,
    )
