"""
BandDesigner FastAPI application.

Serves the formula editor, layout operations and print rendering under
``settings.api_v1_prefix``. Every error leaves the API as
``{"error": {"code", "message", "details"}}``.
"""

from collections import Counter
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from banddesigner.api.deps import get_formula_engine
from banddesigner.api.v1 import router as v1_router
from banddesigner.core.config import settings
from banddesigner.core.exceptions import BandDesignerException
from banddesigner.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "details": details or {}}},
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Warm the shared formula engine so the first request does not build it."""
    engine = get_formula_engine()
    categories = Counter(d.category for d in engine.describe_functions())
    logger.info(
        f"{settings.app_name} v{settings.app_version} starting",
        extra={
            "environment": settings.environment,
            "functions": sum(categories.values()),
            "categories": dict(sorted(categories.items())),
        },
    )
    yield
    logger.info(f"{settings.app_name} stopped")


# ==========================================================================
# Exception Handlers
# ==========================================================================


async def handle_domain_error(request: Request, exc: BandDesignerException) -> JSONResponse:
    """Formula, layout and render errors carry their own status and code."""
    if exc.status_code >= 500:
        logger.error(exc.message, extra={"code": exc.code, "path": request.url.path})
    else:
        logger.info(exc.message, extra={"code": exc.code, "path": request.url.path})
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed designs and requests field by field."""
    errors = []
    for error in exc.errors():
        loc = list(error["loc"])
        # "body" is implied for every JSON payload
        if loc and loc[0] == "body":
            loc = loc[1:]
        errors.append(
            {
                "field": ".".join(str(part) for part in loc),
                "message": error["msg"],
                "type": error["type"],
            }
        )
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        f"Request validation failed ({len(errors)} error(s))",
        {"errors": errors},
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    message = "An unexpected error occurred" if settings.environment == "production" else str(exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", message)


def create_app() -> FastAPI:
    """
    Build the application: logging, CORS, error handlers and the v1 routes.

    Returns:
        Configured FastAPI application instance
    """
    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.environment == "production",
    )

    docs = settings.debug
    app = FastAPI(
        title=settings.app_name,
        description="Band-based report and label designer: formulas, layout and print pagination",
        version=settings.app_version,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BandDesignerException, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(v1_router, prefix=settings.api_v1_prefix)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api": settings.api_v1_prefix,
            "docs": "/docs" if docs else None,
        }

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn (``banddesigner-server`` entry point)."""
    uvicorn.run(
        "banddesigner.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
    )
