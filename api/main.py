"""
FastAPI backend for the FuelPool FuelEU Maritime compliance service.

Provides REST API endpoints for:
- Voyage routes and baseline comparison
- Compliance balance (CB) calculation
- Surplus banking (Article 20)
- Compliance pooling (Article 21)

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
import uvicorn

from api.config import settings
from api.database import get_db_context, init_db
from api.middleware import setup_middleware, structured_logger
from api.rate_limit import limiter
from api.repositories import SqlRouteStore
from api.routers import banking, compliance, pooling, routes, system
from src.compliance.errors import DomainError
from src.compliance.seed import build_route_seed
from src.compliance.services import RouteService

# Configure structured logging for production
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(message)s',  # JSON logs are self-contained
)
logger = logging.getLogger(__name__)


def _seed_routes_if_empty() -> None:
    with get_db_context() as db:
        service = RouteService(SqlRouteStore(db))
        if service.get_routes():
            logger.info("Routes already present, skipping seed")
            return
        service.seed(build_route_seed())


@asynccontextmanager
async def lifespan(application: FastAPI):
    init_db()
    if settings.seed_on_startup:
        _seed_routes_if_empty()
    yield


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """
    Application factory for FuelPool API.

    Creates and configures the FastAPI application with all middleware,
    routers and error handlers.

    Returns:
        FastAPI: Configured application instance
    """
    application = FastAPI(
        title="FuelPool API",
        description="""
## FuelEU Maritime Compliance API

Compliance balance, banking and pooling under Regulation (EU) 2023/1805.

### Authentication
Write endpoints (baseline selection, banking, pool creation) require an
API key in the `X-API-Key` header. Read endpoints are public.

### Errors
Rule violations return `{"error": message, "code": CODE}`.
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    setup_middleware(
        application,
        debug=settings.is_development,
        enable_hsts=settings.is_production,
    )

    # CORS middleware - use configured origins only (NO WILDCARDS)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    application.state.limiter = limiter

    @application.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={
                "error": "Rate limit exceeded",
                "detail": str(exc.detail),
                "retry_after": getattr(exc, 'retry_after', 60),
            },
            headers={"Retry-After": str(getattr(exc, 'retry_after', 60))},
        )

    @application.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        log = structured_logger.error if exc.status >= 500 else structured_logger.warning
        log(
            "Domain rule violated",
            code=exc.code,
            error=exc.message,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=exc.status,
            content={"error": exc.message, "code": exc.code},
        )

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": exc.errors()})

    application.include_router(system.router)
    application.include_router(routes.router)
    application.include_router(compliance.router)
    application.include_router(banking.router)
    application.include_router(pooling.router)

    return application


# Create the application
app = create_app()


# ============================================================================
# Run Server
# ============================================================================

if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level,
    )
