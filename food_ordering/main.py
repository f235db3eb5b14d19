"""
FastAPI Application Entry Point

Food Ordering API with a hardened request-security pipeline.

Every request passes, outermost first:
    security headers -> CORS -> general rate limiter -> routing
and, per route, login rate limiter -> token verification -> role check ->
sanitization -> validation before any handler touches the database.

Endpoints:
    - /api/auth/*: registration, login, profile
    - /api/food/*: catalog
    - /api/orders/*: ordering
    - /api/admin/*: administration
    - GET /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.dependencies import get_app_settings
from food_ordering.api.routes import admin, auth, food, orders
from food_ordering.core.config import Settings, get_settings, setup_logging
from food_ordering.core.errors import AppError
from food_ordering.database import create_engine, create_session_maker, get_db, init_db
from food_ordering.schemas import ErrorResponse, HealthResponse
from food_ordering.security import (
    PasswordHasher,
    RoleAuthorizer,
    SecurityHeadersMiddleware,
    StepUpVerifier,
    TokenService,
)
from food_ordering.security.rate_limit import (
    RateLimitMiddleware,
    create_limiters,
    create_rate_limit_store,
)

logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Registration mode: {settings.registration_mode.value}")
    logger.info(f"   Rate limit store: {app.state.rate_limit_store.provider_name}")
    logger.info("=" * 60)

    await init_db(app.state.engine)
    logger.info("Database initialized")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await app.state.rate_limit_store.close()
    await app.state.engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# ERROR HANDLERS
# =============================================================================

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Expected pipeline failures: structured body, no stack trace."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(exc.to_body(), status_code=exc.status_code, headers=exc.headers)


def format_validation_error(error: dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema and malformed-JSON failures in the aggregated 400 shape."""
    errors = [format_validation_error(error) for error in exc.errors()]
    return JSONResponse({"errors": errors or ["Invalid request"]}, status_code=400)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

system_router = APIRouter()


@system_router.get("/", tags=["Root"])
async def root(settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "health": "/health",
    }


@system_router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> HealthResponse:
    """Verify the database and the rate-limit store are reachable."""

    db_status = "healthy"
    try:
        await db.execute(select(1))
    except SQLAlchemyError as e:
        db_status = "unhealthy"
        logger.error(f"Database health check failed: {e}")

    store_ok = await request.app.state.rate_limit_store.health_check()
    store_status = "healthy" if store_ok else "unhealthy"

    overall = "operational" if db_status == store_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        rate_limit_store=store_status,
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application.

    The security configuration is checked before anything else is built;
    a missing or placeholder secret raises ConfigurationError and the
    process never starts serving.
    """
    settings = settings or get_settings()
    setup_logging(settings)
    settings.ensure_secure_configuration()

    app = FastAPI(
        title=settings.app_name,
        description="Food ordering API with token auth, validation, rate limiting and security headers.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        responses={500: {"model": ErrorResponse}},
    )

    # Components shared by the dependencies
    store = create_rate_limit_store(settings)
    general_limiter, login_limiter = create_limiters(settings, store)
    engine = create_engine(settings)

    app.state.settings = settings
    app.state.token_service = TokenService.from_settings(settings)
    app.state.step_up = StepUpVerifier.from_settings(settings)
    app.state.authorizer = RoleAuthorizer()
    app.state.password_hasher = PasswordHasher(rounds=settings.password_hash_rounds)
    app.state.rate_limit_store = store
    app.state.general_limiter = general_limiter
    app.state.login_limiter = login_limiter
    app.state.engine = engine
    app.state.session_maker = create_session_maker(engine)

    # Middleware: the last one added runs first
    app.add_middleware(
        RateLimitMiddleware,
        limiter=general_limiter,
        trust_proxy_headers=settings.trust_proxy_headers,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(system_router)
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(food.router, prefix="/api/food", tags=["Food"])
    app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

    return app


def run() -> None:
    """Console entry point."""
    settings = get_settings()
    uvicorn.run(
        "food_ordering.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        server_header=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
