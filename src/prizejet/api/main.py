"""Main FastAPI application for the PrizeJet API."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from prizejet import __version__
from prizejet.api.rate_limit import limiter
from prizejet.api.v1.auth import router as auth_router
from prizejet.api.v1.campaigns import router as campaigns_router
from prizejet.api.v1.public import landing_router
from prizejet.api.v1.public import router as public_router
from prizejet.errors import AuthRequiredError, PrizeJetError
from prizejet.logging_config import configure_logging, get_logger
from prizejet.settings import settings
from prizejet.storage.db import Database

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Referral links carry codes in the query string
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("app_starting", env=settings.env)

    app.state.db.create_tables()

    yield

    logger.info("app_shutting_down")
    app.state.db.dispose()


def create_app(db: Database | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        db: Database to serve from (defaults to one built from settings)

    Returns:
        Configured FastAPI app
    """
    configure_logging()
    is_production = settings.env == "production"

    app = FastAPI(
        title="PrizeJet API",
        description="Referral giveaway campaigns",
        version=__version__,
        docs_url=None if is_production else "/api/docs",
        redoc_url=None if is_production else "/api/redoc",
        openapi_url=None if is_production else "/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.db = db or Database()

    app.add_middleware(SecurityHeadersMiddleware)

    allowed_origins = [
        origin.strip()
        for origin in settings.allowed_origins.split(",")
        if origin.strip()
    ]
    if is_production and "*" in allowed_origins:
        logger.error("cors_wildcard_blocked", message="Wildcard CORS not allowed in production")
        allowed_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
        max_age=3600,
    )

    app.state.limiter = limiter

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many requests. Please try again later.", "error": "rate_limited"},
        )

    @app.exception_handler(PrizeJetError)
    async def prizejet_error_handler(request: Request, exc: PrizeJetError):
        if exc.status_code >= 500:
            logger.error("request_failed", path=request.url.path, error=exc.kind)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthRequiredError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error": exc.kind},
            headers=headers,
        )

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(campaigns_router, prefix="/api/v1")
    app.include_router(public_router, prefix="/api/v1")
    app.include_router(landing_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "env": settings.env,
        }

    return app


# Create app instance
app = create_app()
