"""Agent Workspace - FastAPI Application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

from app.config import get_settings
from api.v1.router import api_v1_router
from api.routes import health
from db.database import init_db, close_db
from integrations.ai_providers import close_ai_registry, get_ai_registry
from notifications.manager import get_notification_manager
from workflow.recovery import ExecutionRecoveryService
from core.logging_config import setup_logging
from core.middleware import RequestTrackingMiddleware, setup_exception_handlers

logger = structlog.get_logger("startup")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"

        settings = get_settings()
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    # Startup
    settings = get_settings()
    setup_logging()

    # Refuse to start in production without a signing key
    try:
        settings.validate_secrets()
    except RuntimeError as e:
        logger.critical("Startup aborted", error=str(e))
        raise

    await init_db()

    # Email channel for email_action steps
    notif_mgr = get_notification_manager()
    notif_mgr.configure_channels({"email": settings.smtp_config})
    if notif_mgr.get_status()["channels"]:
        logger.info("Notification manager ready", smtp_host=settings.SMTP_HOST)
    else:
        logger.info("Email not configured (set SMTP_HOST to enable)")

    ai_registry = get_ai_registry()
    logger.info(
        "AI providers registered",
        providers=ai_registry.names,
        default=settings.DEFAULT_AI_PROVIDER,
    )

    # Reconcile runs interrupted by a previous shutdown or crash
    recovered = await ExecutionRecoveryService().sweep()
    if recovered:
        logger.warning("Recovered interrupted executions", count=len(recovered))

    logger.info(
        "Application started",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        strict_mode=settings.WORKFLOW_STRICT_MODE,
    )
    yield
    # Shutdown
    await close_ai_registry()
    await close_db()
    logger.info("Application shut down")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Multi-tenant agent workspace: organizations, departments, "
                    "AI agents and linear workflows.",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Request tracking middleware
    app.add_middleware(RequestTrackingMiddleware)

    # Security headers middleware
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    # Global exception handlers
    setup_exception_handlers(app)

    # Root health check (unversioned, for load balancers / k8s probes)
    app.include_router(health.router, prefix="/api", tags=["Health"])

    # Versioned API, all business endpoints under /api/v1
    app.include_router(api_v1_router, prefix=settings.API_V1_PREFIX)

    return app


app = create_app()
