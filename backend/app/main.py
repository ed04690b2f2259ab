"""Main FastAPI application."""
import json
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from app.settings import settings
from app.api.auth import router as auth_router
from app.api.config import router as config_router
from app.api.events import router as events_router
from app.api.geo import router as geo_router
from app.api.notifications import router as notifications_router
from app.api.reports import router as reports_router
from app.api.rewards import router as rewards_router
from app.api.tasks import router as tasks_router
from app.domain.common.errors import (
    NotFoundError as DomainNotFoundError,
    AuthorizationError as DomainAuthorizationError,
    ValidationError as DomainValidationError,
    ConflictError as DomainConflictError,
)
from app.infra.db.base import Base
from app.infra.db.session import engine
# Import all models to ensure they're registered with Base
from app.infra.db.models import (  # noqa: F401
    UserModel,
    ReportModel,
    CollectedWasteModel,
    RewardModel,
    TransactionModel,
    NotificationModel,
)
from app.infra.messaging.event_bus import event_bus
from app.infra.messaging.redis_bus import RedisEventBridge, redis_bus
from app.infra.realtime.ws_manager import ws_manager

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        # Database might not be ready yet; /ready reports it
        logger.warning(f"⚠️ [SERVER] Could not create tables during startup: {e}")

    event_bus.subscribe(None, ws_manager.forward_event)

    bridge = None
    if settings.redis_enabled:
        try:
            await redis_bus.connect()
            bridge = RedisEventBridge(event_bus, redis_bus, settings.redis_events_channel)
            bridge.start()
        except Exception as e:
            logger.warning(f"⚠️ [SERVER] Redis fan-out disabled, could not connect: {e}")
            bridge = None

    logger.info(f"✅ [SERVER] {settings.app_name} {settings.app_version} started")
    yield

    # Shutdown
    event_bus.unsubscribe(None, ws_manager.forward_event)
    if bridge is not None:
        await bridge.stop()
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    allow_headers=["*"],
    max_age=3600,
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info(f"📥 [SERVER REQUEST] {request.method} {request.url.path}")
        logger.debug(f"   Query params: {dict(request.query_params)}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"📤 [SERVER RESPONSE] {request.method} {request.url.path} - {response.status_code} ({process_time:.3f}s)")
        return response


# Add logging middleware AFTER CORS (CORS must be first)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed logging."""
    logger.error(f"❌ [VALIDATION ERROR] {request.method} {request.url.path}")
    errors = exc.errors()
    logger.error(f"   Validation errors ({len(errors)}):")
    for i, error in enumerate(errors, 1):
        logger.error(f"   Error {i}: {json.dumps(error, indent=2, default=str)}")
    return JSONResponse(
        status_code=422,
        content={"detail": json.loads(json.dumps(errors, default=str))},
    )


@app.exception_handler(DomainNotFoundError)
async def domain_not_found_handler(request: Request, exc: DomainNotFoundError):
    """Return 404 when a resource is not found."""
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(DomainAuthorizationError)
async def domain_authorization_handler(request: Request, exc: DomainAuthorizationError):
    """Return 403 when the user is not authorized."""
    return JSONResponse(status_code=403, content={"detail": exc.message})


@app.exception_handler(DomainValidationError)
async def domain_validation_handler(request: Request, exc: DomainValidationError):
    """Return 422 for domain validation errors."""
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(DomainConflictError)
async def domain_conflict_handler(request: Request, exc: DomainConflictError):
    """Return 409 for conflict errors."""
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Persistence failures: logged, not retried. Services already rolled back their unit of work."""
    logger.error(f"❌ [DATABASE] {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Database error"})


# Health check (root and under /v1 so GET /v1/health works behind a /v1 proxy prefix)
@app.get("/health")
@app.get(f"{settings.api_v1_prefix}/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": settings.app_version}


@app.get("/ready")
async def readiness():
    """Readiness endpoint: run all checks and return 200 if ready, 503 otherwise."""
    from app.readiness import run_all_checks_async, is_ready
    checks = await run_all_checks_async()
    ready, summary = is_ready(checks)
    if ready:
        return {"ready": True, "checks": summary}
    return JSONResponse(
        status_code=503,
        content={"ready": False, "checks": summary},
    )


# API v1 routes
app.include_router(auth_router, prefix=settings.api_v1_prefix)
app.include_router(reports_router, prefix=settings.api_v1_prefix)
app.include_router(tasks_router, prefix=settings.api_v1_prefix)
app.include_router(rewards_router, prefix=settings.api_v1_prefix)
app.include_router(notifications_router, prefix=settings.api_v1_prefix)
app.include_router(geo_router, prefix=settings.api_v1_prefix)
app.include_router(config_router, prefix=settings.api_v1_prefix)
app.include_router(events_router, prefix=settings.api_v1_prefix)
