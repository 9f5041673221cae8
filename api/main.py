"""
FastAPI application initialization
"""

import asyncio
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from api.routes import dashboard, day_offs, health, sync, targets
from core.config import settings
from core.database import async_session_maker
from core.exceptions import FilterValidationError
from core.logging import setup_logging
import logging
from api.middleware import RequestContextMiddleware
from ingestion.scheduler import SyncScheduler

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Team Points Dashboard API",
    description="Asana task sync, point scoring and team performance dashboards",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# One sync at a time per process, shared by POST /sync and the scheduler
app.state.sync_lock = asyncio.Lock()

scheduler = SyncScheduler(
    session_factory=async_session_maker,
    lock=app.state.sync_lock,
    interval_minutes=settings.SYNC_INTERVAL_MINUTES
)


# Include routers
app.include_router(health.router)
app.include_router(sync.router)
app.include_router(dashboard.router)
app.include_router(targets.router)
app.include_router(day_offs.router)


@app.exception_handler(FilterValidationError)
async def filter_validation_handler(request: Request, exc: FilterValidationError):
    return JSONResponse(status_code=422, content={"error": exc.message, "details": exc.context})


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting Team Points Dashboard API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

    if settings.SYNC_SCHEDULER_ENABLED:
        scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Team Points Dashboard API")
    scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Team Points Dashboard API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "sync": "/sync",
            "sync_status": "/sync/status",
            "dashboard": "/dashboard",
            "targets": "/targets",
            "day_offs": "/day-offs"
        }
    }
