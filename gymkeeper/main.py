"""
GymKeeper - Main Application Entry Point
Multi-tenant gym membership management backend
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from gymkeeper.core.clock import get_clock
from gymkeeper.core.config import get_settings
from gymkeeper.core.database import init_db, session_factory
from gymkeeper.core.events import event_bus, log_expiring_memberships
from gymkeeper.core.exceptions import register_exception_handlers
from gymkeeper.core.scheduler import create_scheduler
from gymkeeper.services.reconciliation import MembershipJobs
from gymkeeper.api import attendance, auth, dashboard, members, payments, reports, settings as gym_settings

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Initializing GymKeeper backend")
    if settings.AUTO_CREATE_TABLES:
        init_db()
    else:
        logger.info("Database managed by Alembic migrations")

    event_bus.subscribe("MembershipsExpiringSoon", log_expiring_memberships)

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        jobs = MembershipJobs(session_factory, get_clock(), event_bus)
        if settings.RECONCILE_ON_STARTUP:
            await jobs.reconcile()
        scheduler = create_scheduler(jobs, settings)
        scheduler.start()

    yield

    # Shutdown
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    event_bus.unsubscribe("MembershipsExpiringSoon", log_expiring_memberships)
    logger.info("Shutting down GymKeeper backend")


# Create FastAPI application
app = FastAPI(
    title="GymKeeper API",
    description="Multi-tenant gym membership, attendance and payment management",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
prefix = settings.API_V1_PREFIX
app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["auth"])
app.include_router(gym_settings.router, prefix=f"{prefix}/settings", tags=["settings"])
app.include_router(members.router, prefix=f"{prefix}/members", tags=["members"])
app.include_router(attendance.router, prefix=f"{prefix}/attendance", tags=["attendance"])
app.include_router(payments.router, prefix=f"{prefix}/payments", tags=["payments"])
app.include_router(dashboard.router, prefix=f"{prefix}/dashboard", tags=["dashboard"])
app.include_router(reports.router, prefix=f"{prefix}/reports", tags=["reports"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "gymkeeper-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "GymKeeper API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "gymkeeper.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
