"""
Dinebook - Main Application Entry Point
Reservation management backend for a dining venue
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from dinebook import __version__
from dinebook.core.config import get_settings
from dinebook.core.database import init_db
from dinebook.core.events import ALL_EVENTS, audit_log_handler, event_bus, register_audit_subscriber
from dinebook.core.exception_handlers import register_exception_handlers
from dinebook.api import diners, payments, reservations, tables

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
    logger.info("Initializing Dinebook backend")
    if settings.DATABASE_URL.startswith("sqlite"):
        # Local SQLite databases are created on startup
        init_db()
    else:
        logger.info("Database managed by Alembic migrations")
    register_audit_subscriber(event_bus)

    yield

    # Shutdown
    event_bus.unsubscribe(ALL_EVENTS, audit_log_handler)
    logger.info("Shutting down Dinebook backend")


# Create FastAPI application
app = FastAPI(
    title="Dinebook API",
    description="Reservation management for diners, tables and deposits",
    version=__version__,
    lifespan=lifespan,
)

# Configure middleware stack
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(diners.router, prefix=f"{settings.API_V1_PREFIX}/diners", tags=["diners"])
app.include_router(tables.router, prefix=f"{settings.API_V1_PREFIX}/tables", tags=["tables"])
app.include_router(reservations.router, prefix=f"{settings.API_V1_PREFIX}/reservations", tags=["reservations"])
app.include_router(payments.router, prefix=f"{settings.API_V1_PREFIX}/payments", tags=["payments"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "dinebook-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Dinebook API",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "dinebook.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
