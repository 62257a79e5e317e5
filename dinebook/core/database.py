"""
Database configuration and session management
"""

from sqlmodel import SQLModel, Session, create_engine
import structlog

from dinebook.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()


def _connect_args(url: str) -> dict:
    # SQLite connections are handed between the event loop and the threadpool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG and settings.ENVIRONMENT == "development",
    connect_args=_connect_args(settings.DATABASE_URL),
)


def init_db():
    """Initialize database tables"""
    # Import models so every table is registered on the metadata
    import dinebook.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created")


def get_session():
    """Dependency to get database session"""
    with Session(engine) as session:
        yield session
