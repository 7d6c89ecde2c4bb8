"""
Database configuration and session management
"""

from sqlmodel import SQLModel, Session, create_engine
import structlog

from gymkeeper.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
)


def session_factory() -> Session:
    """Open a standalone session (background jobs, scripts)"""
    return Session(engine)


def init_db():
    """Initialize database tables"""
    # Import models so every table is registered on the metadata
    import gymkeeper.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created")


def get_session():
    """Dependency to get database session"""
    with Session(engine) as session:
        yield session
