import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(database_url: str) -> dict:
    """SQLite needs cross-thread access and, in memory, a single shared connection."""
    url = make_url(database_url)
    options = {"echo": settings.DB_ECHO}

    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
    else:
        options.update(pool_size=10, max_overflow=20, pool_pre_ping=True)

    return options


# Create SQLAlchemy engine (the one process-wide persistence handle)
engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency to get database session.
    Yields a database session and closes it after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the products table if it does not exist yet."""
    # Register the model on Base.metadata before create_all
    from app.models import product  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database ready at {engine.url.render_as_string(hide_password=True)}")


def close_db() -> None:
    """Release every pooled connection."""
    engine.dispose()
    logger.info("Database connections closed")
