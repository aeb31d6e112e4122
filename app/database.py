from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.config import get_settings

settings = get_settings()


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """
    Create an async SQLAlchemy engine for the given URL.

    Server databases get a sized connection pool. SQLite connections get
    foreign key enforcement switched on, otherwise ON DELETE RESTRICT
    is silently ignored.
    """
    if url.startswith("sqlite"):
        async_engine = create_async_engine(url, **kwargs)

        @event.listens_for(async_engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return async_engine

    kwargs.setdefault("pool_size", settings.DB_POOL_SIZE)
    kwargs.setdefault("max_overflow", settings.DB_MAX_OVERFLOW)
    return create_async_engine(url, pool_pre_ping=True, **kwargs)


# Create SQLAlchemy engine with connection pooling
engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

# Create session factory
SessionLocal = async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

# Base class for models
Base = declarative_base()


async def get_db():
    """
    Dependency to get database session.
    Yields a database session and closes it after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        await db.close()
