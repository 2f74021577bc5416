"""
Async engine, session factory and schema management.
"""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from loguru import logger

from .config import settings

engine = create_async_engine(
    settings.async_database_url,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

if engine.dialect.name == "sqlite":
    # SQLite ignores ON DELETE CASCADE unless foreign keys are enabled per connection
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped database session.

    The session is rolled back if the request fails. Tracker errors and
    HTTPExceptions are normal API outcomes and are not logged here.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            from fastapi import HTTPException
            from app.utils.exceptions import TrackerException
            if not isinstance(e, (HTTPException, TrackerException)):
                logger.error("Database session error: {}", str(e))
            await session.rollback()
            raise


async def create_tables():
    """Create the problems, research and experiments tables if missing."""
    # Registers the mapped classes on Base.metadata
    from app.models import problem, research, experiment  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise
    logger.info(f"Database ready: {', '.join(sorted(Base.metadata.tables))}")

