"""
Database configuration and session management.
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from .config import settings
from ..models import Base


def create_db_engine(database_url: str = None):
    """
    Creates a SQLAlchemy async engine for the event store.
    SQLite files are opened per session (NullPool); PostgreSQL keeps a pool
    shared by concurrent requests.
    """
    url = database_url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_async_engine(url, poolclass=NullPool, future=True, echo=False)

    return create_async_engine(
        url,
        pool_pre_ping=True,
        future=True,
        echo=False  # Set to True for SQL query logging
    )


# Create the engine when the module is loaded
engine = create_db_engine()

# Create a configured "Session" class
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=True,
    autocommit=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency to provide a database session per request.
    Yields a session and ensures it's closed after the request is finished.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(bind=None):
    """
    Initialize the database by creating all tables.
    Only use this for local development/testing.
    In production, use Alembic migrations.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(bind=None):
    """
    Drop all database tables.
    Only use this for testing.
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
