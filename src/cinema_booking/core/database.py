"""
Database configuration and async session management
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from cinema_booking.core.config import settings


def _engine_options(url: str) -> dict:
    """Pool options for the configured driver (SQLite has no sized pool)"""
    options = {
        "echo": settings.DEBUG,  # Log SQL queries in debug mode
        "pool_pre_ping": True,  # Verify connections before using
    }
    if not url.startswith("sqlite"):
        options["pool_size"] = 20
        options["max_overflow"] = 40
    return options


# asyncpg driver for PostgreSQL, aiosqlite for local runs and tests
engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Don't expire objects after commit
    autoflush=False,
)

# Create declarative base for models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI to provide database sessions.

    Usage:
        @router.get("/bookings/{booking_id}")
        async def get_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
            return await BookingService.get_booking(db, booking_id)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """
    Initialize database tables.
    Only for development - use migrations in production.
    """
    async with engine.begin() as conn:
        # Import all models to register them with Base
        from cinema_booking import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)


async def drop_db():
    """
    Drop all database tables.
    WARNING: Use only in development/testing!
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
