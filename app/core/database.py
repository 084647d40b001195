"""Database configuration and connection management"""

from typing import AsyncGenerator, Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    AsyncEngine
)
from sqlalchemy.orm import sessionmaker
from app.core.config import settings

# Import Base from models (defined in models/base.py)
# This ensures all models are registered with the same Base
from app.models import Base

engine: Optional[AsyncEngine] = None
async_session_factory: Optional[sessionmaker] = None


def _engine_options(url: str) -> dict:
    """Pool options for server databases; SQLite uses the driver defaults"""
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "pool_pre_ping": True,
    }


async def init_db(url: Optional[str] = None) -> None:
    """Initialize the async engine, the session factory and the schema"""
    global engine, async_session_factory

    database_url = url or settings.DATABASE_URL

    engine = create_async_engine(
        database_url,
        echo=settings.DEBUG,
        **_engine_options(database_url)
    )

    async_session_factory = sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close the engine and cleanup connections"""
    global engine, async_session_factory
    if engine:
        await engine.dispose()
        engine = None
        async_session_factory = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency injection for database sessions.

    Usage in FastAPI:
        @router.get("/usage")
        async def get_usage(db: AsyncSession = Depends(get_db)):
            ...
    """
    if async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_db_connection() -> bool:
    """
    Check if the database connection is healthy.
    Used for health checks.
    """
    if engine is None:
        return False

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
