"""Database engine construction and declarative base."""
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from bookshelf.config import Settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def make_engine(settings: Settings) -> AsyncEngine:
    """Create the process-wide engine and its connection pool."""
    url = settings.async_database_url
    if url.startswith("sqlite"):
        # SQLite pools ignore the sizing options
        return create_async_engine(url, echo=settings.debug)

    return create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables known to the metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
