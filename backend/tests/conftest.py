"""Shared fixtures: a throwaway SQLite database behind the real store."""
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from bookshelf.database import create_schema
from bookshelf.main import create_app
from bookshelf.services.book_store import BookStore


@pytest.fixture
async def engine(tmp_path):
    """Engine bound to a fresh database with the book table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine):
    """Store adapter over the test database."""
    return BookStore(engine)


@pytest.fixture
async def client(store):
    """Create test client."""
    app = create_app(store=store)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
