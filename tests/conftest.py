"""Shared fixtures: a throwaway SQLite database and tool contexts bound to it."""
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from flowlist.database import init_db
from flowlist.tools import ToolContext


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def ctx(session_factory):
    """Tool context for user 1."""
    return ToolContext(user_id=1, session_factory=session_factory)


@pytest.fixture
def other_ctx(session_factory):
    """Tool context for a second user, to check scoping."""
    return ToolContext(user_id=2, session_factory=session_factory)
