"""Async database engine, session factory, and initialization."""
import datetime
import logging
from pathlib import Path

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from .config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

engine = create_async_engine(DATABASE_URL, echo=False)
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):

    def as_dict(self) -> dict:
        """Column values as a JSON-friendly dict (dates rendered as ISO strings)."""
        out = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, (datetime.date, datetime.datetime)):
                value = value.isoformat()
            out[column.key] = value
        return out


async def get_db():
    """FastAPI dependency: yield an async DB session."""
    async with async_session_factory() as session:
        yield session


async def init_db(db_engine=None):
    """Create all tables."""
    db_engine = db_engine or engine

    url = db_engine.url
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    async with db_engine.begin() as conn:
        from . import models  # noqa: ensure models are registered
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Database initialized at {url.render_as_string(hide_password=True)}")
