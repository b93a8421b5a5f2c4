"""Engine, session factory and table bootstrap for the relational store."""

from collections.abc import AsyncIterator
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from agent_platform.observability import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """Owns the engine shared by every request and remembers whether tables exist."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)
        self._tables_ready = False

    @property
    def tables_ready(self) -> bool:
        return self._tables_ready

    async def create_tables(self) -> None:
        """CREATE TABLE IF NOT EXISTS for every mapped model; no-op once it succeeded."""
        if self._tables_ready:
            return
        # Register mappers on Base.metadata
        import agent_platform.models  # noqa: F401

        _ensure_sqlite_directory(self.url)
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._tables_ready = True
        logger.info("database_tables_ready", url=make_url(self.url).render_as_string(hide_password=True))

    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    async def dispose(self) -> None:
        await self.engine.dispose()


def _ensure_sqlite_directory(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return
    database = parsed.database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
