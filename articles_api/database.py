import logging

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from articles_api.config import settings
from articles_api.middleware import install_query_counter

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """
    Owns the async engine (connection pool) and the session factory.

    One instance is created per application and bound to the FastAPI
    lifespan: ``connect()`` on startup, ``disconnect()`` on shutdown.
    Request handlers never touch the engine directly; they receive an
    ``AsyncSession`` through the ``get_db`` dependency.
    """

    def __init__(self, url: str | None = None) -> None:
        self.url = url or settings.DATABASE_URL
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    async def connect(self) -> None:
        self._engine = create_async_engine(
            self.url,
            echo=settings.DEBUG,
            pool_pre_ping=True,
        )
        # Register the per-request SQL query counter on this engine.
        install_query_counter(self._engine)
        self._sessionmaker = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database engine created for %s", self._engine.url.render_as_string(hide_password=True))

    async def create_tables(self) -> None:
        # Models must be imported so their tables are registered on Base.metadata.
        import articles_api.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def disconnect(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("Database engine disposed")

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected")
        return self._sessionmaker()


async def get_db(request: Request):
    """
    Yield a session from the app's ``Database`` and roll back on error.

    Write handlers commit explicitly before they build the response: this
    dependency's exit code runs after the response has been sent, too late
    to report a failed commit.  Anything left uncommitted is discarded
    when the session closes.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
