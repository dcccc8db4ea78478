"""
Database Configuration.

SQLAlchemy async engine and session management.

There is no module-level engine: a ``Database`` object is constructed by
``create_app()`` (or injected by the caller, e.g. tests) and kept on
``app.state.database``. Request handlers receive sessions through the
``get_db_session`` dependency, which reads the instance from the app.
"""

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from modules.backend.core.logging import get_logger

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Persistence store handle: one engine plus its session factory.

    Usage:
        database = Database("sqlite+aiosqlite:///data/notepad.db")
        await database.create_all()
        async with database.session() as session:
            ...
        await database.dispose()
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.is_sqlite = url.startswith("sqlite")

        engine_kwargs: dict[str, Any] = {"echo": echo}
        if self.is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url:
                # A single shared connection keeps the in-memory database alive
                engine_kwargs["poolclass"] = StaticPool

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.debug("Database engine created", extra={"sqlite": self.is_sqlite})

    @classmethod
    def from_config(cls) -> "Database":
        """Build the store from config/settings/database.yaml."""
        from modules.backend.core.config import get_app_config, get_database_url

        return cls(get_database_url(), echo=get_app_config().database.echo)

    async def create_all(self) -> None:
        """Create the notes, files and users tables if they do not exist."""
        from modules.backend.models import Base

        if self.is_sqlite:
            _ensure_sqlite_directory(self.url)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready")

    async def drop_all(self) -> None:
        """Drop all tables."""
        from modules.backend.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    def session(self) -> AsyncSession:
        """Open a new session (use as an async context manager)."""
        return self.session_factory()

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.debug("Database engine disposed")


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    from pathlib import Path

    path = url.split("///", 1)[-1]
    if path and path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)


def get_database(request: Request) -> Database:
    """Dependency returning the Database owned by the running app."""
    return request.app.state.database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    The session is committed when the handler returns and rolled back
    when it raises.

    Usage in endpoints:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
