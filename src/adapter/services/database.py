"""Async engine and session factory

SQLite has no row-level locks, so for SQLite every transaction is opened
with BEGIN IMMEDIATE: writers queue on the database write lock (bounded by
the busy timeout) instead of failing mid-transaction, and the store stays
the arbiter of ordering between concurrent requests.
"""

import logging
from typing import Any, Dict, Optional
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

logger = logging.getLogger(__name__)


def _install_sqlite_locking(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Take over transaction control from the driver
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine(
    db_uri: str,
    busy_timeout_seconds: float = 30,
    engine_options: Optional[Dict[str, Any]] = None,
) -> AsyncEngine:
    """
    Create the async engine for db_uri

    Args:
        db_uri: SQLAlchemy async URI (postgresql+asyncpg://, sqlite+aiosqlite://)
        busy_timeout_seconds: SQLite only, how long a writer waits for the lock
        engine_options: Extra keyword arguments for create_async_engine
    """
    options: Dict[str, Any] = {"echo": False, "future": True}
    options.update(engine_options or {})

    is_sqlite = db_uri.startswith("sqlite")
    if is_sqlite:
        connect_args = dict(options.pop("connect_args", {}))
        connect_args.setdefault("timeout", busy_timeout_seconds)
        options["connect_args"] = connect_args

    engine = create_async_engine(db_uri, **options)

    if is_sqlite:
        _install_sqlite_locking(engine)
        logger.debug("SQLite engine configured with BEGIN IMMEDIATE transactions")

    return engine


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables (development and tests; production uses migrations)"""
    import src.domain  # noqa: F401  registers table models on SQLModel.metadata

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
