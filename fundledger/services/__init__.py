"""Database connection and session management."""

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from fundledger.config import get_settings

# Seconds a SQLite writer waits for another writer's lock
SQLITE_BUSY_TIMEOUT = 30


def to_async_url(database_url: str) -> str:
    """Map a plain SQLite URL onto the aiosqlite driver.

    Other URLs are expected to name an async driver already
    (e.g. ``postgresql+asyncpg://``).
    """
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url


def _is_memory_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite") and (
        ":memory:" in database_url or database_url.rstrip("/").endswith(":")
    )


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """Make every SQLite transaction take the write lock up front.

    SQLite ignores ``SELECT ... FOR UPDATE`` and the driver defers BEGIN
    until the first write, so a balance read would otherwise run outside
    the transaction that posts against it. ``BEGIN IMMEDIATE`` serializes
    writers from their first statement.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_database_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for ``database_url``.

    In-memory SQLite shares one connection (``StaticPool``) so every
    session sees the same database; file-backed SQLite and server
    databases get a connection per session.
    """
    database_url = to_async_url(database_url)

    if _is_memory_sqlite(database_url):
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    elif database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"timeout": SQLITE_BUSY_TIMEOUT},
        )
    else:
        return create_async_engine(database_url, echo=echo, pool_pre_ping=True)

    _use_immediate_transactions(engine)
    return engine


DATABASE_URL = to_async_url(get_settings().database_url)

async_engine = create_database_engine(DATABASE_URL, echo=get_settings().database_echo)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Get async database session."""
    async with AsyncSessionLocal() as session:
        yield session


__all__ = [
    "DATABASE_URL",
    "SQLITE_BUSY_TIMEOUT",
    "AsyncSessionLocal",
    "async_engine",
    "create_database_engine",
    "get_async_session",
    "to_async_url",
]
