"""
food_express.infra.database.engine – Async SQLAlchemy 2.0 engine and session factory.

Nothing is cached at module level: the application builds one engine and one
session factory at startup and keeps them on ``app.state``.

On first run, ensure_database_exists() can create the target database if it does not exist
(connects to "postgres", then CREATE DATABASE).
"""
from __future__ import annotations

import logging
import re
from urllib.parse import urlparse, urlunparse

import asyncpg
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Ensure all ORM models (and the order number sequence) are registered before create_all()
import food_express.infra.database.models  # noqa: F401
from food_express.config.postgres import PostgresConfig
from food_express.infra.database.models.base import Base

logger = logging.getLogger(__name__)

# Allowed characters for a database name we are willing to CREATE
_DBNAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def _parse_db_name_and_postgres_url(url: str) -> tuple[str, str]:
    """Split the DSN into the target database name and a DSN for the 'postgres' maintenance db."""
    parsed = urlparse(url.replace("+asyncpg", ""))
    path = (parsed.path or "/postgres").strip("/")
    dbname = (path.split("?")[0] or "postgres").strip()
    postgres_url = urlunparse((parsed.scheme, parsed.netloc, "/postgres", parsed.params, parsed.query, parsed.fragment))
    return dbname, postgres_url


async def ensure_database_exists(config: PostgresConfig) -> None:
    """Create the target database when missing. Names outside [a-zA-Z0-9_] are skipped."""
    dbname, postgres_url = _parse_db_name_and_postgres_url(config.url)
    if dbname == "postgres":
        return
    if not _DBNAME_PATTERN.match(dbname):
        logger.warning("ensure_database_exists: skipping unsafe database name %r", dbname)
        return
    try:
        conn = await asyncpg.connect(postgres_url)
    except (OSError, asyncpg.PostgresError) as e:
        logger.debug("ensure_database_exists: cannot reach postgres (%s), skipping", e)
        return
    try:
        row = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", dbname)
        if row is None:
            await conn.execute(f'CREATE DATABASE "{dbname}"')
            logger.info("Database created: %s", dbname)
    finally:
        await conn.close()


def build_engine(
    config: PostgresConfig,
    *,
    echo: bool | None = None,
    use_null_pool: bool = False,
) -> AsyncEngine:
    """
    Create the async SQLAlchemy engine.

    Args:
        config: PostgresConfig (url, pool_size, etc.).
        echo: Override SQL echo (default: use config.echo).
        use_null_pool: Use NullPool (e.g. for tests).
    """
    url = config.async_url
    connect_args: dict = {"server_settings": config.server_settings()}
    do_echo = echo if echo is not None else config.echo

    if use_null_pool:
        engine = create_async_engine(
            url,
            echo=do_echo,
            poolclass=NullPool,
            connect_args=connect_args,
        )
        logger.info("AsyncEngine created with NullPool (test mode)")
        return engine

    engine = create_async_engine(
        url,
        echo=do_echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_recycle=config.pool_recycle,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    logger.info(
        "AsyncEngine created: pool_size=%d max_overflow=%d",
        config.pool_size, config.max_overflow,
    )
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory bound to engine."""
    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    logger.debug("AsyncSessionFactory created")
    return factory


async def init_db(engine: AsyncEngine, *, drop_all: bool = False) -> None:
    """Create all ORM tables and the order number sequence.

    For dev/test only; use Alembic in production.
    """
    async with engine.begin() as conn:
        if drop_all:
            logger.warning("Dropping all ORM tables (drop_all=True)")
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Creating ORM tables")
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialised successfully")


async def close_engine(engine: AsyncEngine) -> None:
    """Dispose the connection pool. Call on app shutdown."""
    await engine.dispose()
    logger.info("AsyncEngine disposed")
