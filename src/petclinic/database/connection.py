"""
Async engine creation and connectivity checks.

PostgreSQL runs on asyncpg and SQLite on aiosqlite; plain ``postgresql://``
and ``sqlite://`` URLs are rewritten to those drivers.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urlencode, urlparse

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool, StaticPool

from ..exceptions import ConnectionException, DatabaseConfigException

logger = logging.getLogger(__name__)

ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


class DatabaseConfig:
    """
    A checked database URL plus the pool settings used for PostgreSQL.

    Args:
        database_url: ``postgresql[+driver]://`` or ``sqlite[+driver]://`` URL
        pool_size: Connections kept open
        max_overflow: Extra connections allowed under load
        pool_timeout: Seconds to wait for a free connection
        pool_recycle: Seconds before a connection is replaced
        echo: Log SQL statements
        echo_pool: Log pool checkouts and returns

    Raises:
        DatabaseConfigException: If the URL is not usable
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        echo: bool = False,
        echo_pool: bool = False,
    ):
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self.echo = echo
        self.echo_pool = echo_pool
        self._parsed = urlparse(database_url)
        self._validate_database_url()

    @property
    def is_sqlite(self) -> bool:
        return self._parsed.scheme.startswith("sqlite")

    @property
    def is_memory_database(self) -> bool:
        """``sqlite://`` and ``sqlite:///:memory:`` (any driver)."""
        return self.is_sqlite and self._parsed.path.lstrip("/") in ("", ":memory:")

    def _validate_database_url(self) -> None:
        if self.is_sqlite:
            return

        parsed = self._parsed
        if not parsed.scheme.startswith("postgresql"):
            raise DatabaseConfigException(
                "Database URL must use postgresql://, postgresql+asyncpg:// or sqlite+aiosqlite://",
                config_key="database_url",
                config_value=parsed.scheme,
            )
        if not parsed.hostname:
            raise DatabaseConfigException(
                "Database URL must include hostname", config_key="database_url"
            )
        if not parsed.path.strip("/"):
            raise DatabaseConfigException(
                "Database URL must include database name", config_key="database_url"
            )

    def get_async_url(self) -> str:
        for prefix, async_prefix in ASYNC_DRIVERS.items():
            if self.database_url.startswith(prefix):
                return async_prefix + self.database_url[len(prefix):]
        return self.database_url


def create_engine(
    database_url: str,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_timeout: int = 30,
    pool_recycle: int = 3600,
    pool_pre_ping: bool = True,
    echo: bool = False,
    echo_pool: bool = False,
    use_null_pool: bool = False,
    connect_args: Optional[dict] = None,
) -> AsyncEngine:
    """
    Build an async engine for ``database_url``.

    Pool choice:
        * in-memory SQLite: ``StaticPool``, so every session shares one database
        * file SQLite or ``use_null_pool``: ``NullPool``
        * PostgreSQL: ``AsyncAdaptedQueuePool`` sized by the pool arguments

    Raises:
        DatabaseConfigException: If the URL is not usable
    """
    config = DatabaseConfig(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        echo=echo,
        echo_pool=echo_pool,
    )

    options: Dict[str, Any] = {"echo": config.echo, "echo_pool": config.echo_pool}
    if connect_args:
        options["connect_args"] = connect_args

    if config.is_memory_database:
        options["poolclass"] = StaticPool
    elif use_null_pool or config.is_sqlite:
        options["poolclass"] = NullPool
    else:
        options.update(
            poolclass=AsyncAdaptedQueuePool,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=pool_pre_ping,
        )

    async_url = config.get_async_url()
    engine = create_async_engine(async_url, **options)
    logger.info(f"Created database engine for {urlparse(async_url).hostname or 'sqlite'}")
    return engine


async def check_connection(
    engine: AsyncEngine, max_retries: int = 3, retry_delay: float = 1.0
) -> bool:
    """
    Run ``SELECT 1``, retrying with a doubling delay.

    Returns:
        False once every attempt has failed
    """
    attempts = max_retries + 1
    for attempt in range(attempts):
        try:
            async with engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            if attempt + 1 == attempts:
                logger.error(f"Database unreachable after {attempts} attempts: {e}")
                break
            logger.warning(f"Database check {attempt + 1}/{attempts} failed: {e}")
            await asyncio.sleep(retry_delay * (2**attempt))
    return False


async def close_engine(engine: AsyncEngine) -> None:
    """Dispose of ``engine``. Errors are logged, not raised."""
    try:
        await engine.dispose()
    except Exception as e:
        logger.error(f"Error closing database engine: {e}")
        return
    logger.info("Database engine closed")


async def wait_for_database(
    engine: AsyncEngine, timeout: float = 30.0, check_interval: float = 1.0
) -> bool:
    """
    Poll until the database answers.

    Raises:
        ConnectionException: If it does not answer within ``timeout`` seconds
    """
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if await check_connection(engine, max_retries=0):
            return True
        await asyncio.sleep(check_interval)

    raise ConnectionException(
        f"Database did not become available within {timeout} seconds",
        database_url=str(engine.url),
    )


def get_database_url(
    host: str,
    port: int = 5432,
    database: str = "petclinic",
    username: str = "postgres",
    password: str = "",
    driver: str = "asyncpg",
    **kwargs: Any,
) -> str:
    """
    Assemble a PostgreSQL URL; extra keyword arguments become query parameters.

    >>> get_database_url("db", sslmode="require")
    'postgresql+asyncpg://postgres@db:5432/petclinic?sslmode=require'
    """
    credentials = f"{username}:{password}" if password else username
    url = f"postgresql+{driver}://{credentials}@{host}:{port}/{database}"
    if kwargs:
        url += "?" + urlencode(kwargs)
    return url
