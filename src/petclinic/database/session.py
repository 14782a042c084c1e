"""
Session scopes for the clinic database.

``ClinicService`` only flushes, so the scope a caller picks decides what
happens to its changes:

    async with session_manager.get_transaction() as session:
        service = ClinicService(session)
        owner = await service.find_owner_by_id(1)
        owner.city = "Madison"
        await service.save_owner(owner)
    # committed here, or rolled back if the block raised

``get_rollback_scope()`` always discards the changes, which is what the test
suite uses.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Optional

from sqlalchemy import MetaData, text
from sqlalchemy.exc import DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..exceptions import DatabaseException, TransactionException

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (DisconnectionError, OperationalError)

DEFAULT_SESSION_CONFIG: Dict[str, Any] = {
    # Entities stay readable once their transaction ends; relationships are
    # eager-loaded, so nothing lazy-loads outside a session.
    "expire_on_commit": False,
    "autoflush": True,
}


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class SessionManager:
    """
    Hands out sessions bound to one engine and wraps them in scopes.

    Args:
        engine: Async engine the sessions use
        session_config: Overrides for ``expire_on_commit`` / ``autoflush``
    """

    def __init__(
        self, engine: AsyncEngine, session_config: Optional[Dict[str, Any]] = None
    ):
        self.engine = engine
        self._is_initialized = False
        options = {**DEFAULT_SESSION_CONFIG, **(session_config or {})}
        self.session_factory = async_sessionmaker(
            bind=engine, class_=AsyncSession, **options
        )

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    async def create_session(self) -> AsyncSession:
        return self.session_factory()

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Plain session: rolled back if the block raises, always closed."""
        session = await self.create_session()
        try:
            yield session
        except Exception as e:
            logger.error(f"Rolling back session after error: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def get_transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Session inside a transaction that commits when the block succeeds."""
        async with self.get_session() as session:
            async with session.begin():
                yield session

    @asynccontextmanager
    async def get_rollback_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Session inside a transaction that is rolled back on exit, whatever happens."""
        async with self.get_session() as session:
            transaction = await session.begin()
            try:
                yield session
            finally:
                if transaction.is_active:
                    await transaction.rollback()

    async def execute_in_transaction(
        self, operation: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any
    ) -> Any:
        """
        Run ``operation(session, *args, **kwargs)`` in its own transaction.

        Raises:
            TransactionException: If the operation or the commit fails
        """
        name = getattr(operation, "__name__", repr(operation))
        try:
            async with self.get_transaction() as session:
                return await operation(session, *args, **kwargs)
        except Exception as e:
            logger.error(f"Transaction for {name} failed: {e}")
            raise TransactionException(operation=name, original_error=e)

    async def execute_with_retry(
        self,
        operation: Callable[[AsyncSession], Awaitable[Any]],
        max_retries: int = 3,
        retry_delay: float = 1.0,
        exponential_backoff: bool = True,
    ) -> Any:
        """
        Run ``operation(session)`` in a transaction, retrying dropped connections.

        Only ``OperationalError`` and ``DisconnectionError`` are retried.

        Raises:
            DatabaseException: On any other error, or once retries run out
        """
        name = getattr(operation, "__name__", repr(operation))
        last_error: Optional[Exception] = None

        for attempt in range(max_retries + 1):
            try:
                async with self.get_transaction() as session:
                    return await operation(session)
            except TRANSIENT_ERRORS as e:
                last_error = e
                if attempt == max_retries:
                    break
                delay = retry_delay * (2**attempt) if exponential_backoff else retry_delay
                logger.warning(
                    f"{name} hit a transient error (attempt {attempt + 1}/{max_retries + 1}), "
                    f"retrying in {delay}s: {e}"
                )
                await asyncio.sleep(delay)
            except Exception as e:
                logger.error(f"{name} failed: {e}")
                raise DatabaseException(
                    "Database operation failed",
                    details={"operation": name},
                    original_error=e,
                )

        logger.error(f"{name} failed after {max_retries + 1} attempts: {last_error}")
        raise DatabaseException(
            f"Database operation failed after {max_retries + 1} attempts",
            details={"operation": name},
            original_error=last_error,
            retry_count=max_retries,
            max_retries=max_retries,
        )

    async def health_check(self) -> Dict[str, Any]:
        """
        Run a bare query and a committed transaction against the database.

        Returns:
            ``{"status": "healthy" | "unhealthy", "timestamp": ..., "checks": {...}}``
            with per-check status and response time in milliseconds.
        """
        report: Dict[str, Any] = {"status": "healthy", "timestamp": time.time(), "checks": {}}
        scopes = (("basic_query", self.get_session), ("transaction", self.get_transaction))

        try:
            for check, scope in scopes:
                started = time.perf_counter()
                async with scope() as session:
                    await session.execute(text("SELECT 1"))
                report["checks"][check] = {"status": "pass", "response_time": _elapsed_ms(started)}
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            report["status"] = "unhealthy"
            report["checks"]["database"] = {
                "status": "fail",
                "error": str(e),
                "error_type": type(e).__name__,
            }

        return report

    async def initialize_database(self, metadata: Optional[MetaData] = None) -> bool:
        """
        Check the database is reachable and create ``metadata``'s tables.

        Returns:
            False if the health check or table creation failed
        """
        if (await self.health_check())["status"] != "healthy":
            logger.error("Database is not healthy, skipping initialization")
            return False

        if metadata is not None:
            try:
                async with self.engine.begin() as conn:
                    await conn.run_sync(metadata.create_all)
            except SQLAlchemyError as e:
                logger.error(f"Creating tables failed: {e}")
                return False
            logger.info(f"Created {len(metadata.tables)} tables")

        self._is_initialized = True
        return True

    async def cleanup_database(
        self, metadata: Optional[MetaData] = None, drop_all: bool = False
    ) -> bool:
        """Optionally drop ``metadata``'s tables, then dispose of the engine."""
        try:
            if drop_all and metadata is not None:
                async with self.engine.begin() as conn:
                    await conn.run_sync(metadata.drop_all)
                logger.warning("Dropped all clinic tables")
            await self.close_all_sessions()
        except SQLAlchemyError as e:
            logger.error(f"Database cleanup failed: {e}")
            return False
        return True

    async def close_all_sessions(self) -> None:
        await self.engine.dispose()
        logger.info("Disposed of the database engine")


_session_manager: Optional[SessionManager] = None


def initialize_session_manager(engine: AsyncEngine) -> SessionManager:
    """Create the process-wide session manager used by ``get_session``/``get_transaction``."""
    global _session_manager
    _session_manager = SessionManager(engine)
    logger.info("Session manager initialized")
    return _session_manager


def get_session_manager() -> SessionManager:
    """
    Raises:
        RuntimeError: If ``initialize_session_manager`` has not been called
    """
    if _session_manager is None:
        raise RuntimeError(
            "Session manager not initialized. Call initialize_session_manager() first."
        )
    return _session_manager


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_manager().get_session() as session:
        yield session


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncSession, None]:
    async with get_session_manager().get_transaction() as session:
        yield session
