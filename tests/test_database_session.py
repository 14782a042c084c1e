"""
Tests for database session management utilities.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

import petclinic.database.session as session_module
from petclinic.database.session import (
    SessionManager,
    get_session,
    get_session_manager,
    get_transaction,
    initialize_session_manager,
)
from petclinic.exceptions import DatabaseException, TransactionException
from petclinic.models import Base, Owner


@pytest.fixture
def reset_global_manager():
    previous = session_module._session_manager
    session_module._session_manager = None
    yield
    session_module._session_manager = previous


async def _count_owners(manager: SessionManager) -> int:
    async with manager.get_session() as session:
        return await session.scalar(select(func.count()).select_from(Owner))


class TestSessionManager:
    """Unit tests with a mocked engine."""

    def test_initialization(self):
        mock_engine = Mock()
        manager = SessionManager(mock_engine)

        assert manager.engine == mock_engine
        assert manager.session_factory is not None
        assert manager.session_factory.kw["expire_on_commit"] is False
        assert manager.is_initialized is False

    def test_session_config_override(self):
        manager = SessionManager(Mock(), session_config={"autoflush": False})
        assert manager.session_factory.kw["autoflush"] is False

    async def test_get_session_closes(self):
        manager = SessionManager(Mock())
        mock_session = AsyncMock()

        with patch.object(manager, "create_session", return_value=mock_session):
            async with manager.get_session() as session:
                assert session == mock_session

        mock_session.close.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    async def test_get_session_rolls_back_on_error(self):
        manager = SessionManager(Mock())
        mock_session = AsyncMock()

        with patch.object(manager, "create_session", return_value=mock_session):
            with pytest.raises(ValueError):
                async with manager.get_session():
                    raise ValueError("save failed")

        mock_session.rollback.assert_awaited_once()
        mock_session.close.assert_awaited_once()

    async def test_execute_in_transaction_wraps_errors(self):
        manager = SessionManager(Mock())

        async def failing_operation(session):
            raise SQLAlchemyError("constraint violated")

        with patch.object(manager, "get_transaction") as mock_get_transaction:
            mock_get_transaction.return_value.__aenter__.return_value = AsyncMock()

            with pytest.raises(TransactionException) as exc_info:
                await manager.execute_in_transaction(failing_operation)

        assert exc_info.value.details["operation"] == "failing_operation"

    async def test_execute_with_retry_retries_transient_errors(self):
        manager = SessionManager(Mock())
        operation = AsyncMock(
            side_effect=[OperationalError("SELECT 1", {}, Exception("gone")), "done"]
        )

        with patch.object(manager, "get_transaction") as mock_get_transaction:
            mock_get_transaction.return_value.__aenter__.return_value = AsyncMock()
            result = await manager.execute_with_retry(operation, retry_delay=0)

        assert result == "done"
        assert operation.await_count == 2

    async def test_execute_with_retry_gives_up(self):
        manager = SessionManager(Mock())
        operation = AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("gone")))

        with patch.object(manager, "get_transaction") as mock_get_transaction:
            mock_get_transaction.return_value.__aenter__.return_value = AsyncMock()
            with pytest.raises(DatabaseException) as exc_info:
                await manager.execute_with_retry(operation, max_retries=1, retry_delay=0)

        assert operation.await_count == 2
        assert exc_info.value.details["max_retries"] == 1

    async def test_execute_with_retry_does_not_retry_other_errors(self):
        manager = SessionManager(Mock())
        operation = AsyncMock(side_effect=ValueError("bad owner"))

        with patch.object(manager, "get_transaction") as mock_get_transaction:
            mock_get_transaction.return_value.__aenter__.return_value = AsyncMock()
            with pytest.raises(DatabaseException):
                await manager.execute_with_retry(operation, retry_delay=0)

        assert operation.await_count == 1

    async def test_health_check_failure(self):
        manager = SessionManager(Mock())

        with patch.object(manager, "get_session", side_effect=SQLAlchemyError("down")):
            result = await manager.health_check()

        assert result["status"] == "unhealthy"
        assert result["checks"]["database"]["status"] == "fail"


class TestSessionManagerWithDatabase:
    """Scopes exercised against the seeded in-memory database."""

    async def test_transaction_commits(self, session_manager):
        async with session_manager.get_transaction() as session:
            session.add(Owner(first_name="Sam", last_name="Schultz"))

        assert await _count_owners(session_manager) == 11

    async def test_transaction_rolls_back_on_error(self, session_manager):
        with pytest.raises(RuntimeError):
            async with session_manager.get_transaction() as session:
                session.add(Owner(first_name="Sam", last_name="Schultz"))
                await session.flush()
                raise RuntimeError("abort")

        assert await _count_owners(session_manager) == 10

    async def test_rollback_scope_discards_changes(self, session_manager):
        async with session_manager.get_rollback_scope() as session:
            session.add(Owner(first_name="Sam", last_name="Schultz"))
            await session.flush()
            assert await session.scalar(select(func.count()).select_from(Owner)) == 11

        assert await _count_owners(session_manager) == 10

    async def test_execute_in_transaction(self, session_manager):
        async def rename_owner(session, owner_id, last_name):
            owner = await session.get(Owner, owner_id)
            owner.last_name = last_name
            return owner.id

        assert await session_manager.execute_in_transaction(rename_owner, 1, "Frank") == 1

        async with session_manager.get_session() as session:
            assert (await session.get(Owner, 1)).last_name == "Frank"

    async def test_health_check(self, session_manager):
        result = await session_manager.health_check()

        assert result["status"] == "healthy"
        assert result["checks"]["basic_query"]["status"] == "pass"
        assert result["checks"]["transaction"]["status"] == "pass"

    async def test_initialize_and_cleanup(self, test_engine):
        manager = SessionManager(test_engine)

        assert await manager.initialize_database(Base.metadata) is True
        assert manager.is_initialized

        assert await manager.cleanup_database(Base.metadata, drop_all=True) is True
        async with test_engine.connect() as conn:
            tables = await conn.scalar(
                text("SELECT count(*) FROM sqlite_master WHERE type = 'table'")
            )
        assert tables == 0


class TestGlobalSessionManager:
    def test_get_session_manager_not_initialized(self, reset_global_manager):
        with pytest.raises(RuntimeError, match="Session manager not initialized"):
            get_session_manager()

    def test_initialize_session_manager(self, reset_global_manager):
        mock_engine = Mock()

        manager = initialize_session_manager(mock_engine)

        assert get_session_manager() is manager
        assert manager.engine == mock_engine

    async def test_convenience_scopes(self, reset_global_manager, session_manager):
        initialize_session_manager(session_manager.engine)

        async with get_transaction() as session:
            session.add(Owner(first_name="Sam", last_name="Schultz"))

        async with get_session() as session:
            count = await session.scalar(select(func.count()).select_from(Owner))
        assert count == 11

    async def test_convenience_scopes_not_initialized(self, reset_global_manager):
        with pytest.raises(RuntimeError):
            async with get_session():
                pass
