"""
Database connection, session management, and migration utilities.

This module provides async SQLAlchemy engine configuration, session and
transaction scopes, and Alembic migration helpers for the clinic database.
"""

from .connection import (
    DatabaseConfig,
    check_connection,
    close_engine,
    create_engine,
    get_database_url,
    wait_for_database,
)
from .migrations import MigrationManager
from .session import (
    SessionManager,
    get_session,
    get_session_manager,
    get_transaction,
    initialize_session_manager,
)

__all__ = [
    # Connection utilities
    "DatabaseConfig",
    "create_engine",
    "get_database_url",
    "check_connection",
    "close_engine",
    "wait_for_database",
    # Session management
    "SessionManager",
    "initialize_session_manager",
    "get_session_manager",
    "get_session",
    "get_transaction",
    # Migration utilities
    "MigrationManager",
]
