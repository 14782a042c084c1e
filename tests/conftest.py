"""
Pytest configuration and fixtures for petclinic tests.

Every test gets its own in-memory SQLite database seeded with the reference
clinic data. The ``async_session`` fixture runs inside a transaction that is
rolled back when the test ends.
"""

from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from petclinic.database.connection import create_engine
from petclinic.database.session import SessionManager
from petclinic.models import Base, Owner, Pet, Visit
from petclinic.services import ClinicService

from .seed_data import seed_clinic_data

SQLITE_TEST_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    engine = create_engine(SQLITE_TEST_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_manager(test_engine) -> SessionManager:
    """Session manager over a database holding the reference data."""
    manager = SessionManager(test_engine)
    async with manager.get_transaction() as session:
        await seed_clinic_data(session)
    return manager


@pytest_asyncio.fixture
async def async_session(session_manager) -> AsyncGenerator[AsyncSession, None]:
    """Session whose changes are rolled back after the test."""
    async with session_manager.get_rollback_scope() as session:
        yield session


@pytest.fixture
def clinic_service(async_session) -> ClinicService:
    return ClinicService(async_session)


@pytest.fixture
def owner_factory():
    """Build unsaved owners with valid defaults."""

    def _create(**kwargs) -> Owner:
        data = {
            "first_name": "Sam",
            "last_name": "Schultz",
            "address": "4, Evans Street",
            "city": "Wollongong",
            "telephone": "4444444444",
        }
        data.update(kwargs)
        return Owner(**data)

    return _create


@pytest.fixture
def pet_factory():
    """Build unsaved pets with valid defaults."""

    def _create(**kwargs) -> Pet:
        data = {"name": "Bowser", "birth_date": date(2020, 5, 15)}
        data.update(kwargs)
        return Pet(**data)

    return _create


@pytest.fixture
def visit_factory():
    def _create(**kwargs) -> Visit:
        data = {"description": "annual checkup"}
        data.update(kwargs)
        return Visit(**data)

    return _create
