"""
Petclinic

Domain model and persistence layer for a small veterinary clinic: owners and
their pets, pet types, vets with their specialties, and visits.

It includes:

- SQLAlchemy models for the clinic entities, with silent field validation
- The ClinicService facade for finding and saving records
- Pydantic schemas for request/response validation and serialization
- Database connection utilities with async SQLAlchemy engine configuration
- Exception handling with retry mechanisms
- Migration support through Alembic integration

Quick Start:
    >>> from petclinic.database import SessionManager, create_engine
    >>> from petclinic.services import ClinicService

    >>> engine = create_engine("postgresql://localhost/petclinic")
    >>> manager = SessionManager(engine)
    >>> async with manager.get_transaction() as session:
    ...     service = ClinicService(session)
    ...     owners = await service.find_owner_by_last_name("Davis")

Requirements:
    - Python 3.11+
    - SQLAlchemy 2.0+
    - Pydantic 2.5+
"""

__version__ = "0.1.0"
__author__ = "Petclinic Team"
__license__ = "MIT"

from . import database, exceptions, models, schemas, services, utils

# Convenience imports for common usage patterns
from .database import create_engine, get_session, get_transaction
from .exceptions import (
    DatabaseException,
    EntityNotFoundException,
    PetClinicException,
    ValidationException,
)
from .models import Owner, Pet, PetType, Specialty, Vet, Visit
from .services import ClinicService

__all__ = [
    # Version and metadata
    "__version__",
    "__author__",
    "__license__",
    # Core modules
    "database",
    "exceptions",
    "models",
    "schemas",
    "services",
    "utils",
    # Convenience imports
    "create_engine",
    "get_session",
    "get_transaction",
    "PetClinicException",
    "DatabaseException",
    "EntityNotFoundException",
    "ValidationException",
    "ClinicService",
    "Owner",
    "Pet",
    "PetType",
    "Specialty",
    "Vet",
    "Visit",
]
