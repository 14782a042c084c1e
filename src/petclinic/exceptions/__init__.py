"""
Custom exceptions for the petclinic package.

This module defines the exception hierarchy and custom exceptions
used throughout the clinic service.
"""

from .core_exceptions import (
    ConfigurationException,
    ConnectionException,
    DatabaseConfigException,
    DatabaseException,
    EntityNotFoundException,
    MigrationException,
    PetClinicException,
    SchemaValidationException,
    TransactionException,
    ValidationException,
    create_error_response,
    format_validation_errors,
    handle_database_retry,
    log_exception_context,
)

__all__ = [
    # Exception classes
    "PetClinicException",
    "DatabaseException",
    "ConnectionException",
    "TransactionException",
    "MigrationException",
    "EntityNotFoundException",
    "ValidationException",
    "SchemaValidationException",
    "ConfigurationException",
    "DatabaseConfigException",
    # Utility functions
    "format_validation_errors",
    "create_error_response",
    "handle_database_retry",
    "log_exception_context",
]
