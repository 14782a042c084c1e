"""
Utility functions and helper modules.

This module provides common utility functions for datetime handling,
validation, configuration management, and entity lookups.
"""

from .config import (
    ConfigError,
    DatabaseSettings,
    DatabaseURLValidator,
    EnvironmentConfig,
    LoggingConfigurator,
    LogLevel,
)
from .datetime_utils import (
    calculate_pet_age,
    format_pet_age,
    get_current_date,
    get_current_utc,
)
from .entity_utils import get_by_id
from .validation import (
    EARLIEST_BIRTH_DATE,
    TELEPHONE_MAX_DIGITS,
    TELEPHONE_MIN_DIGITS,
    ErrorMessageFormatter,
    ValidationError,
    ValidationResult,
    sanitize_string,
    validate_birth_date,
    validate_first_name,
    validate_required,
    validate_telephone,
)

__all__ = [
    # DateTime utilities
    "get_current_utc",
    "get_current_date",
    "calculate_pet_age",
    "format_pet_age",
    # Validation helpers
    "ValidationError",
    "ValidationResult",
    "sanitize_string",
    "validate_first_name",
    "validate_telephone",
    "validate_birth_date",
    "validate_required",
    "ErrorMessageFormatter",
    "EARLIEST_BIRTH_DATE",
    "TELEPHONE_MIN_DIGITS",
    "TELEPHONE_MAX_DIGITS",
    # Entity helpers
    "get_by_id",
    # Configuration utilities
    "ConfigError",
    "LogLevel",
    "DatabaseSettings",
    "EnvironmentConfig",
    "DatabaseURLValidator",
    "LoggingConfigurator",
]
