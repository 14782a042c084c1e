"""
Exception hierarchy for the petclinic package.

Every error raised by the package derives from ``PetClinicException`` and
carries a machine-readable ``error_code`` plus a ``details`` dict that is safe
to log: database URLs lose their credentials and secret-looking configuration
values are redacted.
"""

import asyncio
import functools
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse, urlunparse

SENSITIVE_CONFIG_KEYS = ("password", "secret", "key", "token", "credential")

NON_RETRYABLE_CONNECTION_ERRORS = (
    "authentication failed",
    "invalid credentials",
    "access denied",
    "permission denied",
    "database does not exist",
    "role does not exist",
)


def _compact(**values: Any) -> Dict[str, Any]:
    """Build a details dict, skipping entries whose value is None."""
    return {key: value for key, value in values.items() if value is not None}


class PetClinicException(Exception):
    """
    Root of all petclinic errors.

    Subclasses set ``default_code``; without one the class name is used.

    Args:
        message: Human-readable description
        error_code: Overrides the class default code
        details: Extra context, kept JSON-serializable
    """

    default_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code or type(self).__name__
        self.details = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} (Details: {self.details})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": time.time(),
        }

    def log_error(
        self, logger: Optional[logging.Logger] = None, level: int = logging.ERROR
    ) -> None:
        """Log this error with its code and details under ``exception_data``."""
        logger = logger or logging.getLogger(__name__)
        payload = self.to_dict()
        payload.pop("timestamp")
        logger.log(
            level,
            f"Exception occurred: {self.message}",
            extra={"exception_data": payload},
        )


class EntityNotFoundException(PetClinicException):
    """A lookup by identifier matched no record."""

    default_code = "ENTITY_NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"{entity_type} with id {entity_id} not found",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


# Database errors


class DatabaseException(PetClinicException):
    """
    A database operation failed.

    Args:
        message: Human-readable description
        error_code: Overrides the class default code
        details: Extra context
        original_error: The driver or SQLAlchemy error being wrapped
        retry_count: Attempts already made
        max_retries: Attempts allowed in total
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
        retry_count: int = 0,
        max_retries: int = 3,
    ):
        super().__init__(message, error_code, details)
        self.original_error = original_error
        self.retry_count = retry_count
        self.max_retries = max_retries

        if original_error is not None:
            self.details.setdefault("original_error", str(original_error))
        self.details["retry_count"] = retry_count
        self.details["max_retries"] = max_retries
        self.details["retryable"] = self.is_retryable()

    def is_retryable(self) -> bool:
        return self.retry_count < self.max_retries

    def get_retry_delay(self) -> float:
        """Seconds to wait before the next attempt: 1, 2, 4, ... or 0 when exhausted."""
        if not self.is_retryable():
            return 0.0
        return float(2**self.retry_count)


class ConnectionException(DatabaseException):
    """The database could not be reached. The URL is stored without credentials."""

    default_code = "DATABASE_CONNECTION_ERROR"

    def __init__(
        self,
        message: str = "Database connection failed",
        database_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        retry_count: int = 0,
        max_retries: int = 3,
    ):
        details = {}
        if database_url:
            details["database_url"] = self._sanitize_url(database_url)
        super().__init__(
            message,
            details=details,
            original_error=original_error,
            retry_count=retry_count,
            max_retries=max_retries,
        )

    @staticmethod
    def _sanitize_url(url: str) -> str:
        """Drop user and password from ``url``; host-less URLs pass through."""
        try:
            parsed = urlparse(url)
            if parsed.hostname is None:
                return url
            netloc = parsed.hostname
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
        except (ValueError, AttributeError) as e:
            return f"[URL_PARSE_ERROR: {e}]"

    def is_retryable(self) -> bool:
        """Bad credentials or a missing database will not fix themselves."""
        if not super().is_retryable():
            return False
        reason = str(self.original_error or "").lower()
        return not any(pattern in reason for pattern in NON_RETRYABLE_CONNECTION_ERRORS)


class TransactionException(DatabaseException):
    default_code = "DATABASE_TRANSACTION_ERROR"

    def __init__(
        self,
        message: str = "Database transaction failed",
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message, details=_compact(operation=operation), original_error=original_error
        )


class MigrationException(DatabaseException):
    default_code = "DATABASE_MIGRATION_ERROR"

    def __init__(
        self,
        message: str = "Database migration failed",
        migration_version: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            details=_compact(migration_version=migration_version),
            original_error=original_error,
        )


# Validation errors


class ValidationException(PetClinicException):
    """
    Input failed validation.

    Model setters never raise this; they discard bad values. It is for
    callers that validate explicitly, for example through the schemas.
    """

    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            details=_compact(
                field=field or None,
                value=None if value is None else str(value),
                validation_errors=validation_errors or None,
            ),
        )


class SchemaValidationException(ValidationException):
    default_code = "SCHEMA_VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Schema validation failed",
        schema_name: Optional[str] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, validation_errors=validation_errors)
        if schema_name:
            self.details["schema_name"] = schema_name

    @classmethod
    def from_pydantic(
        cls, error: Any, schema_name: Optional[str] = None
    ) -> "SchemaValidationException":
        """
        Wrap a ``pydantic.ValidationError``.

        Args:
            error: The pydantic error
            schema_name: Defaults to the model name pydantic reports
        """
        return cls(
            schema_name=schema_name or getattr(error, "title", None),
            validation_errors=format_validation_errors(error.errors()),
        )


# Configuration errors


class ConfigurationException(PetClinicException):
    """A setting is missing or unusable. Secret-looking values are redacted."""

    default_code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        details = _compact(config_key=config_key or None)
        if config_value:
            details["config_value"] = self._sanitize_config_value(config_key, config_value)
        super().__init__(message, details=details)

    @staticmethod
    def _sanitize_config_value(key: Optional[str], value: str) -> str:
        if not key or any(word in key.lower() for word in SENSITIVE_CONFIG_KEYS):
            return "[REDACTED]"
        return value


class DatabaseConfigException(ConfigurationException):
    default_code = "DATABASE_CONFIG_ERROR"

    def __init__(
        self,
        message: str = "Database configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        super().__init__(message, config_key, config_value)


# Helpers


def format_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Group pydantic error entries by dotted field path.

    ``value_error`` messages are kept as written, missing fields read
    "This field is required", and anything else gets its type appended.
    """
    formatted: Dict[str, List[str]] = {}

    for error in errors:
        path = ".".join(str(part) for part in error.get("loc", ())) or "root"
        message = error.get("msg", "Validation error")
        error_type = error.get("type", "unknown")

        if error_type == "missing":
            message = "This field is required"
        elif error_type != "value_error":
            message = f"{message} (type: {error_type})"

        formatted.setdefault(path, []).append(message)

    return formatted


def create_error_response(exception: PetClinicException) -> Dict[str, Any]:
    """Render ``exception`` as a ``{"success": False, "error": {...}}`` payload."""
    error: Dict[str, Any] = {
        "type": type(exception).__name__,
        "code": exception.error_code,
        "message": exception.message,
    }
    if exception.details:
        error["details"] = exception.details
    return {"success": False, "error": error}


def handle_database_retry(
    operation_name: str,
    max_retries: int = 3,
    base_delay: float = 1.0,
    logger: Optional[logging.Logger] = None,
):
    """
    Retry an async database operation on retryable ``DatabaseException``s.

    The delay doubles after every failed attempt, starting at ``base_delay``.

    Example:
        >>> @handle_database_retry("find_vets", max_retries=2)
        ... async def load_vets(service):
        ...     return await service.find_vets()
    """
    log = logger or logging.getLogger(__name__)

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except DatabaseException as e:
                    if attempt >= max_retries or not e.is_retryable():
                        log.error(
                            f"'{operation_name}' failed after {attempt + 1} attempt(s)",
                            extra={"exception_data": e.to_dict()},
                        )
                        raise
                    delay = base_delay * (2**attempt)
                    attempt += 1
                    log.warning(
                        f"'{operation_name}' failed (attempt {attempt}/{max_retries + 1}), "
                        f"retrying in {delay}s",
                        extra={"exception_data": e.to_dict()},
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator


def log_exception_context(
    exception: Exception,
    context: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
) -> None:
    """Log any exception together with caller-supplied context."""
    logger = logger or logging.getLogger(__name__)

    if isinstance(exception, PetClinicException):
        data = exception.to_dict()
        data["context"] = context
        logger.log(level, f"Exception with context: {exception.message}", extra={"exception_data": data})
        return

    logger.log(
        level,
        f"Unhandled {type(exception).__name__}: {exception}",
        extra={
            "exception_data": {
                "error_type": type(exception).__name__,
                "message": str(exception),
                "context": context,
            }
        },
    )
