"""
Field rules for clinic records.

Each ``validate_*`` function returns a ``ValidationResult`` instead of
raising, so the same rule can back both the model setters (which discard a
bad value) and the Pydantic schemas (which reject the input).
"""

import re
import unicodedata
from datetime import date
from typing import Any, Dict, Generic, List, Optional, TypeVar

from .datetime_utils import get_current_date

T = TypeVar("T")

# One or more letter groups joined by a single space or hyphen
NAME_PATTERN = re.compile(r"^[^\W\d_]+(?:[ \-][^\W\d_]+)*$")
NAME_MAX_LENGTH = 30

TELEPHONE_PATTERN = re.compile(r"^\d+$")
TELEPHONE_MIN_DIGITS = 5
TELEPHONE_MAX_DIGITS = 15

EARLIEST_BIRTH_DATE = date(1900, 1, 1)


class ValidationError(Exception):
    """A single failed rule: message, the field it concerns and a short code."""

    def __init__(
        self, message: str, field: Optional[str] = None, code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "field": self.field, "code": self.code}


class ValidationResult(Generic[T]):
    """The accepted value, or the errors explaining why there is none."""

    def __init__(
        self, value: Optional[T] = None, errors: Optional[List[ValidationError]] = None
    ):
        self.value = value
        self.errors = errors or []

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None

    def add_error(self, error: ValidationError) -> None:
        self.errors.append(error)

    @classmethod
    def ok(cls, value: T) -> "ValidationResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, message: str, field: str, code: str) -> "ValidationResult[T]":
        return cls(errors=[ValidationError(message, field, code)])


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def sanitize_string(value: str, max_length: Optional[int] = None) -> str:
    """NFKC-normalize, trim, collapse runs of whitespace and cut to ``max_length``."""
    cleaned = re.sub(r"\s+", " ", unicodedata.normalize("NFKC", value).strip())
    if max_length and len(cleaned) > max_length:
        cleaned = cleaned[:max_length].rstrip()
    return cleaned


def validate_first_name(name: Optional[str]) -> ValidationResult[str]:
    """
    Letters only, at most ``NAME_MAX_LENGTH`` characters.

    Letter groups may be joined by one space or hyphen ("Mary Ann",
    "Jean-Luc"); any letter script counts ("Zoë").
    """
    if _is_blank(name):
        return ValidationResult.fail("First name is required", "first_name", "required")
    if len(name) > NAME_MAX_LENGTH:
        return ValidationResult.fail(
            f"First name cannot exceed {NAME_MAX_LENGTH} characters",
            "first_name",
            "too_long",
        )
    if not NAME_PATTERN.match(name):
        return ValidationResult.fail(
            "First name may only contain letters", "first_name", "invalid_format"
        )
    return ValidationResult.ok(name)


def validate_telephone(telephone: Optional[str]) -> ValidationResult[str]:
    """Digits only, between ``TELEPHONE_MIN_DIGITS`` and ``TELEPHONE_MAX_DIGITS`` of them."""
    if not isinstance(telephone, str) or not telephone:
        return ValidationResult.fail("Telephone is required", "telephone", "required")
    if not TELEPHONE_PATTERN.match(telephone):
        return ValidationResult.fail(
            "Telephone may only contain digits", "telephone", "invalid_format"
        )
    if not TELEPHONE_MIN_DIGITS <= len(telephone) <= TELEPHONE_MAX_DIGITS:
        return ValidationResult.fail(
            f"Telephone must have between {TELEPHONE_MIN_DIGITS} and "
            f"{TELEPHONE_MAX_DIGITS} digits",
            "telephone",
            "invalid_length",
        )
    return ValidationResult.ok(telephone)


def validate_birth_date(
    birth_date: Optional[date], today: Optional[date] = None
) -> ValidationResult[date]:
    """
    Between ``EARLIEST_BIRTH_DATE`` and ``today`` inclusive.

    Args:
        birth_date: Date to check
        today: Upper bound; ``get_current_date()`` when omitted
    """
    if not isinstance(birth_date, date):
        return ValidationResult.fail("Birth date is required", "birth_date", "required")
    if birth_date > (today or get_current_date()):
        return ValidationResult.fail(
            "Birth date cannot be in the future", "birth_date", "future_date"
        )
    if birth_date < EARLIEST_BIRTH_DATE:
        return ValidationResult.fail(
            f"Birth date cannot be before {EARLIEST_BIRTH_DATE.isoformat()}",
            "birth_date",
            "too_old",
        )
    return ValidationResult.ok(birth_date)


def validate_required(value: Any, field_name: str) -> ValidationResult[Any]:
    """Reject None and blank strings; the message uses the title-cased field name."""
    if value is None or (isinstance(value, str) and not value.strip()):
        label = field_name.replace("_", " ").title()
        return ValidationResult.fail(f"{label} is required", field_name, "required")
    return ValidationResult.ok(value)


class ErrorMessageFormatter:
    @staticmethod
    def format_errors(errors: List[ValidationError]) -> Dict[str, List[str]]:
        """Messages grouped by field; errors without a field go under ``general``."""
        grouped: Dict[str, List[str]] = {}
        for error in errors:
            grouped.setdefault(error.field or "general", []).append(error.message)
        return grouped

    @staticmethod
    def format_single_error(error: ValidationError) -> str:
        return f"{error.field}: {error.message}" if error.field else error.message
