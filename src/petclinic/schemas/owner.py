"""
Owner Pydantic schemas for API validation and serialization.

This module contains Pydantic schemas for Owner validation, including
create, update, and response schemas. The field rules are the same ones the
Owner model applies silently; here invalid input is reported.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.validation import sanitize_string, validate_first_name, validate_telephone
from .pet import PetResponse


def _check_first_name(v: str) -> str:
    result = validate_first_name(v)
    if not result.is_valid:
        raise ValueError(result.first_error)
    return v


def _check_telephone(v: str) -> str:
    result = validate_telephone(v)
    if not result.is_valid:
        raise ValueError(result.first_error)
    return v


class OwnerBase(BaseModel):
    """Base owner schema with common fields."""

    first_name: str = Field(..., max_length=30, description="Owner's first name")
    last_name: str = Field(..., min_length=1, max_length=30, description="Owner's last name")
    address: Optional[str] = Field(None, max_length=255, description="Street address")
    city: Optional[str] = Field(None, max_length=80, description="City")
    telephone: Optional[str] = Field(None, description="Digits-only telephone number")

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: str) -> str:
        """Letters only, groups joined by a single space or hyphen."""
        return _check_first_name(v)

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: str) -> str:
        v = sanitize_string(v)
        if not v:
            raise ValueError("Last name is required")
        return v

    @field_validator("telephone")
    @classmethod
    def validate_telephone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_telephone(v)

    @field_validator("address", "city")
    @classmethod
    def validate_text_fields(cls, v: Optional[str]) -> Optional[str]:
        """Normalize whitespace; blank values become None."""
        if v is None:
            return v
        return sanitize_string(v) or None


class OwnerCreate(OwnerBase):
    """Schema for creating a new owner."""


class OwnerUpdate(BaseModel):
    """Schema for updating an existing owner. Every field is optional."""

    first_name: Optional[str] = Field(None, max_length=30)
    last_name: Optional[str] = Field(None, min_length=1, max_length=30)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=80)
    telephone: Optional[str] = None

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_first_name(v)

    @field_validator("telephone")
    @classmethod
    def validate_telephone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _check_telephone(v)


class OwnerResponse(BaseModel):
    """Schema for owner responses, including the owner's pets."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: Optional[str]
    last_name: str
    address: Optional[str] = None
    city: Optional[str] = None
    telephone: Optional[str] = None
    pets: List[PetResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OwnerListResponse(BaseModel):
    """Schema for owner search results."""

    owners: List[OwnerResponse]
    total: int = Field(..., ge=0, description="Number of owners found")
