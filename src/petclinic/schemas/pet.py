"""
Pet Pydantic schemas for API validation and serialization.

This module contains Pydantic schemas for Pet and PetType, including create,
update, and response schemas.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.validation import sanitize_string, validate_birth_date
from .visit import VisitResponse


class PetTypeResponse(BaseModel):
    """Schema for pet type responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class PetBase(BaseModel):
    """Base pet schema with common fields."""

    name: str = Field(..., min_length=1, max_length=80, description="Pet's name")
    birth_date: Optional[date] = Field(None, description="Pet's birth date")
    type_id: Optional[int] = Field(None, gt=0, description="Id of the pet's type")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate pet name."""
        v = sanitize_string(v)
        if not v:
            raise ValueError("Pet name is required")
        return v

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: Optional[date]) -> Optional[date]:
        """Birth date must be between 1900-01-01 and today."""
        if v is None:
            return v
        result = validate_birth_date(v)
        if not result.is_valid:
            raise ValueError(result.first_error)
        return v


class PetCreate(PetBase):
    """Schema for creating a new pet."""

    owner_id: Optional[int] = Field(None, gt=0, description="Id of the pet's owner")


class PetUpdate(BaseModel):
    """Schema for updating an existing pet."""

    name: Optional[str] = Field(None, min_length=1, max_length=80)
    birth_date: Optional[date] = None
    type_id: Optional[int] = Field(None, gt=0)

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: Optional[date]) -> Optional[date]:
        if v is None:
            return v
        result = validate_birth_date(v)
        if not result.is_valid:
            raise ValueError(result.first_error)
        return v


class PetResponse(BaseModel):
    """Schema for pet responses, including type and visit history."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    birth_date: Optional[date] = None
    type: Optional[PetTypeResponse] = None
    owner_id: Optional[int] = None
    visits: List[VisitResponse] = Field(default_factory=list)
