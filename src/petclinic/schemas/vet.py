"""
Vet Pydantic schemas for serialization.

Vets are read-only reference data, so only response schemas exist.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class SpecialtyResponse(BaseModel):
    """Schema for specialty responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class VetResponse(BaseModel):
    """Schema for vet responses with specialties sorted by name."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    specialties: List[SpecialtyResponse] = Field(default_factory=list)
    nr_of_specialties: int = 0


class VetListResponse(BaseModel):
    """Schema for the list of all vets."""

    vets: List[VetResponse]
    total: int = Field(..., ge=0)
