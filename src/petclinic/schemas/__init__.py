"""
Pydantic schemas for data validation and serialization.

This module contains Pydantic schemas for request validation and response
serialization of clinic records.
"""

from .owner import OwnerCreate, OwnerListResponse, OwnerResponse, OwnerUpdate
from .pet import PetCreate, PetResponse, PetTypeResponse, PetUpdate
from .vet import SpecialtyResponse, VetListResponse, VetResponse
from .visit import VisitCreate, VisitResponse

__all__ = [
    # Owner schemas
    "OwnerCreate",
    "OwnerUpdate",
    "OwnerResponse",
    "OwnerListResponse",
    # Pet schemas
    "PetCreate",
    "PetUpdate",
    "PetResponse",
    "PetTypeResponse",
    # Vet schemas
    "VetResponse",
    "VetListResponse",
    "SpecialtyResponse",
    # Visit schemas
    "VisitCreate",
    "VisitResponse",
]
