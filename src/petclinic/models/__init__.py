"""
Database models for the petclinic package.

This module contains SQLAlchemy models for all entities of the clinic:
owners and their pets, pet types, visits, vets and their specialties.
"""

# Base model will be imported by all other models
from .base import Base, BaseModel, NamedEntity, Person

# Core entity models
from .owner import Owner
from .pet import Pet, PetType
from .vet import Specialty, Vet, vet_specialties
from .visit import Visit

__all__ = [
    "Base",
    "BaseModel",
    "NamedEntity",
    "Person",
    "Owner",
    "Pet",
    "PetType",
    "Vet",
    "Specialty",
    "vet_specialties",
    "Visit",
]
