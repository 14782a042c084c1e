"""
Vet and Specialty models for the petclinic package.

Vets and specialties are linked many-to-many through the ``vet_specialties``
association table. Specialties are shared reference data.
"""

from typing import Any, List

from sqlalchemy import Column, ForeignKey, Table
from sqlalchemy.orm import relationship

from .base import Base, BaseModel, NamedEntity, Person

vet_specialties = Table(
    "vet_specialties",
    Base.metadata,
    Column("vet_id", ForeignKey("vets.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "specialty_id",
        ForeignKey("specialties.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Specialty(NamedEntity, BaseModel):
    """Medical specialty a vet can hold (radiology, surgery, ...)."""

    __tablename__ = "specialties"

    def __repr__(self) -> str:
        return f"<Specialty(id={self.id}, name='{self.name}')>"


class Vet(Person, BaseModel):
    """Veterinarian with a set of specialties, kept sorted by name."""

    __tablename__ = "vets"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize Vet with no specialties."""
        if "specialties" not in kwargs:
            kwargs["specialties"] = []

        super().__init__(**kwargs)

    specialties = relationship(
        "Specialty",
        secondary=vet_specialties,
        order_by="Specialty.name",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Vet(id={self.id}, name='{self.full_name}')>"

    @property
    def nr_of_specialties(self) -> int:
        """Number of specialties this vet holds."""
        return len(self.specialties)

    @property
    def sorted_specialties(self) -> List[Specialty]:
        """Specialties sorted by name, including ones added since loading."""
        return sorted(self.specialties, key=lambda specialty: specialty.name or "")

    def add_specialty(self, specialty: Specialty) -> None:
        """
        Add a specialty, ignoring duplicates.

        Args:
            specialty: Specialty to add
        """
        if specialty not in self.specialties:
            self.specialties.append(specialty)
