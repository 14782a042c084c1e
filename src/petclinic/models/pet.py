"""
Pet and PetType models for the petclinic package.

This module contains the Pet SQLAlchemy model with its owner, type and
visit relationships, and the PetType reference entity.
"""

from datetime import date
from typing import Any, Optional

from sqlalchemy import Date, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from ..utils.datetime_utils import calculate_pet_age, get_current_date
from ..utils.validation import validate_birth_date
from .base import BaseModel, NamedEntity


class PetType(NamedEntity, BaseModel):
    """Kind of animal (cat, dog, lizard, ...). Shared reference data."""

    __tablename__ = "types"

    def __repr__(self) -> str:
        return f"<PetType(id={self.id}, name='{self.name}')>"


class Pet(NamedEntity, BaseModel):
    """
    Pet belonging to one owner, typed by a PetType, with a visit history.

    ``birth_date`` is guarded: dates before 1900 or after today are
    discarded and the previously stored value stays in place. None clears it.
    """

    __tablename__ = "pets"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize Pet with an empty visit history."""
        if "visits" not in kwargs:
            kwargs["visits"] = []

        super().__init__(**kwargs)

    birth_date: Mapped[Optional[date]] = mapped_column(
        Date, nullable=True, comment="Pet's birth date"
    )

    type_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("types.id"),
        nullable=True,
        comment="Id of the pet's type",
    )

    owner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("owners.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        comment="Id of the pet's owner",
    )

    __table_args__ = (Index("idx_pets_owner_name", "owner_id", "name"),)

    # Relationships
    type = relationship("PetType", lazy="selectin")
    owner = relationship("Owner", back_populates="pets", lazy="selectin")
    visits = relationship(
        "Visit",
        back_populates="pet",
        cascade="all, delete-orphan",
        order_by="Visit.visit_date",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation of the Pet model."""
        return f"<Pet(id={self.id}, name='{self.name}', owner_id={self.owner_id})>"

    @validates("birth_date")
    def _validate_birth_date(self, key: str, value: Optional[date]) -> Optional[date]:
        if value is None:
            return None
        result = validate_birth_date(value, today=get_current_date())
        if not result.is_valid:
            return self._reject_value(key, result.first_error)
        return value

    def add_visit(self, visit: "Visit") -> None:  # noqa: F821
        """
        Attach a visit to this pet.

        Args:
            visit: Visit to record against this pet
        """
        if visit not in self.visits:
            self.visits.append(visit)
        visit.pet = self

    @property
    def age_in_years(self) -> Optional[int]:
        """Pet's age in whole years, or None without a birth date."""
        if self.birth_date is None:
            return None
        return calculate_pet_age(self.birth_date)["years"]
