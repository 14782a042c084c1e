"""
Owner model for the petclinic package.

An owner is a clinic customer. Owners exclusively own their pets: saving or
deleting an owner cascades to its pets.
"""

from typing import Any, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from ..utils.validation import validate_first_name, validate_telephone
from .base import BaseModel, Person


class Owner(Person, BaseModel):
    """
    Clinic customer with contact details and an ordered list of pets.

    ``first_name`` and ``telephone`` are guarded: an invalid value is
    discarded and the previously stored value stays in place. ``telephone``
    may be cleared with None.

    Example:
        >>> owner = Owner(first_name="Jonah", telephone="01580123123")
        >>> owner.first_name = "wdi2"
        >>> owner.first_name
        'Jonah'
    """

    __tablename__ = "owners"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize Owner with an empty pet list."""
        if "pets" not in kwargs:
            kwargs["pets"] = []

        super().__init__(**kwargs)

    address: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, comment="Street address"
    )

    city: Mapped[Optional[str]] = mapped_column(
        String(80), nullable=True, comment="City"
    )

    telephone: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True, comment="Digits-only telephone number"
    )

    # Relationships
    pets = relationship(
        "Pet",
        back_populates="owner",
        cascade="all, delete-orphan",
        order_by="Pet.name",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        """String representation of the Owner model."""
        return f"<Owner(id={self.id}, name='{self.full_name}')>"

    @validates("first_name")
    def _validate_first_name(self, key: str, value: Optional[str]) -> Optional[str]:
        result = validate_first_name(value)
        if not result.is_valid:
            return self._reject_value(key, result.first_error)
        return value

    @validates("telephone")
    def _validate_telephone(self, key: str, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        result = validate_telephone(value)
        if not result.is_valid:
            return self._reject_value(key, result.first_error)
        return value

    def add_pet(self, pet: "Pet") -> None:  # noqa: F821
        """
        Attach a pet to this owner.

        New pets are appended to the pet list; the pet's ``owner`` is set in
        every case.

        Args:
            pet: Pet to attach
        """
        if pet.is_new and pet not in self.pets:
            self.pets.append(pet)
        pet.owner = self

    def get_pet(self, name: str, ignore_new: bool = False) -> Optional["Pet"]:  # noqa: F821
        """
        Find one of this owner's pets by name, ignoring case.

        Args:
            name: Pet name to look for
            ignore_new: Skip pets that have not been persisted yet

        Returns:
            The matching pet, or None
        """
        wanted = name.lower()
        for pet in self.pets:
            if ignore_new and pet.is_new:
                continue
            if pet.name and pet.name.lower() == wanted:
                return pet
        return None

    @property
    def pet_count(self) -> int:
        """Number of pets attached to this owner."""
        return len(self.pets)
