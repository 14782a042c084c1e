"""
Visit model for the petclinic package.
"""

from datetime import date
from typing import Any, Optional

from sqlalchemy import Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..utils.datetime_utils import get_current_date
from .base import BaseModel


class Visit(BaseModel):
    """Dated clinical encounter for one pet. Defaults to today's date."""

    __tablename__ = "visits"

    def __init__(self, **kwargs: Any) -> None:
        if "visit_date" not in kwargs:
            kwargs["visit_date"] = get_current_date()

        super().__init__(**kwargs)

    pet_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"),
        nullable=True,
        comment="Id of the visited pet",
    )

    visit_date: Mapped[date] = mapped_column(
        Date, nullable=False, comment="Date of the visit"
    )

    description: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, comment="Reason for or notes about the visit"
    )

    __table_args__ = (Index("idx_visits_pet_date", "pet_id", "visit_date"),)

    pet = relationship("Pet", back_populates="visits", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Visit(id={self.id}, pet_id={self.pet_id}, date={self.visit_date})>"
