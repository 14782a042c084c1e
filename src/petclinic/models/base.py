"""
Base model classes for all SQLAlchemy models in the petclinic package.

This module provides the foundational base model class that all entities
inherit from, including the store-assigned integer identifier, audit
timestamps, and common utility methods. It also provides the two column
mixins shared by several entities:

- ``NamedEntity`` for reference data with a single ``name`` (pet types,
  specialties) and for pets
- ``Person`` for records carrying a first and last name (owners, vets)

Example:
    >>> from petclinic.models import Owner
    >>> owner = Owner(first_name="George", last_name="Franklin")
    >>> owner.is_new  # True until the store assigns an id
    True
    >>> owner.to_dict()["last_name"]
    'Franklin'
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..utils.datetime_utils import get_current_utc

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base; ``Base.metadata`` holds every clinic table."""


class BaseModel(Base):
    """
    Columns and helpers shared by every clinic entity.

    - **Integer Primary Keys**: assigned by the store on first flush, stable afterwards
    - **Audit Fields**: creation and modification timestamps (UTC)
    - **Utility Methods**: dictionary conversion and bulk field updates

    Attributes:
        id (int): Primary key, ``None`` until the entity is persisted
        created_at (datetime): Timestamp when record was created (UTC)
        updated_at (datetime): Timestamp when record was last updated (UTC)

    Concrete models set ``__tablename__``.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Audit fields. Set on the Python side so they are readable right after a
    # flush without another round trip.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
        onupdate=get_current_utc,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"

    @property
    def is_new(self) -> bool:
        """True until the store has assigned an identifier."""
        return self.id is None

    def to_dict(self) -> Dict[str, Any]:
        """
        Column values keyed by attribute name.

        Dates and datetimes are converted to ISO format strings; other
        column values are returned unchanged. Relationships are not included.

        Returns:
            Dictionary with column names as keys and serialized values.
        """
        result = {}
        for column in self.__table__.columns:
            value = self.__dict__.get(column.key)
            if isinstance(value, (datetime, date)):
                result[column.key] = value.isoformat()
            else:
                result[column.key] = value
        return result

    @classmethod
    def get_table_name(cls) -> str:
        """Get the database table name for this model."""
        return cls.__tablename__

    def update_fields(self, **kwargs) -> None:
        """
        Assign several attributes at once.

        Field validators still apply, so rejected values are left unchanged.

        Args:
            **kwargs: Field names as keys and new values as values.

        Raises:
            AttributeError: If any field name doesn't exist on the model.
        """
        for field, value in kwargs.items():
            if hasattr(self, field):
                setattr(self, field, value)
            else:
                raise AttributeError(
                    f"'{self.__class__.__name__}' has no attribute '{field}'"
                )

    def _reject_value(self, key: str, reason: Optional[str]) -> Any:
        """
        Keep the currently stored value of ``key`` in place of a rejected one.

        Used by ``@validates`` hooks: returning the current value leaves the
        attribute untouched (``None`` if it was never set).
        """
        logger.warning(
            f"Rejected value for {self.__class__.__name__}.{key}: {reason}"
        )
        return self.__dict__.get(key)


class NamedEntity:
    """Mixin for entities identified to users by a name."""

    name: Mapped[str] = mapped_column(String(80), nullable=False)

    def __str__(self) -> str:
        return self.name or ""


class Person:
    """Mixin for entities that represent a person."""

    first_name: Mapped[str] = mapped_column(String(30), nullable=False)
    last_name: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    @property
    def full_name(self) -> str:
        """First and last name joined by a space, skipping missing parts."""
        return " ".join(part for part in (self.first_name, self.last_name) if part)
