"""
Clinic service facade.

``ClinicService`` is the single entry point for finding and saving owners,
pets, vets and visits. It receives its ``AsyncSession`` from the caller and
never commits: saves flush so that new records get their identifiers, and the
caller's transaction scope decides whether the changes are kept.
"""

import logging
from typing import Any, List, Optional, Set, Type, TypeVar

from sqlalchemy import inspect, select
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import DatabaseException, EntityNotFoundException
from ..models import BaseModel, Owner, Pet, PetType, Vet, Visit

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _escape_like(value: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so the value only matches literally."""
    return (
        value.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )


class ClinicService:
    """
    Find and save operations for the clinic's records.

    Args:
        session: Session the operations run in. Its transaction scope is
            owned by the caller.

    Example:
        >>> async with session_manager.get_transaction() as session:
        ...     service = ClinicService(session)
        ...     owners = await service.find_owner_by_last_name("Davis")
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # Owners

    async def find_owner_by_last_name(self, last_name: str) -> List[Owner]:
        """
        Find owners whose last name starts with ``last_name``.

        Returns:
            Matching owners with their pets loaded, ordered by last then
            first name. Empty when nothing matches.
        """
        stmt = (
            select(Owner)
            .where(Owner.last_name.like(f"{_escape_like(last_name)}%", escape="\\"))
            .order_by(Owner.last_name, Owner.first_name, Owner.id)
        )
        result = await self.session.execute(stmt)
        owners = list(result.scalars().all())
        logger.debug(f"Found {len(owners)} owner(s) with last name '{last_name}'")
        return owners

    async def find_owner_by_id(self, owner_id: int) -> Owner:
        """
        Raises:
            EntityNotFoundException: If there is no owner with that id
        """
        return await self._find_by_id(Owner, owner_id)

    async def save_owner(self, owner: Owner) -> Owner:
        """
        Insert a new owner or update an existing one, cascading to its pets.

        A new owner has its ``id`` assigned when this returns.
        """
        return await self._save(owner)

    # Pets

    async def find_pet_by_id(self, pet_id: int) -> Pet:
        """
        Raises:
            EntityNotFoundException: If there is no pet with that id
        """
        return await self._find_by_id(Pet, pet_id)

    async def find_pet_types(self) -> List[PetType]:
        """All pet types ordered by name."""
        result = await self.session.execute(select(PetType).order_by(PetType.name))
        return list(result.scalars().all())

    async def save_pet(self, pet: Pet) -> Pet:
        """Insert a new pet or update an existing one, cascading to its visits."""
        return await self._save(pet)

    # Vets

    async def find_vets(self) -> List[Vet]:
        """All vets with their specialties, ordered by last then first name."""
        result = await self.session.execute(
            select(Vet).order_by(Vet.last_name, Vet.first_name, Vet.id)
        )
        return list(result.scalars().all())

    # Visits

    async def find_visits_by_pet_id(self, pet_id: int) -> List[Visit]:
        """
        Visits of one pet, oldest first.

        Unknown pet ids give an empty list.
        """
        result = await self.session.execute(
            select(Visit)
            .where(Visit.pet_id == pet_id)
            .order_by(Visit.visit_date, Visit.id)
        )
        return list(result.scalars().all())

    async def save_visit(self, visit: Visit) -> Visit:
        return await self._save(visit)

    # Internals

    async def _find_by_id(self, model: Type[T], entity_id: int) -> T:
        result = await self.session.execute(select(model).where(model.id == entity_id))
        entity = result.scalar_one_or_none()
        if entity is None:
            logger.warning(f"{model.__name__} with id {entity_id} not found")
            raise EntityNotFoundException(model.__name__, entity_id)
        return entity

    async def _save(self, entity: T) -> T:
        """
        Add ``entity`` (and whatever it cascades to) to the session and flush.

        Detached entities are re-attached so the caller's objects receive the
        generated ids. If the session already holds another instance with the
        same identity, ``entity`` is merged into it instead; the session's copy
        is returned and new ids are copied back onto the caller's objects.
        """
        name = entity.__class__.__name__
        try:
            merged = None
            try:
                self.session.add(entity)
            except InvalidRequestError:
                logger.debug(f"{name} {entity.id} already in session, merging")
                merged = await self.session.merge(entity)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to save {name}: {e}")
            raise DatabaseException(
                f"Failed to save {name}",
                details={"entity_type": name, "entity_id": entity.id},
                original_error=e,
            )

        if merged is None:
            saved = entity
        else:
            _copy_generated_ids(entity, merged)
            saved = merged
        logger.debug(f"Saved {name} with id {saved.id}")
        return saved


def _copy_generated_ids(source: Any, merged: Any, seen: Optional[Set[int]] = None) -> None:
    """Give unsaved objects in ``source``'s graph the ids their merged copies got."""
    seen = set() if seen is None else seen
    if source is None or merged is None or id(source) in seen:
        return
    seen.add(id(source))

    if source.id is None:
        source.id = merged.id

    for rel in inspect(type(source)).relationships:
        if "merge" not in rel.cascade:
            continue
        source_value = source.__dict__.get(rel.key)
        merged_value = merged.__dict__.get(rel.key)
        if rel.uselist:
            # merge keeps collection order
            for item, merged_item in zip(source_value or [], merged_value or []):
                _copy_generated_ids(item, merged_item, seen)
        else:
            _copy_generated_ids(source_value, merged_value, seen)
