"""
Helpers for working with collections of loaded entities.
"""

from typing import Iterable, Type, TypeVar

from ..exceptions import EntityNotFoundException

T = TypeVar("T")


def get_by_id(entities: Iterable[object], entity_type: Type[T], entity_id: int) -> T:
    """
    Look up an entity by type and id in a collection.

    Args:
        entities: Collection to search
        entity_type: Class the entity must be an instance of
        entity_id: Identifier to match

    Returns:
        The matching entity

    Raises:
        EntityNotFoundException: If no entity of that type has that id
    """
    for entity in entities:
        if isinstance(entity, entity_type) and getattr(entity, "id", None) == entity_id:
            return entity
    raise EntityNotFoundException(entity_type.__name__, entity_id)
