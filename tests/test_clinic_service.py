"""
Integration tests for ClinicService against the seeded clinic database.
"""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from petclinic.exceptions import DatabaseException, EntityNotFoundException
from petclinic.models import Owner, Pet, PetType, Vet, Visit
from petclinic.services import ClinicService
from petclinic.utils import get_by_id


class TestOwnerOperations:
    """Finding and saving owners."""

    async def test_find_owners_by_last_name(self, clinic_service):
        owners = await clinic_service.find_owner_by_last_name("Davis")
        assert len(owners) == 2

        owners = await clinic_service.find_owner_by_last_name("Daviss")
        assert owners == []

    async def test_find_owners_by_last_name_prefix(self, clinic_service):
        owners = await clinic_service.find_owner_by_last_name("Es")
        assert {owner.last_name for owner in owners} == {"Escobito", "Estaban"}

    async def test_find_owners_by_empty_last_name_returns_everyone(self, clinic_service):
        owners = await clinic_service.find_owner_by_last_name("")
        assert len(owners) == 10

    async def test_find_owners_treats_wildcards_literally(self, clinic_service):
        assert await clinic_service.find_owner_by_last_name("%") == []
        assert await clinic_service.find_owner_by_last_name("D_vis") == []

    async def test_find_single_owner_with_pet(self, clinic_service):
        owner = await clinic_service.find_owner_by_id(1)

        assert owner.last_name.startswith("Franklin")
        assert len(owner.pets) == 1
        assert owner.pets[0].type is not None
        assert owner.pets[0].type.name == "cat"

    async def test_find_owner_pets_sorted_by_name(self, clinic_service):
        owner = await clinic_service.find_owner_by_id(3)
        assert [pet.name for pet in owner.pets] == ["Jewel", "Rosy"]

    async def test_find_owner_by_unknown_id(self, clinic_service):
        with pytest.raises(EntityNotFoundException) as exc_info:
            await clinic_service.find_owner_by_id(999)

        assert exc_info.value.entity_type == "Owner"
        assert exc_info.value.entity_id == 999
        assert exc_info.value.error_code == "ENTITY_NOT_FOUND"

    async def test_insert_owner(self, clinic_service, owner_factory):
        found = len(await clinic_service.find_owner_by_last_name("Schultz"))

        owner = owner_factory()
        assert owner.is_new

        saved = await clinic_service.save_owner(owner)

        assert saved is owner
        assert owner.id is not None
        assert owner.id != 0
        assert owner.created_at is not None
        owners = await clinic_service.find_owner_by_last_name("Schultz")
        assert len(owners) == found + 1

    async def test_update_owner(self, clinic_service):
        owner = await clinic_service.find_owner_by_id(1)
        new_last_name = owner.last_name + "X"

        owner.last_name = new_last_name
        await clinic_service.save_owner(owner)

        owner = await clinic_service.find_owner_by_id(1)
        assert owner.last_name == new_last_name

    async def test_save_owner_cascades_to_new_pets(
        self, clinic_service, owner_factory, pet_factory
    ):
        types = await clinic_service.find_pet_types()
        owner = owner_factory()
        pet = pet_factory(type=get_by_id(types, PetType, 2))
        owner.add_pet(pet)

        await clinic_service.save_owner(owner)

        assert pet.id is not None
        assert pet.owner_id == owner.id

    async def test_save_owner_wraps_database_errors(self, clinic_service):
        owner = Owner(first_name="Sam", telephone="4444444444")  # no last name

        with pytest.raises(DatabaseException) as exc_info:
            await clinic_service.save_owner(owner)

        assert isinstance(exc_info.value.original_error, IntegrityError)
        assert exc_info.value.details["entity_type"] == "Owner"


class TestPetOperations:
    """Finding and saving pets and pet types."""

    async def test_find_pet(self, clinic_service):
        types = await clinic_service.find_pet_types()

        pet7 = await clinic_service.find_pet_by_id(7)
        assert pet7.name.startswith("Samantha")
        assert pet7.type.id == get_by_id(types, PetType, 1).id
        assert pet7.owner.first_name == "Jean"

        pet6 = await clinic_service.find_pet_by_id(6)
        assert pet6.name == "George"
        assert pet6.type.id == get_by_id(types, PetType, 4).id
        assert pet6.owner.first_name == "Peter"

    async def test_find_pet_by_unknown_id(self, clinic_service):
        with pytest.raises(EntityNotFoundException):
            await clinic_service.find_pet_by_id(999)

    async def test_find_pet_types(self, clinic_service):
        types = await clinic_service.find_pet_types()

        assert len(types) == 6
        assert get_by_id(types, PetType, 1).name == "cat"
        assert get_by_id(types, PetType, 4).name == "snake"

    async def test_find_pet_types_sorted_by_name(self, clinic_service):
        types = await clinic_service.find_pet_types()
        names = [pet_type.name for pet_type in types]
        assert names == sorted(names)

    async def test_insert_pet_into_database_and_generate_id(
        self, clinic_service, pet_factory
    ):
        owner6 = await clinic_service.find_owner_by_id(6)
        found = len(owner6.pets)

        types = await clinic_service.find_pet_types()
        pet = pet_factory(name="bowser", type=get_by_id(types, PetType, 2))
        owner6.add_pet(pet)
        assert len(owner6.pets) == found + 1

        await clinic_service.save_pet(pet)
        await clinic_service.save_owner(owner6)

        owner6 = await clinic_service.find_owner_by_id(6)
        assert len(owner6.pets) == found + 1
        assert pet.id is not None
        assert owner6.get_pet("bowser") is pet

    async def test_update_pet_name(self, clinic_service):
        pet7 = await clinic_service.find_pet_by_id(7)
        new_name = pet7.name + "X"

        pet7.name = new_name
        await clinic_service.save_pet(pet7)

        pet7 = await clinic_service.find_pet_by_id(7)
        assert pet7.name == new_name

    async def test_save_detached_pet_reattaches(self, session_manager):
        async with session_manager.get_session() as session:
            pet = await ClinicService(session).find_pet_by_id(1)
        pet.name = "Leonardo"

        async with session_manager.get_rollback_scope() as session:
            service = ClinicService(session)
            saved = await service.save_pet(pet)

            assert saved is pet
            assert saved.id == 1
            assert (await service.find_pet_by_id(1)).name == "Leonardo"

    async def test_save_detached_owner_assigns_id_to_new_pet(
        self, session_manager, pet_factory
    ):
        async with session_manager.get_session() as session:
            service = ClinicService(session)
            owner6 = await service.find_owner_by_id(6)
            types = await service.find_pet_types()
        pet = pet_factory(name="bowser", type=get_by_id(types, PetType, 2))
        owner6.add_pet(pet)

        async with session_manager.get_rollback_scope() as session:
            service = ClinicService(session)
            saved = await service.save_owner(owner6)

            assert saved is owner6
            assert pet.id is not None
            assert await service.find_pet_by_id(pet.id) is pet

    async def test_save_detached_owner_already_in_session(
        self, session_manager, pet_factory
    ):
        async with session_manager.get_session() as session:
            service = ClinicService(session)
            detached = await service.find_owner_by_id(6)
            types = await service.find_pet_types()
        pet = pet_factory(name="bowser", type=get_by_id(types, PetType, 2))
        detached.add_pet(pet)

        async with session_manager.get_rollback_scope() as session:
            service = ClinicService(session)
            attached = await service.find_owner_by_id(6)

            saved = await service.save_owner(detached)

            assert saved is attached
            assert pet.id is not None
            assert pet.id in [p.id for p in attached.pets]
            assert (await service.find_pet_by_id(pet.id)).name == "bowser"


class TestVetOperations:
    async def test_find_vets(self, clinic_service):
        vets = await clinic_service.find_vets()
        assert len(vets) == 6

        vet = get_by_id(vets, Vet, 3)
        assert vet.last_name == "Douglas"
        assert vet.nr_of_specialties == 2
        assert vet.specialties[0].name == "dentistry"
        assert vet.specialties[1].name == "surgery"

    async def test_find_vets_sorted_by_name(self, clinic_service):
        vets = await clinic_service.find_vets()
        assert [vet.last_name for vet in vets] == [
            "Carter",
            "Douglas",
            "Jenkins",
            "Leary",
            "Ortega",
            "Stevens",
        ]

    async def test_vets_without_specialties(self, clinic_service):
        vets = await clinic_service.find_vets()
        assert get_by_id(vets, Vet, 1).nr_of_specialties == 0
        assert get_by_id(vets, Vet, 6).specialties == []


class TestVisitOperations:
    async def test_add_new_visit_for_pet(self, clinic_service, visit_factory):
        pet7 = await clinic_service.find_pet_by_id(7)
        found = len(pet7.visits)

        visit = visit_factory(description="test")
        pet7.add_visit(visit)
        await clinic_service.save_visit(visit)
        await clinic_service.save_pet(pet7)

        pet7 = await clinic_service.find_pet_by_id(7)
        assert len(pet7.visits) == found + 1
        assert visit.id is not None
        assert visit.pet_id == 7
        assert visit.visit_date == date.today()

    async def test_find_visits_by_pet_id(self, clinic_service):
        visits = await clinic_service.find_visits_by_pet_id(7)

        assert len(visits) == 2
        assert visits[0].visit_date is not None
        assert all(visit.pet.id == 7 for visit in visits)
        assert [visit.visit_date for visit in visits] == [
            date(2013, 1, 1),
            date(2013, 1, 4),
        ]

    async def test_find_visits_for_pet_without_visits(self, clinic_service):
        assert await clinic_service.find_visits_by_pet_id(1) == []
        assert await clinic_service.find_visits_by_pet_id(999) == []

    async def test_pet_visits_ordered_by_date(self, clinic_service):
        pet8 = await clinic_service.find_pet_by_id(8)
        assert [visit.description for visit in pet8.visits] == ["rabies shot", "neutered"]


class TestTransactionScope:
    async def test_rolled_back_changes_are_not_visible(self, session_manager, owner_factory):
        async with session_manager.get_rollback_scope() as session:
            await ClinicService(session).save_owner(owner_factory())

        async with session_manager.get_session() as session:
            owners = await ClinicService(session).find_owner_by_last_name("Schultz")
            assert owners == []

    async def test_committed_changes_are_visible(self, session_manager, owner_factory):
        async with session_manager.get_transaction() as session:
            owner = await ClinicService(session).save_owner(owner_factory())
            owner_id = owner.id

        async with session_manager.get_session() as session:
            found = await ClinicService(session).find_owner_by_id(owner_id)
            assert found.last_name == "Schultz"
