"""
Tests for the Vet and Specialty models.
"""

from petclinic.models import Specialty, Vet


class TestVetModel:
    def test_new_vet_has_no_specialties(self):
        vet = Vet(first_name="James", last_name="Carter")

        assert vet.specialties == []
        assert vet.nr_of_specialties == 0

    def test_add_specialty_ignores_duplicates(self):
        vet = Vet(first_name="Linda", last_name="Douglas")
        surgery = Specialty(name="surgery")

        vet.add_specialty(surgery)
        vet.add_specialty(surgery)

        assert vet.nr_of_specialties == 1

    def test_sorted_specialties(self):
        vet = Vet(first_name="Linda", last_name="Douglas")
        vet.add_specialty(Specialty(name="surgery"))
        vet.add_specialty(Specialty(name="dentistry"))

        assert [s.name for s in vet.sorted_specialties] == ["dentistry", "surgery"]

    def test_full_name_and_repr(self):
        vet = Vet(first_name="Helen", last_name="Leary")

        assert vet.full_name == "Helen Leary"
        assert repr(vet) == "<Vet(id=None, name='Helen Leary')>"

    async def test_specialties_loaded_sorted(self, clinic_service):
        vets = await clinic_service.find_vets()
        douglas = next(vet for vet in vets if vet.last_name == "Douglas")

        assert [s.name for s in douglas.specialties] == ["dentistry", "surgery"]
        assert str(douglas.specialties[0]) == "dentistry"
