"""Unit tests for patient registration, search and membership changes."""

from datetime import date

import pytest

from wellness_clinic.core.exceptions import NotFoundError, ValidationError
from wellness_clinic.domain.entities import MembershipTier
from wellness_clinic.schemas.dtos import PatientRegistrationRequest
from wellness_clinic.services.patient_service import PatientService
from tests.factories.repository_factories import ReaderFactory, make_patient


@pytest.fixture
def patient_service(services) -> PatientService:
    return services["patients"]


def registration(**overrides) -> PatientRegistrationRequest:
    fields = dict(
        first_name="Ava",
        last_name="Green",
        email="Ava.Green@Example.com",
        phone="+44 7800 100009",
        date_of_birth="1992-04-01",
        gender="female",
        membership_tier="silver",
        membership_expiry="2027-01-01",
    )
    fields.update(overrides)
    return PatientRegistrationRequest(**fields)


@pytest.mark.unit
@pytest.mark.services
class TestRegister:
    def test_register_creates_patient(self, patient_service):
        patient = patient_service.register(registration())

        assert patient.id.startswith("patient-")
        assert patient.email == "ava.green@example.com"
        assert patient.date_of_birth == date(1992, 4, 1)
        assert patient.membership_tier == MembershipTier.SILVER
        assert patient_service.get(patient.id) == patient

    @pytest.mark.parametrize(
        "field,value",
        [
            ("first_name", ""),
            ("last_name", "  "),
            ("email", ""),
            ("email", "no-at-sign"),
            ("gender", "unknown"),
            ("membership_tier", "bronze"),
            ("date_of_birth", "01/04/1992"),
        ],
    )
    def test_invalid_registration(self, patient_service, field, value):
        with pytest.raises(ValidationError) as exc_info:
            patient_service.register(registration(**{field: value}))

        assert exc_info.value.field == field

    def test_duplicate_email(self, patient_service):
        with pytest.raises(ValidationError):
            patient_service.register(registration(email="emma.johnson@email.com"))

    def test_register_with_mocked_repository(self):
        repo = ReaderFactory.patients()
        service = PatientService(repo)

        service.register(registration(membership_tier="none", membership_expiry=None))

        repo.create.assert_called_once()


@pytest.mark.unit
@pytest.mark.services
class TestLookup:
    def test_get_unknown(self, patient_service):
        with pytest.raises(NotFoundError):
            patient_service.get("patient-99")

    def test_search_by_name(self, patient_service):
        assert [p.id for p in patient_service.search("emma")] == ["patient-1"]

    def test_search_by_membership(self, patient_service):
        assert [p.id for p in patient_service.search(membership="platinum")] == [
            "patient-2"
        ]

    def test_search_sorted_by_last_name(self):
        service = PatientService(
            ReaderFactory.patients(
                make_patient(id="p-1", last_name="Young"),
                make_patient(id="p-2", last_name="Adams"),
            )
        )

        assert [p.id for p in service.search()] == ["p-2", "p-1"]

    def test_search_unknown_membership(self, patient_service):
        with pytest.raises(ValidationError):
            patient_service.search(membership="bronze")


@pytest.mark.unit
@pytest.mark.services
class TestUpdateMembership:
    def test_upgrade(self, patient_service):
        patient = patient_service.update_membership("patient-4", "gold", "2027-01-31")

        assert patient.membership_tier == MembershipTier.GOLD
        assert patient.membership_expiry == date(2027, 1, 31)
        assert patient_service.get("patient-4").membership_tier == MembershipTier.GOLD

    def test_downgrade_to_none_clears_expiry(self, patient_service):
        patient = patient_service.update_membership("patient-1", "none", "2027-01-31")

        assert patient.membership_expiry is None

    def test_new_tier_changes_future_bills(self, services):
        services["patients"].update_membership("patient-4", "platinum")

        bill = services["billing"].bill_appointment("apt-4")

        # 85 - 15% = 72.25, +8% tax
        assert str(bill.final_amount) == "78.03"

    def test_unknown_tier(self, patient_service):
        with pytest.raises(ValidationError):
            patient_service.update_membership("patient-1", "bronze")
