"""Unit tests for consultation notes and their visibility rules."""

import pytest

from wellness_clinic.core.exceptions import (
    NotFoundError,
    PermissionDenied,
    ValidationError,
)
from wellness_clinic.schemas.dtos import ConsultationNoteRequest


@pytest.fixture
def records_service(services):
    return services["records"]


@pytest.mark.unit
@pytest.mark.services
class TestAddNote:
    def test_doctor_adds_note(self, records_service):
        note = records_service.add_note(
            "doctor",
            "doc-1",
            ConsultationNoteRequest(
                patient_id="patient-4",
                notes="  Reports better sleep.  ",
                diagnosis="Improving",
            ),
        )

        assert note.notes == "Reports better sleep."
        assert note.doctor_id == "doc-1"
        assert note in records_service.visible_notes("doctor", "patient-4")

    @pytest.mark.parametrize("role", ["admin", "staff", "patient"])
    def test_only_doctors_add_notes(self, records_service, role):
        with pytest.raises(PermissionDenied):
            records_service.add_note(
                role, "doc-1", ConsultationNoteRequest("patient-1", "Note")
            )

    def test_empty_note(self, records_service):
        with pytest.raises(ValidationError):
            records_service.add_note(
                "doctor", "doc-1", ConsultationNoteRequest("patient-1", "   ")
            )

    def test_unknown_patient(self, records_service):
        with pytest.raises(NotFoundError):
            records_service.add_note(
                "doctor", "doc-1", ConsultationNoteRequest("patient-99", "Note")
            )

    def test_unknown_appointment(self, records_service):
        with pytest.raises(NotFoundError):
            records_service.add_note(
                "doctor",
                "doc-1",
                ConsultationNoteRequest("patient-1", "Note", appointment_id="apt-99"),
            )


@pytest.mark.unit
@pytest.mark.services
class TestVisibleNotes:
    def test_doctor_sees_all_newest_first(self, records_service):
        assert [n.id for n in records_service.visible_notes("doctor")] == [
            "note-1",
            "note-2",
        ]

    def test_admin_sees_all(self, records_service):
        assert len(records_service.visible_notes("admin")) == 2

    def test_patient_sees_only_own(self, records_service):
        notes = records_service.visible_notes("patient", "patient-3")

        assert [n.id for n in notes] == ["note-1"]

    def test_patient_must_identify(self, records_service):
        with pytest.raises(PermissionDenied):
            records_service.visible_notes("patient")

    def test_staff_sees_none(self, records_service):
        assert records_service.visible_notes("staff") == []

    def test_unknown_role(self, records_service):
        with pytest.raises(ValidationError):
            records_service.visible_notes("nurse")
