"""Consultation notes and who may read them."""

import logging
from typing import List, Optional

from wellness_clinic.core.exceptions import NotFoundError, PermissionDenied
from wellness_clinic.core.permissions import (
    RoleLike,
    can_add_consultation_notes,
    parse_role,
    require,
)
from wellness_clinic.domain.entities import ConsultationNote, UserRole
from wellness_clinic.domain.interfaces import (
    IAppointmentReader,
    IConsultationNoteRepository,
    IDoctorReader,
    IPatientReader,
)
from wellness_clinic.schemas.dtos import ConsultationNoteRequest

logger = logging.getLogger(__name__)


class RecordsService:
    def __init__(
        self,
        note_repo: IConsultationNoteRepository,
        patient_repo: IPatientReader,
        doctor_repo: IDoctorReader,
        appointment_repo: Optional[IAppointmentReader] = None,
    ) -> None:
        self.note_repo = note_repo
        self.patient_repo = patient_repo
        self.doctor_repo = doctor_repo
        self.appointment_repo = appointment_repo

    def add_note(
        self, role: RoleLike, doctor_id: str, request: ConsultationNoteRequest
    ) -> ConsultationNote:
        """Record a consultation note. Only doctors may write notes."""
        require(can_add_consultation_notes(role), "add consultation notes")
        request.validate()
        if self.doctor_repo.get_by_id(doctor_id) is None:
            raise NotFoundError(f"Doctor {doctor_id} not found")
        if self.patient_repo.get_by_id(request.patient_id) is None:
            raise NotFoundError(f"Patient {request.patient_id} not found")
        if request.appointment_id and self.appointment_repo is not None:
            if self.appointment_repo.get_by_id(request.appointment_id) is None:
                raise NotFoundError(f"Appointment {request.appointment_id} not found")

        note = self.note_repo.append(
            ConsultationNote(
                doctor_id=doctor_id,
                patient_id=request.patient_id,
                notes=request.notes.strip(),
                appointment_id=request.appointment_id,
                diagnosis=request.diagnosis,
                prescription=request.prescription,
            )
        )
        logger.info(
            "Consultation note added",
            extra={
                "context": {
                    "note_id": note.id,
                    "doctor_id": doctor_id,
                    "patient_id": note.patient_id,
                }
            },
        )
        return note

    def visible_notes(
        self, role: RoleLike, patient_id: Optional[str] = None
    ) -> List[ConsultationNote]:
        """Notes `role` may read, newest first.

        A patient must pass their own id and only sees their notes. Doctors
        and admins see every note, optionally narrowed to one patient. Staff
        see none.
        """
        role = parse_role(role)
        if role == UserRole.STAFF:
            return []
        if role == UserRole.PATIENT:
            if not patient_id:
                raise PermissionDenied("Patients can only view their own records")
            notes = self.note_repo.list_for_patient(patient_id)
        elif patient_id:
            notes = self.note_repo.list_for_patient(patient_id)
        else:
            notes = self.note_repo.list_all()
        return sorted(notes, key=lambda n: n.created_at, reverse=True)
