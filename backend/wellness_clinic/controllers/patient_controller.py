"""
Patient controller - registration, lookup, membership and health records.
"""

from flask import Blueprint, request

from wellness_clinic.core.api_utils import (
    api_response,
    current_role,
    get_service,
    json_body,
    require_capability,
)
from wellness_clinic.core.permissions import (
    can_edit_patient,
    can_view_medical_history,
    visible_sections,
)
from wellness_clinic.schemas.dtos import (
    AppointmentResponse,
    BillResponse,
    ConsultationNoteRequest,
    ConsultationNoteResponse,
    PatientRegistrationRequest,
    PatientResponse,
    to_dict,
    to_dicts,
)

patient_bp = Blueprint("patients", __name__, url_prefix="/api/patients")

PATIENT_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "date_of_birth",
    "gender",
    "address",
    "membership_tier",
    "membership_expiry",
    "medical_history",
    "allergies",
)


def _can_list_patients(role) -> bool:
    return "patients" in visible_sections(role)


def _patients():
    return get_service("patients")


@patient_bp.route("", methods=["GET"])
@require_capability(_can_list_patients, "list patients")
def list_patients():
    patients = _patients().search(
        request.args.get("q", ""), request.args.get("membership")
    )
    include_medical = can_view_medical_history(current_role())
    return api_response(
        True,
        f"{len(patients)} patients",
        to_dicts([PatientResponse.from_domain(p, include_medical) for p in patients]),
    )


@patient_bp.route("", methods=["POST"])
@require_capability(can_edit_patient, "register patients")
def register_patient():
    data = json_body()
    registration = PatientRegistrationRequest(
        **{name: data[name] for name in PATIENT_FIELDS if data.get(name) is not None}
    )
    patient = _patients().register(registration)
    return api_response(
        True,
        f"Patient {patient.full_name} registered",
        to_dict(PatientResponse.from_domain(patient, include_medical=True)),
        201,
    )


@patient_bp.route("/<patient_id>", methods=["GET"])
def get_patient(patient_id: str):
    patient = _patients().get(patient_id)
    return api_response(
        True,
        "Patient found",
        to_dict(
            PatientResponse.from_domain(
                patient, can_view_medical_history(current_role())
            )
        ),
    )


@patient_bp.route("/<patient_id>/membership", methods=["POST"])
@require_capability(can_edit_patient, "change memberships")
def update_membership(patient_id: str):
    data = json_body()
    patient = _patients().update_membership(
        patient_id, data.get("membership_tier", ""), data.get("membership_expiry")
    )
    return api_response(
        True,
        f"Membership set to {patient.membership_tier.value}",
        to_dict(PatientResponse.from_domain(patient)),
    )


@patient_bp.route("/<patient_id>/bills", methods=["GET"])
def patient_bills(patient_id: str):
    bills = get_service("billing").bills_for_patient(patient_id)
    return api_response(
        True,
        f"{len(bills)} bills",
        to_dicts([BillResponse.from_domain(b) for b in bills]),
    )


@patient_bp.route("/<patient_id>/appointments", methods=["GET"])
def patient_appointments(patient_id: str):
    _patients().get(patient_id)
    appointments = get_service("scheduling").appointments_for_patient(patient_id)
    return api_response(
        True,
        f"{len(appointments)} appointments",
        to_dicts([AppointmentResponse.from_domain(a) for a in appointments]),
    )


@patient_bp.route("/<patient_id>/notes", methods=["GET"])
def patient_notes(patient_id: str):
    notes = get_service("records").visible_notes(current_role(), patient_id)
    return api_response(
        True,
        f"{len(notes)} notes",
        to_dicts([ConsultationNoteResponse.from_domain(n) for n in notes]),
    )


@patient_bp.route("/<patient_id>/notes", methods=["POST"])
def add_note(patient_id: str):
    data = json_body()
    note = get_service("records").add_note(
        current_role(),
        data.get("doctor_id", ""),
        ConsultationNoteRequest(
            patient_id=patient_id,
            notes=data.get("notes", ""),
            appointment_id=data.get("appointment_id"),
            diagnosis=data.get("diagnosis"),
            prescription=data.get("prescription"),
        ),
    )
    return api_response(
        True,
        "Consultation note added",
        to_dict(ConsultationNoteResponse.from_domain(note)),
        201,
    )
