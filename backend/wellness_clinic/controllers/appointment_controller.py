"""
Appointment controller - slots, booking and status changes.

Handles only HTTP concerns; every rule lives in SchedulingService.
"""

from flask import Blueprint, request

from wellness_clinic.core.api_utils import (
    api_response,
    get_service,
    json_body,
    require_capability,
)
from wellness_clinic.core.exceptions import IncompleteRequest
from wellness_clinic.core.permissions import can_book_appointments
from wellness_clinic.schemas.dtos import (
    AppointmentResponse,
    BookingRequest,
    RescheduleRequest,
    SlotResponse,
    parse_date,
    to_dict,
    to_dicts,
)

appointment_bp = Blueprint("appointments", __name__, url_prefix="/api")


def _scheduling():
    return get_service("scheduling")


@appointment_bp.route("/slots", methods=["GET"])
def list_slots():
    """Daily slot template for a doctor at a branch with availability."""
    missing = [
        name
        for name in ("date", "doctor_id", "branch_id")
        if not request.args.get(name)
    ]
    if missing:
        raise IncompleteRequest(missing)
    try:
        day = parse_date(request.args["date"])
    except ValueError:
        raise IncompleteRequest(["date"])

    slots = _scheduling().available_slots(
        day, request.args["doctor_id"], request.args["branch_id"]
    )
    return api_response(
        True,
        f"{sum(1 for s in slots if s.is_available)} of {len(slots)} slots available",
        to_dicts([SlotResponse.from_domain(s) for s in slots]),
    )


@appointment_bp.route("/appointments", methods=["GET"])
def list_appointments():
    appointments = _scheduling().search(
        request.args.get("q", ""), request.args.get("status")
    )
    return api_response(
        True,
        f"{len(appointments)} appointments",
        to_dicts([AppointmentResponse.from_domain(a) for a in appointments]),
    )


@appointment_bp.route("/appointments/<appointment_id>", methods=["GET"])
def get_appointment(appointment_id: str):
    appointment = _scheduling().get(appointment_id)
    return api_response(
        True, "Appointment found", to_dict(AppointmentResponse.from_domain(appointment))
    )


@appointment_bp.route("/appointments", methods=["POST"])
@require_capability(can_book_appointments, "book appointments")
def create_appointment():
    booking = BookingRequest.from_dict(json_body())
    appointment = _scheduling().book(booking)
    return api_response(
        True,
        f"Appointment booked with token {appointment.token}",
        to_dict(AppointmentResponse.from_domain(appointment)),
        201,
    )


@appointment_bp.route("/appointments/<appointment_id>/cancel", methods=["POST"])
@require_capability(can_book_appointments, "cancel appointments")
def cancel_appointment(appointment_id: str):
    appointment = _scheduling().cancel(appointment_id)
    return api_response(
        True,
        f"Appointment {appointment.token} cancelled",
        to_dict(AppointmentResponse.from_domain(appointment)),
    )


@appointment_bp.route("/appointments/<appointment_id>/complete", methods=["POST"])
@require_capability(can_book_appointments, "complete appointments")
def complete_appointment(appointment_id: str):
    appointment = _scheduling().complete(appointment_id, json_body().get("notes"))
    return api_response(
        True,
        f"Appointment {appointment.token} completed",
        to_dict(AppointmentResponse.from_domain(appointment)),
    )


@appointment_bp.route("/appointments/<appointment_id>/confirm", methods=["POST"])
@require_capability(can_book_appointments, "confirm appointments")
def confirm_appointment(appointment_id: str):
    appointment = _scheduling().confirm_pending(appointment_id)
    return api_response(
        True,
        f"Appointment {appointment.token} confirmed",
        to_dict(AppointmentResponse.from_domain(appointment)),
    )


@appointment_bp.route("/appointments/<appointment_id>/reschedule", methods=["POST"])
@require_capability(can_book_appointments, "reschedule appointments")
def reschedule_appointment(appointment_id: str):
    data = json_body()
    appointment = _scheduling().reschedule(
        appointment_id, RescheduleRequest(date=data.get("date"), time=data.get("time"))
    )
    return api_response(
        True,
        f"Appointment rescheduled with token {appointment.token}",
        to_dict(AppointmentResponse.from_domain(appointment)),
    )
