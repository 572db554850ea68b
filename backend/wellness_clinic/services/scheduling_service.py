"""
Scheduling and booking allocator.

The module-level functions are pure: they take snapshots of the appointment
collection and return new values without mutating anything. SchedulingService
wraps them with injected repositories and serialises the
check-conflict-then-append sequence so that no two booked appointments can
share a (doctor, date-time) pair.
"""

import logging
import threading
from datetime import date, datetime
from typing import Iterable, List, Optional

from wellness_clinic.core.exceptions import (
    DoctorUnavailable,
    InvalidSlot,
    NotFoundError,
    SlotConflict,
    SpecializationMismatch,
    TokenSequenceExhausted,
    ValidationError,
)
from wellness_clinic.domain.entities import (
    Appointment,
    AppointmentStatus,
    Branch,
    Doctor,
    ServiceType,
    TimeSlot,
)
from wellness_clinic.domain.interfaces import (
    IAppointmentRepository,
    IBranchReader,
    IDoctorReader,
)
from wellness_clinic.schemas.dtos import BookingRequest, RescheduleRequest, parse_date

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "MWN"
MAX_TOKEN_SEQUENCE = 999

# Two clinic sessions per day, half-hour slots
SLOT_TIMES = (
    "08:00", "08:30", "09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
    "14:00", "14:30", "15:00", "15:30", "16:00", "16:30", "17:00", "17:30",
)  # fmt: skip


def is_peak_hour(time_label: str) -> bool:
    """Morning opening and late afternoon are the busiest hours."""
    hour = int(time_label.split(":")[0])
    return 8 <= hour < 10 or 16 <= hour < 18


def list_slots(
    day: date,
    doctor_id: str,
    branch_id: str,
    appointments: Iterable[Appointment] = (),
) -> List[TimeSlot]:
    """Build the fixed daily template for a doctor at a branch.

    A slot is unavailable only when a booked appointment already holds that
    doctor at that exact date and time.
    """
    day = parse_date(day)
    taken = {
        apt.appointment_datetime
        for apt in appointments
        if apt.doctor_id == doctor_id and apt.status == AppointmentStatus.BOOKED
    }
    slots = []
    for index, time_label in enumerate(SLOT_TIMES):
        hour, minute = (int(part) for part in time_label.split(":"))
        starts_at = datetime(day.year, day.month, day.day, hour, minute)
        slots.append(
            TimeSlot(
                id=f"slot-{day.isoformat()}-{doctor_id}-{index}",
                date=day,
                time=time_label,
                doctor_id=doctor_id,
                branch_id=branch_id,
                is_available=starts_at not in taken,
                is_peak=is_peak_hour(time_label),
            )
        )
    return slots


def generate_token(branch_code: str, day: date, existing_count: int) -> str:
    """Mint the human-readable token for the next booking at branch on day.

    Example: third booking at branch "C" on 2026-01-20 -> MWN-C-20260120-003
    """
    code = branch_code or ""
    if len(code) != 1 or not (code.isascii() and code.isalpha() and code.isupper()):
        raise ValueError(f"Invalid branch code {branch_code!r}")
    if existing_count < 0:
        raise ValueError("Existing count cannot be negative")
    sequence = existing_count + 1
    if sequence > MAX_TOKEN_SEQUENCE:
        raise TokenSequenceExhausted(
            f"Branch {branch_code} has no token numbers left for {parse_date(day)}"
        )
    return f"{TOKEN_PREFIX}-{branch_code}-{parse_date(day).strftime('%Y%m%d')}-{sequence:03d}"


def find_conflict(
    appointments: Iterable[Appointment], doctor_id: str, when: datetime
) -> Optional[Appointment]:
    for apt in appointments:
        if apt.occupies(doctor_id, when):
            return apt
    return None


def _check_doctor(doctor: Doctor, request: BookingRequest) -> None:
    if doctor.id != request.doctor_id:
        raise DoctorUnavailable(f"Doctor {request.doctor_id} does not match record")
    if doctor.branch_id != request.branch_id:
        raise DoctorUnavailable(
            f"{doctor.display_name} does not practise at branch {request.branch_id}"
        )
    if not doctor.is_available:
        raise DoctorUnavailable(f"{doctor.display_name} is not taking bookings")
    if not doctor.can_perform(request.service_type):
        raise SpecializationMismatch(
            f"{doctor.display_name} does not offer {ServiceType(request.service_type).value}"
        )


def book(
    request: BookingRequest,
    existing_appointments: Iterable[Appointment],
    branch: Branch,
    doctor: Optional[Doctor] = None,
    branch_day_count: Optional[int] = None,
) -> Appointment:
    """Validate a booking request and return the new booked appointment.

    `existing_appointments` must contain at least the doctor's appointments
    on the requested day. The token sequence is counted from it unless the
    caller already knows `branch_day_count`.

    Raises:
        IncompleteRequest: a required field is missing or unreadable
        InvalidSlot: the time is not in the daily template or the branch is wrong
        DoctorUnavailable / SpecializationMismatch: doctor cannot take it
        SlotConflict: the doctor is already booked at that exact time
    """
    request.validate()
    existing = list(existing_appointments)

    if request.time_label not in SLOT_TIMES:
        raise InvalidSlot(f"{request.time_label} is not a bookable slot")
    if branch.id != request.branch_id:
        raise InvalidSlot(f"Branch {branch.id} does not match request")
    if not branch.is_active:
        raise InvalidSlot(f"Branch {branch.name} is not accepting bookings")
    if doctor is not None:
        _check_doctor(doctor, request)

    when = request.appointment_datetime
    if find_conflict(existing, request.doctor_id, when) is not None:
        raise SlotConflict(
            f"Doctor {request.doctor_id} is already booked at {when.isoformat()}"
        )

    if branch_day_count is None:
        # cancelled appointments still count: sequence numbers are never reused
        branch_day_count = sum(
            1 for apt in existing if apt.branch_id == branch.id and apt.date == request.day
        )
    return Appointment(
        patient_id=request.patient_id,
        doctor_id=request.doctor_id,
        branch_id=branch.id,
        service_type=request.service_type,
        appointment_datetime=when,
        token=generate_token(branch.branch_code, request.day, branch_day_count),
        status=AppointmentStatus.BOOKED,
    )


class SchedulingService:
    """Application service for appointment use-cases.

    The lock makes conflict-check-then-append atomic for every writer that
    goes through this instance. Repositories backed by a shared database also
    enforce it with a conditional unique index.
    """

    def __init__(
        self,
        appointment_repo: IAppointmentRepository,
        branch_repo: IBranchReader,
        doctor_repo: IDoctorReader,
    ):
        self.appointment_repo = appointment_repo
        self.branch_repo = branch_repo
        self.doctor_repo = doctor_repo
        self._lock = threading.RLock()

    def _branch(self, branch_id: str) -> Branch:
        branch = self.branch_repo.get_by_id(branch_id)
        if branch is None:
            raise NotFoundError(f"Branch {branch_id} not found")
        return branch

    def _doctor(self, doctor_id: str) -> Doctor:
        doctor = self.doctor_repo.get_by_id(doctor_id)
        if doctor is None:
            raise NotFoundError(f"Doctor {doctor_id} not found")
        return doctor

    def get(self, appointment_id: str) -> Appointment:
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return appointment

    def available_slots(self, day, doctor_id: str, branch_id: str) -> List[TimeSlot]:
        day = parse_date(day)
        self._branch(branch_id)
        self._doctor(doctor_id)
        return list_slots(
            day,
            doctor_id,
            branch_id,
            self.appointment_repo.list_for_doctor_on(doctor_id, day),
        )

    def generate_token(self, branch_id: str, day) -> str:
        """Token the next booking at branch on day would receive."""
        day = parse_date(day)
        branch = self._branch(branch_id)
        return generate_token(
            branch.branch_code,
            day,
            self.appointment_repo.count_for_branch_date(branch_id, day),
        )

    def _book_locked(
        self, request: BookingRequest, branch: Branch, doctor: Doctor, replacing=None
    ) -> Appointment:
        doctor_day = self.appointment_repo.list_for_doctor_on(
            request.doctor_id, request.day
        )
        if replacing is not None:
            doctor_day = [replacing if a.id == replacing.id else a for a in doctor_day]
        try:
            return book(
                request,
                doctor_day,
                branch,
                doctor,
                branch_day_count=self.appointment_repo.count_for_branch_date(
                    branch.id, request.day
                ),
            )
        except SlotConflict:
            logger.info(
                "Booking rejected: slot already taken",
                extra={
                    "context": {
                        "doctor_id": request.doctor_id,
                        "appointment_datetime": request.appointment_datetime.isoformat(),
                    }
                },
            )
            raise

    def book(self, request: BookingRequest) -> Appointment:
        request.validate()
        branch = self._branch(request.branch_id)
        doctor = self._doctor(request.doctor_id)

        with self._lock:
            appointment = self._book_locked(request, branch, doctor)
            saved = self.appointment_repo.append(appointment)

        logger.info(
            "Appointment booked",
            extra={
                "context": {
                    "appointment_id": saved.id,
                    "token": saved.token,
                    "doctor_id": saved.doctor_id,
                    "branch_id": saved.branch_id,
                }
            },
        )
        return saved

    def _transition(
        self, appointment_id: str, target: AppointmentStatus, notes: Optional[str] = None
    ) -> Appointment:
        with self._lock:
            current = self.get(appointment_id)
            updated = current.transition_to(target)
            if notes:
                updated.notes = f"{current.notes}\n{notes}" if current.notes else notes
            saved = self.appointment_repo.update(updated)
        logger.info(
            "Appointment status changed",
            extra={
                "context": {
                    "appointment_id": appointment_id,
                    "from": current.status.value,
                    "to": saved.status.value,
                }
            },
        )
        return saved

    def cancel(self, appointment_id: str) -> Appointment:
        """Cancel a booked appointment. The token is kept and never reissued."""
        return self._transition(appointment_id, AppointmentStatus.CANCELLED)

    def complete(self, appointment_id: str, notes: Optional[str] = None) -> Appointment:
        """Mark a booked appointment as completed after the visit."""
        return self._transition(appointment_id, AppointmentStatus.COMPLETED, notes)

    def confirm_pending(self, appointment_id: str) -> Appointment:
        """Promote a pending appointment to booked if its slot is still free."""
        with self._lock:
            current = self.get(appointment_id)
            conflict = self.appointment_repo.find_conflict(
                current.doctor_id, current.appointment_datetime
            )
            if conflict is not None and conflict.id != current.id:
                raise SlotConflict(
                    f"Slot held by {conflict.token}; cannot confirm {current.token}"
                )
            return self._transition(appointment_id, AppointmentStatus.BOOKED)

    def reschedule(self, appointment_id: str, request: RescheduleRequest) -> Appointment:
        """Cancel the old appointment and book a new one with a fresh token.

        Either both happen or neither does.
        """
        with self._lock:
            current = self.get(appointment_id)
            cancelled = current.transition_to(AppointmentStatus.CANCELLED)
            new_request = BookingRequest(
                patient_id=current.patient_id,
                doctor_id=current.doctor_id,
                branch_id=current.branch_id,
                service_type=current.service_type,
                date=request.date,
                time=request.time,
            )
            new_request.validate()
            branch = self._branch(current.branch_id)
            doctor = self._doctor(current.doctor_id)

            replacement = self._book_locked(
                new_request, branch, doctor, replacing=cancelled
            )
            saved = self.appointment_repo.cancel_and_append(cancelled, replacement)

        logger.info(
            "Appointment rescheduled",
            extra={
                "context": {
                    "old_token": current.token,
                    "new_token": saved.token,
                    "appointment_datetime": saved.appointment_datetime.isoformat(),
                }
            },
        )
        return saved

    def search(self, term: str = "", status: Optional[str] = None) -> List[Appointment]:
        """Filter by patient id or token (case-insensitive) and optional status."""
        term = (term or "").strip().lower()
        wanted = None
        if status and status != "all":
            try:
                wanted = AppointmentStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status '{status}'", field="status")
        results = []
        for apt in self.appointment_repo.list_all():
            if wanted is not None and apt.status != wanted:
                continue
            if term and term not in apt.token.lower() and term not in apt.patient_id.lower():
                continue
            results.append(apt)
        return sorted(results, key=lambda a: a.appointment_datetime)

    def appointments_for_patient(self, patient_id: str) -> List[Appointment]:
        return sorted(
            (a for a in self.appointment_repo.list_all() if a.patient_id == patient_id),
            key=lambda a: a.appointment_datetime,
        )

    def booked_on(self, day) -> List[Appointment]:
        day = parse_date(day)
        return sorted(
            (
                a
                for a in self.appointment_repo.list_all()
                if a.date == day and a.status == AppointmentStatus.BOOKED
            ),
            key=lambda a: a.appointment_datetime,
        )
