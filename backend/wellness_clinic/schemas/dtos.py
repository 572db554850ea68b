"""
Data Transfer Objects (DTOs) and validation schemas.

Request DTOs are what the presentation layer hands to the core once a form
is complete; each has a validate() that raises the core's typed errors.
Response DTOs turn domain entities into JSON-friendly dictionaries.
"""

import datetime as dt
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from wellness_clinic.core.exceptions import IncompleteRequest, ValidationError
from wellness_clinic.domain.entities import (
    SERVICE_LABELS,
    Appointment,
    Bill,
    ConsultationNote,
    Doctor,
    Gender,
    MembershipTier,
    Patient,
    ServiceType,
    TimeSlot,
    WellnessPackage,
    round_money,
)


def parse_date(value: Union[dt.date, str]) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value).strip())


def parse_time(value: Union[dt.time, str]) -> str:
    """Normalize a time of day to "HH:MM".

    Raises:
        ValueError: unparseable, or seconds that are not zero
    """
    if not isinstance(value, dt.time):
        value = dt.time.fromisoformat(str(value).strip())
    if value.second or value.microsecond:
        raise ValueError(f"Slots start on the minute, got {value.isoformat()}")
    return value.strftime("%H:%M")


def _money(value: Decimal) -> str:
    return str(value)


@dataclass
class BookingRequest:
    """DTO for a completed booking form."""

    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None
    branch_id: Optional[str] = None
    service_type: Optional[Union[ServiceType, str]] = None
    date: Optional[Union[dt.date, str]] = None
    time: Optional[Union[dt.time, str]] = None

    REQUIRED_FIELDS = (
        "patient_id",
        "doctor_id",
        "branch_id",
        "service_type",
        "date",
        "time",
    )

    def validate(self) -> None:
        """Validate the request data.

        A field that is empty or cannot be read counts as missing.
        """
        missing = [
            name
            for name in self.REQUIRED_FIELDS
            if getattr(self, name) is None or str(getattr(self, name)).strip() == ""
        ]
        if missing:
            raise IncompleteRequest(missing)

        unreadable = []
        try:
            ServiceType(self.service_type)
        except ValueError:
            unreadable.append("service_type")
        try:
            parse_date(self.date)
        except (TypeError, ValueError):
            unreadable.append("date")
        try:
            parse_time(self.time)
        except (TypeError, ValueError):
            unreadable.append("time")
        if unreadable:
            raise IncompleteRequest(unreadable)

    @property
    def day(self) -> dt.date:
        return parse_date(self.date)

    @property
    def time_label(self) -> str:
        return parse_time(self.time)

    @property
    def appointment_datetime(self) -> dt.datetime:
        hour, minute = (int(part) for part in self.time_label.split(":"))
        return dt.datetime.combine(self.day, dt.time(hour, minute))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookingRequest":
        return cls(**{name: data.get(name) for name in cls.REQUIRED_FIELDS})


@dataclass
class RescheduleRequest:
    """DTO for moving an appointment: a new date and time, same doctor."""

    date: Optional[Union[dt.date, str]] = None
    time: Optional[Union[dt.time, str]] = None


@dataclass
class PackagePurchaseRequest:
    """DTO for selling sessions of a wellness package to a patient."""

    patient_id: str
    package_id: str
    sessions: int = 1

    def validate(self) -> None:
        if not self.patient_id:
            raise ValidationError("Patient is required", field="patient_id")
        if not self.package_id:
            raise ValidationError("Package is required", field="package_id")


@dataclass
class PatientRegistrationRequest:
    """DTO for patient registration requests."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    date_of_birth: Optional[Union[dt.date, str]] = None
    gender: str = Gender.OTHER.value
    address: str = ""
    membership_tier: str = MembershipTier.NONE.value
    membership_expiry: Optional[Union[dt.date, str]] = None
    medical_history: Optional[str] = None
    allergies: Optional[str] = None

    def validate(self) -> None:
        """Validate the request data."""
        for name in ("first_name", "last_name", "email"):
            if not (getattr(self, name) or "").strip():
                raise ValidationError(f"{name} is required", field=name)
        if "@" not in self.email:
            raise ValidationError("Invalid email format", field="email")
        try:
            Gender(self.gender)
        except ValueError:
            raise ValidationError(f"Unknown gender '{self.gender}'", field="gender")
        try:
            MembershipTier(self.membership_tier)
        except ValueError:
            raise ValidationError(
                f"Unknown membership tier '{self.membership_tier}'",
                field="membership_tier",
            )
        for name in ("date_of_birth", "membership_expiry"):
            value = getattr(self, name)
            if value:
                try:
                    parse_date(value)
                except (TypeError, ValueError):
                    raise ValidationError(f"{name} must be an ISO date", field=name)


@dataclass
class ConsultationNoteRequest:
    """DTO for a doctor's consultation note."""

    patient_id: str = ""
    notes: str = ""
    appointment_id: Optional[str] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None

    def validate(self) -> None:
        if not self.patient_id:
            raise ValidationError("Patient is required", field="patient_id")
        if not (self.notes or "").strip():
            raise ValidationError("Note text is required", field="notes")


@dataclass
class SlotResponse:
    """DTO for slot API responses."""

    id: str
    date: str
    time: str
    doctor_id: str
    branch_id: str
    is_available: bool
    is_peak: bool

    @classmethod
    def from_domain(cls, slot: TimeSlot) -> "SlotResponse":
        return cls(
            id=slot.id,
            date=slot.date.isoformat(),
            time=slot.time,
            doctor_id=slot.doctor_id,
            branch_id=slot.branch_id,
            is_available=slot.is_available,
            is_peak=slot.is_peak,
        )


@dataclass
class AppointmentResponse:
    """DTO for appointment API responses."""

    id: str
    token: str
    patient_id: str
    doctor_id: str
    branch_id: str
    service_type: str
    service_label: str
    appointment_datetime: str
    status: str
    notes: Optional[str]
    created_at: str

    @classmethod
    def from_domain(cls, appointment: Appointment) -> "AppointmentResponse":
        """Create response from domain entity."""
        return cls(
            id=appointment.id,
            token=appointment.token,
            patient_id=appointment.patient_id,
            doctor_id=appointment.doctor_id,
            branch_id=appointment.branch_id,
            service_type=appointment.service_type.value,
            service_label=SERVICE_LABELS[appointment.service_type],
            appointment_datetime=appointment.appointment_datetime.isoformat(),
            status=appointment.status.value,
            notes=appointment.notes,
            created_at=appointment.created_at.isoformat(),
        )


@dataclass
class BillResponse:
    """DTO for bill API responses."""

    id: str
    patient_id: str
    appointment_id: Optional[str]
    package_id: Optional[str]
    sessions_booked: int
    gross_amount: str
    package_discount_rate: str
    membership_discount_rate: str
    tax_rate: str
    tax_amount: str
    final_amount: str
    payment_status: str
    bill_date: str

    @classmethod
    def from_domain(cls, bill: Bill) -> "BillResponse":
        return cls(
            id=bill.id,
            patient_id=bill.patient_id,
            appointment_id=bill.appointment_id,
            package_id=bill.package_id,
            sessions_booked=bill.sessions_booked,
            gross_amount=_money(bill.gross_amount),
            package_discount_rate=str(bill.package_discount_rate),
            membership_discount_rate=str(bill.membership_discount_rate),
            tax_rate=str(bill.tax_rate),
            tax_amount=_money(bill.tax_amount),
            final_amount=_money(bill.final_amount),
            payment_status=bill.payment_status.value,
            bill_date=bill.bill_date.isoformat(),
        )


@dataclass
class PatientResponse:
    """DTO for patient API responses; medical fields only when permitted."""

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    gender: str
    membership_tier: str
    membership_expiry: Optional[str]
    created_at: str
    medical_history: Optional[str] = None
    allergies: Optional[str] = None

    @classmethod
    def from_domain(
        cls, patient: Patient, include_medical: bool = False
    ) -> "PatientResponse":
        return cls(
            id=patient.id,
            first_name=patient.first_name,
            last_name=patient.last_name,
            email=patient.email,
            phone=patient.phone,
            gender=patient.gender.value,
            membership_tier=patient.membership_tier.value,
            membership_expiry=(
                patient.membership_expiry.isoformat()
                if patient.membership_expiry
                else None
            ),
            created_at=patient.created_at.isoformat(),
            medical_history=patient.medical_history if include_medical else None,
            allergies=patient.allergies if include_medical else None,
        )


@dataclass
class DoctorResponse:
    """DTO for the doctor directory."""

    id: str
    display_name: str
    first_name: str
    last_name: str
    branch_id: str
    specializations: List[str]
    is_available: bool
    consultation_fee: str
    email: str
    phone: str

    @classmethod
    def from_domain(cls, doctor: Doctor) -> "DoctorResponse":
        return cls(
            id=doctor.id,
            display_name=doctor.display_name,
            first_name=doctor.first_name,
            last_name=doctor.last_name,
            branch_id=doctor.branch_id,
            specializations=sorted(s.value for s in doctor.specializations),
            is_available=doctor.is_available,
            consultation_fee=_money(round_money(doctor.consultation_fee)),
            email=doctor.email,
            phone=doctor.phone,
        )


@dataclass
class PackageResponse:
    """DTO for the package catalog."""

    id: str
    name: str
    service_type: str
    service_label: str
    sessions_included: int
    session_price: str
    package_discount: str
    list_price: str
    validity_days: int
    description: str
    is_active: bool

    @classmethod
    def from_domain(cls, package: WellnessPackage) -> "PackageResponse":
        return cls(
            id=package.id,
            name=package.name,
            service_type=package.service_type.value,
            service_label=SERVICE_LABELS[package.service_type],
            sessions_included=package.sessions_included,
            session_price=_money(package.session_price),
            package_discount=str(package.package_discount),
            list_price=_money(round_money(package.list_price)),
            validity_days=package.validity_days,
            description=package.description,
            is_active=package.is_active,
        )


@dataclass
class ConsultationNoteResponse:
    id: str
    patient_id: str
    doctor_id: str
    appointment_id: Optional[str]
    notes: str
    diagnosis: Optional[str]
    prescription: Optional[str]
    created_at: str

    @classmethod
    def from_domain(cls, note: ConsultationNote) -> "ConsultationNoteResponse":
        return cls(
            id=note.id,
            patient_id=note.patient_id,
            doctor_id=note.doctor_id,
            appointment_id=note.appointment_id,
            notes=note.notes,
            diagnosis=note.diagnosis,
            prescription=note.prescription,
            created_at=note.created_at.isoformat(),
        )


def to_dict(dto: Any) -> Dict[str, Any]:
    return asdict(dto)


def to_dicts(dtos: List[Any]) -> List[Dict[str, Any]]:
    return [asdict(d) for d in dtos]
