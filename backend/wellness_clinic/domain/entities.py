"""
Domain entities - Pure business logic, no framework dependencies.

These are the plain representations the pricing engine and the booking
allocator work with, independent of:
- Database implementation (SQLAlchemy)
- HTTP frameworks (Flask)
"""

import uuid
from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional

from wellness_clinic.core.config import local_now, local_today
from wellness_clinic.core.exceptions import InvalidStatusTransition

CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    """Round a monetary amount to 2 decimal places (half up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class ServiceType(str, Enum):
    WELLNESS_CONSULTATION = "wellness_consultation"
    NUTRITION = "nutrition"
    FITNESS = "fitness"
    DETOX = "detox"
    STRESS_MANAGEMENT = "stress_management"
    HEALTH_CHECKUP = "health_checkup"


SERVICE_LABELS: Mapping[ServiceType, str] = MappingProxyType(
    {
        ServiceType.WELLNESS_CONSULTATION: "Wellness Consultation",
        ServiceType.NUTRITION: "Nutrition Advisory",
        ServiceType.FITNESS: "Fitness Training",
        ServiceType.DETOX: "Detox Program",
        ServiceType.STRESS_MANAGEMENT: "Stress Management",
        ServiceType.HEALTH_CHECKUP: "Health Check-up",
    }
)


class MembershipTier(str, Enum):
    NONE = "none"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


MEMBERSHIP_DISCOUNTS: Mapping[MembershipTier, Decimal] = MappingProxyType(
    {
        MembershipTier.NONE: Decimal("0"),
        MembershipTier.SILVER: Decimal("0.05"),
        MembershipTier.GOLD: Decimal("0.10"),
        MembershipTier.PLATINUM: Decimal("0.15"),
    }
)


class AppointmentStatus(str, Enum):
    BOOKED = "booked"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    PENDING = "pending"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    VOID = "void"
    REFUNDED = "refunded"


class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    STAFF = "staff"
    PATIENT = "patient"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


# pending is only entered by asynchronous confirmation workflows
APPOINTMENT_TRANSITIONS: Mapping[AppointmentStatus, FrozenSet[AppointmentStatus]] = (
    MappingProxyType(
        {
            AppointmentStatus.PENDING: frozenset({AppointmentStatus.BOOKED}),
            AppointmentStatus.BOOKED: frozenset(
                {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
            ),
            AppointmentStatus.COMPLETED: frozenset(),
            AppointmentStatus.CANCELLED: frozenset(),
        }
    )
)

PAYMENT_TRANSITIONS: Mapping[PaymentStatus, FrozenSet[PaymentStatus]] = (
    MappingProxyType(
        {
            PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.VOID}),
            PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
            PaymentStatus.VOID: frozenset(),
            PaymentStatus.REFUNDED: frozenset(),
        }
    )
)


@dataclass
class Branch:
    """A clinic location; partition key for tokens and slot pools."""

    id: str
    name: str
    branch_code: str
    is_active: bool = True
    address: str = ""
    phone: str = ""
    email: str = ""

    def __post_init__(self):
        """Validate domain rules."""
        if not self.id:
            raise ValueError("Branch id is required")
        if not self.name:
            raise ValueError("Branch name is required")
        code = self.branch_code or ""
        if len(code) != 1 or not (code.isascii() and code.isalpha() and code.isupper()):
            raise ValueError("Branch code must be a single uppercase letter")


@dataclass
class WellnessPackage:
    """Domain entity for a sellable bundle of sessions."""

    id: str
    name: str
    service_type: ServiceType
    sessions_included: int
    session_price: Decimal
    package_discount: Decimal
    validity_days: int
    description: str = ""
    is_active: bool = True

    def __post_init__(self):
        """Validate business rules."""
        self.service_type = ServiceType(self.service_type)
        self.session_price = Decimal(str(self.session_price))
        self.package_discount = Decimal(str(self.package_discount))
        if self.sessions_included <= 0:
            raise ValueError("Package must include at least one session")
        if self.session_price < 0:
            raise ValueError("Session price cannot be negative")
        if not (Decimal("0") <= self.package_discount < Decimal("1")):
            raise ValueError("Package discount must be in [0, 1)")
        if self.validity_days <= 0:
            raise ValueError("Validity must be positive")

    @property
    def list_price(self) -> Decimal:
        """Full package price before any discount."""
        return self.session_price * self.sessions_included


@dataclass
class Doctor:
    """Domain entity for a practitioner affiliated with one branch."""

    id: str
    first_name: str
    last_name: str
    branch_id: str
    specializations: FrozenSet[ServiceType] = frozenset()
    is_available: bool = True
    consultation_fee: Decimal = Decimal("0")
    email: str = ""
    phone: str = ""

    def __post_init__(self):
        """Validate business rules."""
        self.specializations = frozenset(ServiceType(s) for s in self.specializations)
        self.consultation_fee = Decimal(str(self.consultation_fee))
        if not self.branch_id:
            raise ValueError("Doctor must be affiliated with a branch")
        if self.consultation_fee < 0:
            raise ValueError("Consultation fee cannot be negative")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        return f"Dr. {self.full_name}"

    def can_perform(self, service_type: ServiceType) -> bool:
        return ServiceType(service_type) in self.specializations


@dataclass
class Patient:
    """Domain entity representing a registered patient."""

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    date_of_birth: Optional[date] = None
    gender: Gender = Gender.OTHER
    address: str = ""
    membership_tier: MembershipTier = MembershipTier.NONE
    membership_expiry: Optional[date] = None
    medical_history: Optional[str] = None
    allergies: Optional[str] = None
    created_at: date = field(default_factory=local_today)

    def __post_init__(self):
        """Validate business rules."""
        self.gender = Gender(self.gender)
        self.membership_tier = MembershipTier(self.membership_tier)
        if not self.first_name or not self.last_name:
            raise ValueError("First and last name are required")
        if not self.email or "@" not in self.email:
            raise ValueError("Invalid email format")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class TimeSlot:
    """Ephemeral half-hour slot for one doctor at one branch on one date."""

    id: str
    date: date
    time: str
    doctor_id: str
    branch_id: str
    is_available: bool
    is_peak: bool = False


@dataclass
class Appointment:
    """Domain entity for a booked visit, identified by its token."""

    patient_id: str
    doctor_id: str
    branch_id: str
    service_type: ServiceType
    appointment_datetime: datetime
    token: str
    status: AppointmentStatus = AppointmentStatus.BOOKED
    id: str = field(default_factory=lambda: new_id("apt"))
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=local_now)

    def __post_init__(self):
        """Validate business rules."""
        self.service_type = ServiceType(self.service_type)
        self.status = AppointmentStatus(self.status)
        if not (self.patient_id and self.doctor_id and self.branch_id):
            raise ValueError("Patient, doctor and branch are required")
        if not self.token:
            raise ValueError("Token is required")

    @property
    def date(self) -> date:
        return self.appointment_datetime.date()

    @property
    def time_label(self) -> str:
        return self.appointment_datetime.strftime("%H:%M")

    def occupies(self, doctor_id: str, when: datetime) -> bool:
        """True when this is a booked appointment for doctor at exactly `when`."""
        return (
            self.status == AppointmentStatus.BOOKED
            and self.doctor_id == doctor_id
            and self.appointment_datetime == when
        )

    def transition_to(self, target: AppointmentStatus) -> "Appointment":
        """Return a copy in the target status, enforcing the state machine."""
        target = AppointmentStatus(target)
        if target not in APPOINTMENT_TRANSITIONS[self.status]:
            raise InvalidStatusTransition("appointment", self.status.value, target.value)
        return replace(self, status=target)


@dataclass(frozen=True)
class PriceBreakdown:
    """Every stage of the pricing pipeline, in full precision unless rounded()."""

    base_unit_price: Decimal
    quantity: int
    package_discount_rate: Decimal
    membership_tier: MembershipTier
    membership_discount_rate: Decimal
    tax_rate: Decimal
    gross: Decimal
    package_discount_amount: Decimal
    after_package_discount: Decimal
    membership_discount_amount: Decimal
    after_membership_discount: Decimal
    tax_amount: Decimal
    final_amount: Decimal

    MONEY_FIELDS = (
        "gross",
        "package_discount_amount",
        "after_package_discount",
        "membership_discount_amount",
        "after_membership_discount",
        "tax_amount",
        "final_amount",
    )

    def rounded(self) -> "PriceBreakdown":
        """Round each stage once, from its full-precision value."""
        return replace(
            self, **{name: round_money(getattr(self, name)) for name in self.MONEY_FIELDS}
        )

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["membership_tier"] = self.membership_tier.value
        for key, value in data.items():
            if isinstance(value, Decimal):
                data[key] = str(value)
        return data


@dataclass
class Bill:
    """Invoice whose final amount always derives from the pricing pipeline."""

    patient_id: str
    sessions_booked: int
    gross_amount: Decimal
    package_discount_rate: Decimal
    membership_discount_rate: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    final_amount: Decimal
    id: str = field(default_factory=lambda: new_id("bill"))
    appointment_id: Optional[str] = None
    package_id: Optional[str] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    bill_date: date = field(default_factory=local_today)

    def __post_init__(self):
        """Validate business rules."""
        self.payment_status = PaymentStatus(self.payment_status)
        if not self.patient_id:
            raise ValueError("Bill requires a patient")
        if self.sessions_booked <= 0:
            raise ValueError("Sessions booked must be positive")

    @classmethod
    def from_breakdown(
        cls,
        breakdown: PriceBreakdown,
        patient_id: str,
        appointment_id: Optional[str] = None,
        package_id: Optional[str] = None,
        bill_date: Optional[date] = None,
        bill_id: Optional[str] = None,
    ) -> "Bill":
        stored = breakdown.rounded()
        kwargs: Dict[str, Any] = {}
        if bill_date is not None:
            kwargs["bill_date"] = bill_date
        if bill_id is not None:
            kwargs["id"] = bill_id
        return cls(
            patient_id=patient_id,
            sessions_booked=breakdown.quantity,
            gross_amount=stored.gross,
            package_discount_rate=breakdown.package_discount_rate,
            membership_discount_rate=breakdown.membership_discount_rate,
            tax_rate=breakdown.tax_rate,
            tax_amount=stored.tax_amount,
            final_amount=stored.final_amount,
            appointment_id=appointment_id,
            package_id=package_id,
            **kwargs,
        )

    def transition_to(self, target: PaymentStatus) -> "Bill":
        """Return a copy in the target payment status, enforcing the state machine."""
        target = PaymentStatus(target)
        if target not in PAYMENT_TRANSITIONS[self.payment_status]:
            raise InvalidStatusTransition(
                "bill", self.payment_status.value, target.value
            )
        return replace(self, payment_status=target)


@dataclass
class ConsultationNote:
    """Doctor's note attached to a patient (and optionally an appointment)."""

    doctor_id: str
    patient_id: str
    notes: str
    id: str = field(default_factory=lambda: new_id("note"))
    appointment_id: Optional[str] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    created_at: datetime = field(default_factory=local_now)

    def __post_init__(self):
        if not self.patient_id:
            raise ValueError("Patient is required")
        if not self.notes or not self.notes.strip():
            raise ValueError("Note text cannot be empty")
