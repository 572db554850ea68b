"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities, enumerations and fixed rate tables
- interfaces.py: Repository contracts injected into the services
"""

from .entities import (
    MEMBERSHIP_DISCOUNTS,
    SERVICE_LABELS,
    Appointment,
    AppointmentStatus,
    Bill,
    Branch,
    ConsultationNote,
    Doctor,
    Gender,
    MembershipTier,
    Patient,
    PaymentStatus,
    PriceBreakdown,
    ServiceType,
    TimeSlot,
    UserRole,
    WellnessPackage,
)
from .interfaces import (
    IAppointmentReader,
    IAppointmentRepository,
    IAppointmentWriter,
    IBillReader,
    IBillRepository,
    IBillWriter,
    IBranchReader,
    IConsultationNoteRepository,
    IDoctorReader,
    IPackageReader,
    IPatientReader,
    IPatientRepository,
    IPatientWriter,
)

__all__ = [
    # Domain entities
    "Appointment",
    "Bill",
    "Branch",
    "ConsultationNote",
    "Doctor",
    "Patient",
    "PriceBreakdown",
    "TimeSlot",
    "WellnessPackage",
    # Enumerations and rate tables
    "AppointmentStatus",
    "Gender",
    "MembershipTier",
    "PaymentStatus",
    "ServiceType",
    "UserRole",
    "MEMBERSHIP_DISCOUNTS",
    "SERVICE_LABELS",
    # Repository interfaces
    "IAppointmentRepository",
    "IBillRepository",
    "IPatientRepository",
    "IConsultationNoteRepository",
    # Segregated interfaces
    "IAppointmentReader",
    "IAppointmentWriter",
    "IBillReader",
    "IBillWriter",
    "IBranchReader",
    "IDoctorReader",
    "IPackageReader",
    "IPatientReader",
    "IPatientWriter",
]
