"""
Schemas package - Data Transfer Objects and validation.

This package contains the request DTOs handed to the services and the
response DTOs the controllers serialize.
"""

from .dtos import (
    AppointmentResponse,
    BillResponse,
    BookingRequest,
    ConsultationNoteRequest,
    ConsultationNoteResponse,
    DoctorResponse,
    PackagePurchaseRequest,
    PackageResponse,
    PatientRegistrationRequest,
    PatientResponse,
    RescheduleRequest,
    SlotResponse,
)

__all__ = [
    # Request DTOs
    "BookingRequest",
    "RescheduleRequest",
    "PackagePurchaseRequest",
    "PatientRegistrationRequest",
    "ConsultationNoteRequest",
    # Response DTOs
    "AppointmentResponse",
    "BillResponse",
    "ConsultationNoteResponse",
    "DoctorResponse",
    "PackageResponse",
    "PatientResponse",
    "SlotResponse",
]
