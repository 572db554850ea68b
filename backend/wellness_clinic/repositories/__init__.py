"""
Repository implementations.

- memory_repositories: process-local collections (demo data, unit tests)
- appointment_repo / bill_repo: SQLAlchemy-backed appointments and bills
"""

from .appointment_repo import AppointmentRepository
from .bill_repo import BillRepository
from .memory_repositories import (
    InMemoryAppointmentRepository,
    InMemoryBillRepository,
    InMemoryBranchRepository,
    InMemoryConsultationNoteRepository,
    InMemoryDoctorRepository,
    InMemoryPackageRepository,
    InMemoryPatientRepository,
)

__all__ = [
    "AppointmentRepository",
    "BillRepository",
    "InMemoryAppointmentRepository",
    "InMemoryBillRepository",
    "InMemoryBranchRepository",
    "InMemoryConsultationNoteRepository",
    "InMemoryDoctorRepository",
    "InMemoryPackageRepository",
    "InMemoryPatientRepository",
]
