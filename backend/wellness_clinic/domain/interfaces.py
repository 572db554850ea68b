"""
Abstract interfaces for repositories following Interface Segregation Principle.

These interfaces define contracts without implementation details,
enabling dependency injection and easier testing. The core never touches
module-level collections; it only talks to these.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional

from .entities import (
    Appointment,
    Bill,
    Branch,
    ConsultationNote,
    Doctor,
    Patient,
    WellnessPackage,
)


class IBranchReader(ABC):
    """Interface for branch read operations."""

    @abstractmethod
    def get_by_id(self, branch_id: str) -> Optional[Branch]:
        """Get branch by ID."""
        pass

    @abstractmethod
    def list_all(self) -> List[Branch]:
        """List every branch, active or not."""
        pass


class IDoctorReader(ABC):
    """Interface for doctor read operations."""

    @abstractmethod
    def get_by_id(self, doctor_id: str) -> Optional[Doctor]:
        """Get doctor by ID."""
        pass

    @abstractmethod
    def list_by_branch(self, branch_id: str) -> List[Doctor]:
        """Get doctors affiliated with a branch."""
        pass

    @abstractmethod
    def list_all(self) -> List[Doctor]:
        pass


class IPackageReader(ABC):
    """Interface for wellness package read operations."""

    @abstractmethod
    def get_by_id(self, package_id: str) -> Optional[WellnessPackage]:
        pass

    @abstractmethod
    def list_all(self) -> List[WellnessPackage]:
        pass


class IPatientReader(ABC):
    """Interface for patient read operations."""

    @abstractmethod
    def get_by_id(self, patient_id: str) -> Optional[Patient]:
        pass

    @abstractmethod
    def list_all(self) -> List[Patient]:
        pass


class IPatientWriter(ABC):
    """Interface for patient write operations."""

    @abstractmethod
    def create(self, patient: Patient) -> Patient:
        pass

    @abstractmethod
    def update(self, patient: Patient) -> Patient:
        pass


class IPatientRepository(IPatientReader, IPatientWriter):
    """Complete patient repository interface."""

    pass


class IAppointmentReader(ABC):
    """Interface for appointment read operations."""

    @abstractmethod
    def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Get appointment by ID."""
        pass

    @abstractmethod
    def find_conflict(
        self, doctor_id: str, appointment_datetime: datetime
    ) -> Optional[Appointment]:
        """Return the booked appointment holding doctor at that exact time, if any."""
        pass

    @abstractmethod
    def list_for_doctor_on(self, doctor_id: str, day: date) -> List[Appointment]:
        """All appointments of a doctor on a day, any status."""
        pass

    @abstractmethod
    def count_for_branch_date(self, branch_id: str, day: date) -> int:
        """Count every appointment ever recorded at branch on day, cancelled included."""
        pass

    @abstractmethod
    def list_all(self) -> List[Appointment]:
        pass


class IAppointmentWriter(ABC):
    """Interface for appointment write operations."""

    @abstractmethod
    def append(self, appointment: Appointment) -> Appointment:
        """Persist a new appointment. Appointments are never deleted."""
        pass

    @abstractmethod
    def update(self, appointment: Appointment) -> Appointment:
        """Persist a status change of an existing appointment."""
        pass

    @abstractmethod
    def cancel_and_append(
        self, cancelled: Appointment, replacement: Appointment
    ) -> Appointment:
        """Store `cancelled` and insert `replacement` together, or neither."""
        pass


class IAppointmentRepository(IAppointmentReader, IAppointmentWriter):
    """Complete appointment repository interface."""

    pass


class IBillReader(ABC):
    """Interface for bill read operations."""

    @abstractmethod
    def get_by_id(self, bill_id: str) -> Optional[Bill]:
        pass

    @abstractmethod
    def list_all(self) -> List[Bill]:
        pass


class IBillWriter(ABC):
    """Interface for bill write operations."""

    @abstractmethod
    def append(self, bill: Bill) -> Bill:
        pass

    @abstractmethod
    def update(self, bill: Bill) -> Bill:
        pass


class IBillRepository(IBillReader, IBillWriter):
    """Complete bill repository interface."""

    pass


class IConsultationNoteRepository(ABC):
    """Interface for consultation notes (health records)."""

    @abstractmethod
    def append(self, note: ConsultationNote) -> ConsultationNote:
        pass

    @abstractmethod
    def list_all(self) -> List[ConsultationNote]:
        pass

    @abstractmethod
    def list_for_patient(self, patient_id: str) -> List[ConsultationNote]:
        pass
