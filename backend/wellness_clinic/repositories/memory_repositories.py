"""
In-memory repository implementations.

These hold the canonical collections for the demo deployment and for unit
tests. Entities are copied on the way in and on the way out so callers only
ever hold snapshots; the only way to change stored state is append/update.
"""

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Generic, Iterable, List, Optional, TypeVar

from wellness_clinic.domain.entities import (
    Appointment,
    Bill,
    Branch,
    ConsultationNote,
    Doctor,
    Patient,
    WellnessPackage,
)
from wellness_clinic.domain.interfaces import (
    IAppointmentRepository,
    IBillRepository,
    IBranchReader,
    IConsultationNoteRepository,
    IDoctorReader,
    IPackageReader,
    IPatientRepository,
)

T = TypeVar("T")


class _Store(Generic[T]):
    """Insertion-ordered id -> entity map guarded by a lock."""

    def __init__(self, items: Iterable[T] = ()):
        self._items: Dict[str, T] = {}
        self._lock = threading.Lock()
        for item in items:
            self._items[item.id] = replace(item)

    def get(self, item_id: str) -> Optional[T]:
        with self._lock:
            item = self._items.get(item_id)
            return replace(item) if item is not None else None

    def values(self) -> List[T]:
        with self._lock:
            return [replace(item) for item in self._items.values()]

    def add(self, item: T) -> T:
        with self._lock:
            if item.id in self._items:
                raise ValueError(f"Duplicate id {item.id}")
            self._items[item.id] = replace(item)
        return replace(item)

    def put(self, item: T) -> T:
        with self._lock:
            if item.id not in self._items:
                raise ValueError(f"Unknown id {item.id}")
            self._items[item.id] = replace(item)
        return replace(item)

    def put_and_add(self, existing: T, new: T) -> T:
        with self._lock:
            if existing.id not in self._items:
                raise ValueError(f"Unknown id {existing.id}")
            if new.id in self._items:
                raise ValueError(f"Duplicate id {new.id}")
            self._items[existing.id] = replace(existing)
            self._items[new.id] = replace(new)
        return replace(new)


class InMemoryBranchRepository(IBranchReader):
    def __init__(self, branches: Iterable[Branch] = ()):
        self._store: _Store[Branch] = _Store(branches)

    def get_by_id(self, branch_id: str) -> Optional[Branch]:
        return self._store.get(branch_id)

    def list_all(self) -> List[Branch]:
        return self._store.values()


class InMemoryDoctorRepository(IDoctorReader):
    def __init__(self, doctors: Iterable[Doctor] = ()):
        self._store: _Store[Doctor] = _Store(doctors)

    def get_by_id(self, doctor_id: str) -> Optional[Doctor]:
        return self._store.get(doctor_id)

    def list_by_branch(self, branch_id: str) -> List[Doctor]:
        return [d for d in self._store.values() if d.branch_id == branch_id]

    def list_all(self) -> List[Doctor]:
        return self._store.values()


class InMemoryPackageRepository(IPackageReader):
    def __init__(self, packages: Iterable[WellnessPackage] = ()):
        self._store: _Store[WellnessPackage] = _Store(packages)

    def get_by_id(self, package_id: str) -> Optional[WellnessPackage]:
        return self._store.get(package_id)

    def list_all(self) -> List[WellnessPackage]:
        return self._store.values()


class InMemoryPatientRepository(IPatientRepository):
    def __init__(self, patients: Iterable[Patient] = ()):
        self._store: _Store[Patient] = _Store(patients)

    def get_by_id(self, patient_id: str) -> Optional[Patient]:
        return self._store.get(patient_id)

    def list_all(self) -> List[Patient]:
        return self._store.values()

    def create(self, patient: Patient) -> Patient:
        return self._store.add(patient)

    def update(self, patient: Patient) -> Patient:
        return self._store.put(patient)


class InMemoryAppointmentRepository(IAppointmentRepository):
    """Repository for Appointment records kept in process memory."""

    def __init__(self, appointments: Iterable[Appointment] = ()):
        self._store: _Store[Appointment] = _Store(appointments)

    def get_by_id(self, appointment_id: str) -> Optional[Appointment]:
        return self._store.get(appointment_id)

    def find_conflict(
        self, doctor_id: str, appointment_datetime: datetime
    ) -> Optional[Appointment]:
        for appointment in self._store.values():
            if appointment.occupies(doctor_id, appointment_datetime):
                return appointment
        return None

    def list_for_doctor_on(self, doctor_id: str, day: date) -> List[Appointment]:
        return [
            a for a in self._store.values() if a.doctor_id == doctor_id and a.date == day
        ]

    def count_for_branch_date(self, branch_id: str, day: date) -> int:
        return sum(
            1 for a in self._store.values() if a.branch_id == branch_id and a.date == day
        )

    def list_all(self) -> List[Appointment]:
        return self._store.values()

    def append(self, appointment: Appointment) -> Appointment:
        return self._store.add(appointment)

    def update(self, appointment: Appointment) -> Appointment:
        return self._store.put(appointment)

    def cancel_and_append(
        self, cancelled: Appointment, replacement: Appointment
    ) -> Appointment:
        return self._store.put_and_add(cancelled, replacement)


class InMemoryBillRepository(IBillRepository):
    def __init__(self, bills: Iterable[Bill] = ()):
        self._store: _Store[Bill] = _Store(bills)

    def get_by_id(self, bill_id: str) -> Optional[Bill]:
        return self._store.get(bill_id)

    def list_all(self) -> List[Bill]:
        return self._store.values()

    def append(self, bill: Bill) -> Bill:
        return self._store.add(bill)

    def update(self, bill: Bill) -> Bill:
        return self._store.put(bill)


class InMemoryConsultationNoteRepository(IConsultationNoteRepository):
    def __init__(self, notes: Iterable[ConsultationNote] = ()):
        self._store: _Store[ConsultationNote] = _Store(notes)

    def append(self, note: ConsultationNote) -> ConsultationNote:
        return self._store.add(note)

    def list_all(self) -> List[ConsultationNote]:
        return self._store.values()

    def list_for_patient(self, patient_id: str) -> List[ConsultationNote]:
        return [n for n in self._store.values() if n.patient_id == patient_id]
