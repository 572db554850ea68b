"""
Repository test factories following Interface Segregation Principle.

This module provides mock factories for repository interfaces, ensuring
tests only depend on the specific interfaces they need, plus builders for
domain entities with sensible defaults.
"""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import Mock

from wellness_clinic.domain.entities import (
    Appointment,
    AppointmentStatus,
    Branch,
    Doctor,
    MembershipTier,
    Patient,
    ServiceType,
    WellnessPackage,
)
from wellness_clinic.domain.interfaces import (
    IAppointmentRepository,
    IBillRepository,
    IBranchReader,
    IDoctorReader,
    IPackageReader,
    IPatientRepository,
)


class AppointmentRepositoryFactory:
    """Factory for creating Appointment repository mocks."""

    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IAppointmentRepository)

        # Set up default return values for read operations
        mock_repo.get_by_id.return_value = None
        mock_repo.find_conflict.return_value = None
        mock_repo.list_for_doctor_on.return_value = []
        mock_repo.count_for_branch_date.return_value = 0
        mock_repo.list_all.return_value = []

        # Writes echo the entity back
        mock_repo.append.side_effect = lambda appointment: appointment
        mock_repo.update.side_effect = lambda appointment: appointment
        mock_repo.cancel_and_append.side_effect = lambda cancelled, new: new

        return mock_repo


class BillRepositoryFactory:
    """Factory for creating Bill repository mocks."""

    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IBillRepository)
        mock_repo.get_by_id.return_value = None
        mock_repo.list_all.return_value = []
        mock_repo.append.side_effect = lambda bill: bill
        mock_repo.update.side_effect = lambda bill: bill
        return mock_repo


class ReaderFactory:
    """Factory for the read-only reference data repositories."""

    @staticmethod
    def branches(*branches: Branch) -> Mock:
        mock_reader = Mock(spec=IBranchReader)
        by_id = {b.id: b for b in branches}
        mock_reader.get_by_id.side_effect = by_id.get
        mock_reader.list_all.return_value = list(branches)
        return mock_reader

    @staticmethod
    def doctors(*doctors: Doctor) -> Mock:
        mock_reader = Mock(spec=IDoctorReader)
        by_id = {d.id: d for d in doctors}
        mock_reader.get_by_id.side_effect = by_id.get
        mock_reader.list_by_branch.side_effect = lambda branch_id: [
            d for d in doctors if d.branch_id == branch_id
        ]
        mock_reader.list_all.return_value = list(doctors)
        return mock_reader

    @staticmethod
    def packages(*packages: WellnessPackage) -> Mock:
        mock_reader = Mock(spec=IPackageReader)
        by_id = {p.id: p for p in packages}
        mock_reader.get_by_id.side_effect = by_id.get
        mock_reader.list_all.return_value = list(packages)
        return mock_reader

    @staticmethod
    def patients(*patients: Patient) -> Mock:
        mock_repo = Mock(spec=IPatientRepository)
        by_id = {p.id: p for p in patients}
        mock_repo.get_by_id.side_effect = by_id.get
        mock_repo.list_all.return_value = list(patients)
        mock_repo.create.side_effect = lambda patient: patient
        mock_repo.update.side_effect = lambda patient: patient
        return mock_repo


def make_branch(**overrides) -> Branch:
    fields = dict(id="branch-1", name="MWN Central Clinic", branch_code="C")
    fields.update(overrides)
    return Branch(**fields)


def make_doctor(**overrides) -> Doctor:
    fields = dict(
        id="doc-1",
        first_name="Sarah",
        last_name="Williams",
        branch_id="branch-1",
        specializations=frozenset({ServiceType.WELLNESS_CONSULTATION}),
        consultation_fee=Decimal("85"),
    )
    fields.update(overrides)
    return Doctor(**fields)


def make_patient(**overrides) -> Patient:
    fields = dict(
        id="patient-1",
        first_name="Emma",
        last_name="Johnson",
        email="emma.johnson@email.com",
        membership_tier=MembershipTier.GOLD,
    )
    fields.update(overrides)
    return Patient(**fields)


def make_package(**overrides) -> WellnessPackage:
    fields = dict(
        id="pkg-1",
        name="Essential Wellness",
        service_type=ServiceType.WELLNESS_CONSULTATION,
        sessions_included=4,
        session_price=Decimal("85"),
        package_discount=Decimal("0.10"),
        validity_days=60,
    )
    fields.update(overrides)
    return WellnessPackage(**fields)


def make_appointment(**overrides) -> Appointment:
    fields = dict(
        patient_id="patient-1",
        doctor_id="doc-1",
        branch_id="branch-1",
        service_type=ServiceType.WELLNESS_CONSULTATION,
        appointment_datetime=datetime(2026, 1, 20, 9, 0),
        token="MWN-C-20260120-001",
        status=AppointmentStatus.BOOKED,
    )
    fields.update(overrides)
    return Appointment(**fields)


DAY = date(2026, 1, 20)
