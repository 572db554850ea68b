"""
Demo data and database seeding.

build_demo_data() returns the reference clinic: three branches, four doctors,
four patients, five packages, four appointments, three bills and two
consultation notes. Bills are priced through the pricing engine, never typed
in, so they always reconcile.

seed_database() writes the appointments and bills into the SQL tables. It is
idempotent: rows whose id already exists are left alone.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from wellness_clinic.db.base import AppointmentRecord, BillRecord
from wellness_clinic.domain.entities import (
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
    ServiceType,
    WellnessPackage,
)
from wellness_clinic.repositories.appointment_repo import AppointmentRepository
from wellness_clinic.repositories.bill_repo import BillRepository
from wellness_clinic.services.pricing_service import PricingService

logger = logging.getLogger(__name__)


@dataclass
class DemoData:
    branches: List[Branch] = field(default_factory=list)
    doctors: List[Doctor] = field(default_factory=list)
    patients: List[Patient] = field(default_factory=list)
    packages: List[WellnessPackage] = field(default_factory=list)
    appointments: List[Appointment] = field(default_factory=list)
    bills: List[Bill] = field(default_factory=list)
    notes: List[ConsultationNote] = field(default_factory=list)


def _branches() -> List[Branch]:
    return [
        Branch(
            id="branch-1",
            name="MWN Central Clinic",
            branch_code="C",
            address="123 Wellness Avenue, London, EC1A 1BB",
            phone="+44 20 7123 4567",
            email="central@mwn.health",
        ),
        Branch(
            id="branch-2",
            name="MWN North Branch",
            branch_code="N",
            address="45 Health Street, Manchester, M1 2AB",
            phone="+44 161 234 5678",
            email="north@mwn.health",
        ),
        Branch(
            id="branch-3",
            name="MWN South Wellness Center",
            branch_code="S",
            address="78 Care Road, Brighton, BN1 1AA",
            phone="+44 1273 456 789",
            email="south@mwn.health",
        ),
    ]


def _doctors() -> List[Doctor]:
    return [
        Doctor(
            id="doc-1",
            first_name="Sarah",
            last_name="Williams",
            branch_id="branch-1",
            specializations=frozenset(
                {ServiceType.WELLNESS_CONSULTATION, ServiceType.STRESS_MANAGEMENT}
            ),
            consultation_fee=Decimal("85"),
            email="sarah.williams@mwn.health",
            phone="+44 7700 900001",
        ),
        Doctor(
            id="doc-2",
            first_name="James",
            last_name="Chen",
            branch_id="branch-1",
            specializations=frozenset({ServiceType.NUTRITION, ServiceType.DETOX}),
            consultation_fee=Decimal("75"),
            email="james.chen@mwn.health",
            phone="+44 7700 900002",
        ),
        Doctor(
            id="doc-3",
            first_name="Emily",
            last_name="Thompson",
            branch_id="branch-2",
            specializations=frozenset(
                {ServiceType.FITNESS, ServiceType.HEALTH_CHECKUP}
            ),
            consultation_fee=Decimal("80"),
            email="emily.thompson@mwn.health",
            phone="+44 7700 900003",
        ),
        Doctor(
            id="doc-4",
            first_name="Michael",
            last_name="Patel",
            branch_id="branch-3",
            specializations=frozenset(
                {ServiceType.WELLNESS_CONSULTATION, ServiceType.NUTRITION}
            ),
            is_available=False,
            consultation_fee=Decimal("90"),
            email="michael.patel@mwn.health",
            phone="+44 7700 900004",
        ),
    ]


def _patients() -> List[Patient]:
    return [
        Patient(
            id="patient-1",
            first_name="Emma",
            last_name="Johnson",
            email="emma.johnson@email.com",
            phone="+44 7800 100001",
            date_of_birth=date(1985, 3, 15),
            gender=Gender.FEMALE,
            address="10 Oak Street, London, SE1 2AB",
            membership_tier=MembershipTier.GOLD,
            membership_expiry=date(2026, 12, 31),
            medical_history="No significant history",
            allergies="Penicillin",
            created_at=date(2024, 1, 15),
        ),
        Patient(
            id="patient-2",
            first_name="Oliver",
            last_name="Smith",
            email="oliver.smith@email.com",
            phone="+44 7800 100002",
            date_of_birth=date(1990, 7, 22),
            gender=Gender.MALE,
            address="25 Maple Avenue, Manchester, M2 3CD",
            membership_tier=MembershipTier.PLATINUM,
            membership_expiry=date(2027, 6, 30),
            medical_history="Mild asthma",
            created_at=date(2024, 2, 20),
        ),
        Patient(
            id="patient-3",
            first_name="Sophie",
            last_name="Brown",
            email="sophie.brown@email.com",
            phone="+44 7800 100003",
            date_of_birth=date(1978, 11, 8),
            gender=Gender.FEMALE,
            address="42 Pine Road, Brighton, BN2 4EF",
            membership_tier=MembershipTier.SILVER,
            membership_expiry=date(2026, 3, 15),
            created_at=date(2024, 3, 10),
        ),
        Patient(
            id="patient-4",
            first_name="William",
            last_name="Taylor",
            email="william.taylor@email.com",
            phone="+44 7800 100004",
            date_of_birth=date(1995, 5, 30),
            gender=Gender.MALE,
            address="88 Cedar Lane, London, W1 5GH",
            created_at=date(2024, 4, 5),
        ),
    ]


def _packages() -> List[WellnessPackage]:
    rows = [
        ("pkg-1", "Essential Wellness", ServiceType.WELLNESS_CONSULTATION, 4, "85", "0.10", 60,
         "Basic wellness consultation package with 4 sessions"),
        ("pkg-2", "Nutrition Pro", ServiceType.NUTRITION, 8, "75", "0.15", 90,
         "Comprehensive nutrition program with personalized meal plans"),
        ("pkg-3", "Fitness Transformation", ServiceType.FITNESS, 12, "65", "0.20", 120,
         "Intensive fitness training with progress tracking"),
        ("pkg-4", "Complete Detox", ServiceType.DETOX, 6, "95", "0.12", 30,
         "21-day guided detox program with supplements"),
        ("pkg-5", "Stress Relief", ServiceType.STRESS_MANAGEMENT, 10, "70", "0.15", 90,
         "Mindfulness and stress management sessions"),
    ]  # fmt: skip
    return [
        WellnessPackage(
            id=pkg_id,
            name=name,
            service_type=service,
            sessions_included=sessions,
            session_price=Decimal(price),
            package_discount=Decimal(discount),
            validity_days=validity,
            description=description,
        )
        for pkg_id, name, service, sessions, price, discount, validity, description in rows
    ]


def _appointments() -> List[Appointment]:
    return [
        Appointment(
            id="apt-1",
            patient_id="patient-1",
            doctor_id="doc-1",
            branch_id="branch-1",
            service_type=ServiceType.WELLNESS_CONSULTATION,
            appointment_datetime=datetime(2026, 1, 20, 9, 0),
            token="MWN-C-20260120-001",
            created_at=datetime(2026, 1, 18),
        ),
        Appointment(
            id="apt-2",
            patient_id="patient-2",
            doctor_id="doc-2",
            branch_id="branch-1",
            service_type=ServiceType.NUTRITION,
            appointment_datetime=datetime(2026, 1, 20, 10, 30),
            token="MWN-C-20260120-002",
            created_at=datetime(2026, 1, 18),
        ),
        Appointment(
            id="apt-3",
            patient_id="patient-3",
            doctor_id="doc-3",
            branch_id="branch-2",
            service_type=ServiceType.FITNESS,
            appointment_datetime=datetime(2026, 1, 19, 14, 0),
            token="MWN-N-20260119-001",
            status=AppointmentStatus.COMPLETED,
            notes="Follow-up in 2 weeks recommended",
            created_at=datetime(2026, 1, 17),
        ),
        Appointment(
            id="apt-4",
            patient_id="patient-4",
            doctor_id="doc-1",
            branch_id="branch-1",
            service_type=ServiceType.STRESS_MANAGEMENT,
            appointment_datetime=datetime(2026, 1, 18, 16, 0),
            token="MWN-C-20260118-003",
            status=AppointmentStatus.CANCELLED,
            created_at=datetime(2026, 1, 16),
        ),
    ]


def _notes() -> List[ConsultationNote]:
    return [
        ConsultationNote(
            id="note-1",
            appointment_id="apt-3",
            doctor_id="doc-3",
            patient_id="patient-3",
            notes=(
                "Patient reports improved energy levels after following the "
                "prescribed fitness routine. Continue with current plan."
            ),
            diagnosis="General wellness assessment - positive progress",
            prescription="Continue with current exercise routine. Increase water intake.",
            created_at=datetime(2026, 1, 19, 14, 30),
        ),
        ConsultationNote(
            id="note-2",
            appointment_id="apt-1",
            doctor_id="doc-1",
            patient_id="patient-1",
            notes=(
                "Initial wellness consultation. Patient interested in stress "
                "management techniques."
            ),
            diagnosis="Mild occupational stress",
            prescription="Recommended 8 weeks of stress management program.",
            created_at=datetime(2026, 1, 17, 10, 0),
        ),
    ]


def build_demo_data(pricing: Optional[PricingService] = None) -> DemoData:
    """Build the reference clinic with every bill priced by the engine."""
    pricing = pricing or PricingService()
    data = DemoData(
        branches=_branches(),
        doctors=_doctors(),
        patients=_patients(),
        packages=_packages(),
        appointments=_appointments(),
        notes=_notes(),
    )
    patients = {p.id: p for p in data.patients}
    packages = {p.id: p for p in data.packages}
    doctors = {d.id: d for d in data.doctors}

    essential = pricing.quote_package(
        packages["pkg-1"], 4, patients["patient-1"].membership_tier
    )
    nutrition = pricing.quote_package(
        packages["pkg-2"], 8, patients["patient-2"].membership_tier
    )
    consultation = pricing.quote_consultation(
        doctors["doc-3"], patients["patient-3"].membership_tier
    )
    data.bills = [
        Bill.from_breakdown(
            essential,
            patient_id="patient-1",
            appointment_id="apt-1",
            package_id="pkg-1",
            bill_date=date(2026, 1, 18),
            bill_id="bill-1",
        ).transition_to(PaymentStatus.PAID),
        Bill.from_breakdown(
            nutrition,
            patient_id="patient-2",
            package_id="pkg-2",
            bill_date=date(2026, 1, 17),
            bill_id="bill-2",
        ).transition_to(PaymentStatus.PAID),
        Bill.from_breakdown(
            consultation,
            patient_id="patient-3",
            appointment_id="apt-3",
            bill_date=date(2026, 1, 19),
            bill_id="bill-3",
        ),
    ]
    return data


def seed_database(db, data: Optional[DemoData] = None) -> int:
    """Insert demo appointments and bills that are not there yet.

    Returns the number of rows inserted.
    """
    data = data or build_demo_data()
    appointments = AppointmentRepository(db)
    bills = BillRepository(db)
    inserted = 0

    for appointment in data.appointments:
        if db.get(AppointmentRecord, appointment.id) is None:
            appointments.append(appointment)
            inserted += 1
    for bill in data.bills:
        if db.get(BillRecord, bill.id) is None:
            bills.append(bill)
            inserted += 1

    logger.info(
        "Demo data seeded",
        extra={"context": {"rows_inserted": inserted}},
    )
    return inserted
