"""
Billing service for package sales and consultation invoices.

This service:
- Prices everything through PricingService, so a bill's amounts always follow
  from its own rates and gross amount
- Depends on repository abstractions injected by the caller
- Moves bills through the payment state machine; bills are never deleted
"""

import logging
import threading
from datetime import date
from typing import List, Optional

from wellness_clinic.core.config import (
    PACKAGE_SESSION_POLICY,
    SESSION_POLICIES,
    SESSION_POLICY_CAP,
)
from wellness_clinic.core.exceptions import (
    InvalidQuantity,
    NotFoundError,
    PackageUnavailable,
    SessionLimitExceeded,
    ValidationError,
)
from wellness_clinic.domain.entities import Bill, PaymentStatus, PriceBreakdown
from wellness_clinic.domain.interfaces import (
    IAppointmentReader,
    IBillRepository,
    IDoctorReader,
    IPackageReader,
    IPatientReader,
)
from wellness_clinic.schemas.dtos import PackagePurchaseRequest
from wellness_clinic.services.pricing_service import PricingService

logger = logging.getLogger(__name__)


class BillingService:
    """Application service for billing use-cases."""

    def __init__(
        self,
        bill_repo: IBillRepository,
        package_repo: IPackageReader,
        patient_repo: IPatientReader,
        doctor_repo: IDoctorReader,
        appointment_repo: IAppointmentReader,
        pricing: Optional[PricingService] = None,
        session_policy: str = PACKAGE_SESSION_POLICY,
    ) -> None:
        if session_policy not in SESSION_POLICIES:
            raise ValueError(f"Unknown session policy '{session_policy}'")
        self.bill_repo = bill_repo
        self.package_repo = package_repo
        self.patient_repo = patient_repo
        self.doctor_repo = doctor_repo
        self.appointment_repo = appointment_repo
        self.pricing = pricing or PricingService()
        self.session_policy = session_policy
        self._lock = threading.Lock()

    def _patient(self, patient_id: str):
        patient = self.patient_repo.get_by_id(patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        return patient

    def get(self, bill_id: str) -> Bill:
        bill = self.bill_repo.get_by_id(bill_id)
        if bill is None:
            raise NotFoundError(f"Bill {bill_id} not found")
        return bill

    def quote_package(
        self, package_id: str, sessions: int, patient_id: Optional[str] = None
    ) -> PriceBreakdown:
        """Price a package purchase without recording anything."""
        package = self.package_repo.get_by_id(package_id)
        if package is None:
            raise NotFoundError(f"Package {package_id} not found")
        tier = self._patient(patient_id).membership_tier if patient_id else "none"
        return self.pricing.quote_package(package, sessions, tier)

    def purchase_package(
        self,
        request: PackagePurchaseRequest,
        bill_date: Optional[date] = None,
    ) -> Bill:
        """Sell sessions of a package to a patient and record a pending bill.

        Raises:
            PackageUnavailable: the package does not exist or is inactive
            InvalidQuantity: sessions is not a positive integer
            SessionLimitExceeded: more sessions than the package includes
                under the "reject" policy
        """
        request.validate()
        patient = self._patient(request.patient_id)
        package = self.package_repo.get_by_id(request.package_id)
        if package is None or not package.is_active:
            raise PackageUnavailable(f"Package {request.package_id} is not available")

        sessions = request.sessions
        if isinstance(sessions, bool) or not isinstance(sessions, int) or sessions < 1:
            raise InvalidQuantity(f"Sessions must be a positive integer, got {sessions!r}")
        if sessions > package.sessions_included:
            if self.session_policy == SESSION_POLICY_CAP:
                logger.info(
                    "Package sessions capped",
                    extra={
                        "context": {
                            "package_id": package.id,
                            "requested": sessions,
                            "included": package.sessions_included,
                        }
                    },
                )
                sessions = package.sessions_included
            else:
                raise SessionLimitExceeded(
                    f"{package.name} includes {package.sessions_included} sessions, "
                    f"{sessions} requested"
                )

        breakdown = self.pricing.quote_package(package, sessions, patient.membership_tier)
        bill = Bill.from_breakdown(
            breakdown,
            patient_id=patient.id,
            package_id=package.id,
            bill_date=bill_date,
        )
        with self._lock:
            saved = self.bill_repo.append(bill)

        logger.info(
            "Package purchased",
            extra={
                "context": {
                    "bill_id": saved.id,
                    "patient_id": patient.id,
                    "package_id": package.id,
                    "sessions": sessions,
                    "final_amount": str(saved.final_amount),
                }
            },
        )
        return saved

    def bill_appointment(
        self, appointment_id: str, bill_date: Optional[date] = None
    ) -> Bill:
        """Invoice one consultation at the doctor's fee with the patient's tier."""
        appointment = self.appointment_repo.get_by_id(appointment_id)
        if appointment is None:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        doctor = self.doctor_repo.get_by_id(appointment.doctor_id)
        if doctor is None:
            raise NotFoundError(f"Doctor {appointment.doctor_id} not found")
        patient = self._patient(appointment.patient_id)

        breakdown = self.pricing.quote_consultation(doctor, patient.membership_tier)
        bill = Bill.from_breakdown(
            breakdown,
            patient_id=patient.id,
            appointment_id=appointment.id,
            bill_date=bill_date,
        )
        with self._lock:
            saved = self.bill_repo.append(bill)

        logger.info(
            "Consultation billed",
            extra={
                "context": {
                    "bill_id": saved.id,
                    "appointment_id": appointment.id,
                    "final_amount": str(saved.final_amount),
                }
            },
        )
        return saved

    def _transition(self, bill_id: str, target: PaymentStatus) -> Bill:
        with self._lock:
            current = self.get(bill_id)
            saved = self.bill_repo.update(current.transition_to(target))
        logger.info(
            "Bill status changed",
            extra={
                "context": {
                    "bill_id": bill_id,
                    "from": current.payment_status.value,
                    "to": saved.payment_status.value,
                }
            },
        )
        return saved

    def mark_paid(self, bill_id: str) -> Bill:
        return self._transition(bill_id, PaymentStatus.PAID)

    def void(self, bill_id: str) -> Bill:
        return self._transition(bill_id, PaymentStatus.VOID)

    def refund(self, bill_id: str) -> Bill:
        return self._transition(bill_id, PaymentStatus.REFUNDED)

    def search(self, term: str = "", status: Optional[str] = None) -> List[Bill]:
        """Filter by bill id or patient id (case-insensitive) and optional status.

        Newest bills first.
        """
        term = (term or "").strip().lower()
        wanted = None
        if status and status != "all":
            try:
                wanted = PaymentStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status '{status}'", field="status")
        results = [
            bill
            for bill in self.bill_repo.list_all()
            if (wanted is None or bill.payment_status == wanted)
            and (
                not term
                or term in bill.id.lower()
                or term in bill.patient_id.lower()
            )
        ]
        return sorted(results, key=lambda b: (b.bill_date, b.id), reverse=True)

    def bills_for_patient(self, patient_id: str) -> List[Bill]:
        self._patient(patient_id)
        return [b for b in self.search() if b.patient_id == patient_id]
