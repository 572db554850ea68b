"""
Unit tests for BillingService: package purchases, consultation bills and
the payment state machine.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from wellness_clinic.core.config import SESSION_POLICY_CAP
from wellness_clinic.core.exceptions import (
    InvalidQuantity,
    InvalidStatusTransition,
    NotFoundError,
    PackageUnavailable,
    SessionLimitExceeded,
    ValidationError,
)
from wellness_clinic.domain.entities import PaymentStatus
from wellness_clinic.repositories import (
    InMemoryAppointmentRepository,
    InMemoryBillRepository,
    InMemoryDoctorRepository,
    InMemoryPackageRepository,
    InMemoryPatientRepository,
)
from wellness_clinic.schemas.dtos import PackagePurchaseRequest
from wellness_clinic.services.billing_service import BillingService
from wellness_clinic.services.pricing_service import PricingService


def billing_for(demo_data, **kwargs) -> BillingService:
    return BillingService(
        InMemoryBillRepository(demo_data.bills),
        InMemoryPackageRepository(demo_data.packages),
        InMemoryPatientRepository(demo_data.patients),
        InMemoryDoctorRepository(demo_data.doctors),
        InMemoryAppointmentRepository(demo_data.appointments),
        pricing=PricingService(tax_rate="0.08"),
        **kwargs,
    )


@pytest.mark.unit
@pytest.mark.billing
@pytest.mark.services
class TestPurchasePackage:
    def test_purchase_prices_with_patient_tier(self, billing_service):
        bill = billing_service.purchase_package(
            PackagePurchaseRequest("patient-2", "pkg-2", 8), bill_date=date(2026, 2, 1)
        )

        assert bill.gross_amount == Decimal("600.00")
        assert bill.membership_discount_rate == Decimal("0.15")
        assert bill.tax_amount == Decimal("34.68")
        assert bill.final_amount == Decimal("468.18")
        assert bill.payment_status == PaymentStatus.PENDING
        assert bill.package_id == "pkg-2"
        assert bill.bill_date == date(2026, 2, 1)
        assert billing_service.get(bill.id) == bill

    def test_fewer_sessions_than_included(self, billing_service):
        bill = billing_service.purchase_package(
            PackagePurchaseRequest("patient-4", "pkg-1", 2)
        )

        # 170 - 10% = 153, no membership, +8% tax
        assert bill.sessions_booked == 2
        assert bill.final_amount == Decimal("165.24")

    def test_too_many_sessions_rejected_by_default(self, billing_service):
        with pytest.raises(SessionLimitExceeded):
            billing_service.purchase_package(
                PackagePurchaseRequest("patient-1", "pkg-1", 5)
            )

    def test_too_many_sessions_capped_under_cap_policy(self, demo_data):
        service = billing_for(demo_data, session_policy=SESSION_POLICY_CAP)

        bill = service.purchase_package(PackagePurchaseRequest("patient-1", "pkg-1", 9))

        assert bill.sessions_booked == 4
        assert bill.final_amount == Decimal("297.43")

    def test_unknown_policy(self, demo_data):
        with pytest.raises(ValueError):
            billing_for(demo_data, session_policy="stretch")

    def test_inactive_package(self, demo_data):
        demo_data.packages[0] = replace(demo_data.packages[0], is_active=False)
        service = billing_for(demo_data)

        with pytest.raises(PackageUnavailable):
            service.purchase_package(PackagePurchaseRequest("patient-1", "pkg-1", 1))

    def test_unknown_package(self, billing_service):
        with pytest.raises(PackageUnavailable):
            billing_service.purchase_package(
                PackagePurchaseRequest("patient-1", "pkg-99", 1)
            )

    def test_unknown_patient(self, billing_service):
        with pytest.raises(NotFoundError):
            billing_service.purchase_package(
                PackagePurchaseRequest("patient-99", "pkg-1", 1)
            )

    @pytest.mark.parametrize("sessions", [0, -2, "3"])
    def test_bad_session_count(self, billing_service, sessions):
        with pytest.raises(InvalidQuantity):
            billing_service.purchase_package(
                PackagePurchaseRequest("patient-1", "pkg-1", sessions)
            )

    def test_missing_package_id(self, billing_service):
        with pytest.raises(ValidationError):
            billing_service.purchase_package(PackagePurchaseRequest("patient-1", "", 1))

    def test_quote_without_patient_uses_no_membership(self, billing_service):
        breakdown = billing_service.quote_package("pkg-2", 8)

        assert breakdown.rounded().final_amount == Decimal("550.80")


@pytest.mark.unit
@pytest.mark.billing
@pytest.mark.services
class TestBillAppointment:
    def test_consultation_bill(self, billing_service):
        bill = billing_service.bill_appointment("apt-3")

        assert bill.sessions_booked == 1
        assert bill.appointment_id == "apt-3"
        assert bill.package_id is None
        assert bill.gross_amount == Decimal("80.00")
        assert bill.final_amount == Decimal("82.08")

    def test_unknown_appointment(self, billing_service):
        with pytest.raises(NotFoundError):
            billing_service.bill_appointment("apt-99")


@pytest.mark.unit
@pytest.mark.billing
@pytest.mark.services
class TestPaymentStatus:
    def test_pay_then_refund(self, billing_service):
        assert billing_service.mark_paid("bill-3").payment_status == PaymentStatus.PAID
        assert billing_service.refund("bill-3").payment_status == PaymentStatus.REFUNDED

    def test_void_pending(self, billing_service):
        assert billing_service.void("bill-3").payment_status == PaymentStatus.VOID

    def test_cannot_pay_void_bill(self, billing_service):
        billing_service.void("bill-3")

        with pytest.raises(InvalidStatusTransition):
            billing_service.mark_paid("bill-3")

    def test_cannot_refund_pending_bill(self, billing_service):
        with pytest.raises(InvalidStatusTransition):
            billing_service.refund("bill-3")

    def test_cannot_void_paid_bill(self, billing_service):
        with pytest.raises(InvalidStatusTransition):
            billing_service.void("bill-1")

    def test_failed_transition_leaves_bill_unchanged(self, billing_service):
        with pytest.raises(InvalidStatusTransition):
            billing_service.mark_paid("bill-1")

        assert billing_service.get("bill-1").payment_status == PaymentStatus.PAID

    def test_unknown_bill(self, billing_service):
        with pytest.raises(NotFoundError):
            billing_service.mark_paid("bill-99")


@pytest.mark.unit
@pytest.mark.billing
@pytest.mark.services
class TestBillSearch:
    def test_newest_first(self, billing_service):
        assert [b.id for b in billing_service.search()] == ["bill-3", "bill-1", "bill-2"]

    def test_filter_by_status(self, billing_service):
        assert [b.id for b in billing_service.search(status="pending")] == ["bill-3"]

    def test_filter_by_patient(self, billing_service):
        assert [b.id for b in billing_service.search("PATIENT-2")] == ["bill-2"]

    def test_unknown_status(self, billing_service):
        with pytest.raises(ValidationError):
            billing_service.search(status="lost")

    def test_bills_for_patient(self, billing_service):
        assert [b.id for b in billing_service.bills_for_patient("patient-1")] == [
            "bill-1"
        ]
