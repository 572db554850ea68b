"""
Read-only aggregates for the dashboard, billing page and reports page.

Revenue always means the sum of final amounts of paid bills. Money totals
are summed from the stored (already rounded) bill amounts and returned as
2 dp Decimals.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from wellness_clinic.core.config import local_today
from wellness_clinic.domain.entities import (
    SERVICE_LABELS,
    AppointmentStatus,
    Bill,
    MembershipTier,
    PaymentStatus,
    ServiceType,
    round_money,
)
from wellness_clinic.domain.interfaces import (
    IAppointmentReader,
    IBillReader,
    IBranchReader,
    IPackageReader,
    IPatientReader,
)
from wellness_clinic.schemas.dtos import parse_date


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return round_money(sum(amounts, Decimal("0")))


def _paid(bills: Iterable[Bill]) -> List[Bill]:
    return [b for b in bills if b.payment_status == PaymentStatus.PAID]


@dataclass
class DashboardStats:
    total_patients: int
    booked_appointments: int
    pending_bills: int
    total_revenue: Decimal


@dataclass
class BillingSummary:
    total_revenue: Decimal
    pending_amount: Decimal
    tax_collected: Decimal
    total_bills: int


@dataclass
class PackageIncome:
    package_id: str
    package_name: str
    sales: int
    revenue: Decimal


@dataclass
class ServiceShare:
    service_type: str
    label: str
    count: int


@dataclass
class BranchPerformance:
    branch_id: str
    branch_name: str
    appointments: int
    revenue: Decimal


@dataclass
class MembershipShare:
    tier: str
    count: int
    percentage: int


class ReportService:
    def __init__(
        self,
        patient_repo: IPatientReader,
        appointment_repo: IAppointmentReader,
        bill_repo: IBillReader,
        package_repo: IPackageReader,
        branch_repo: IBranchReader,
    ) -> None:
        self.patient_repo = patient_repo
        self.appointment_repo = appointment_repo
        self.bill_repo = bill_repo
        self.package_repo = package_repo
        self.branch_repo = branch_repo

    def dashboard(self, day: Optional[date] = None) -> DashboardStats:
        """Headline numbers; booked appointments are counted for `day`."""
        day = parse_date(day) if day else local_today()
        bills = self.bill_repo.list_all()
        return DashboardStats(
            total_patients=len(self.patient_repo.list_all()),
            booked_appointments=sum(
                1
                for a in self.appointment_repo.list_all()
                if a.date == day and a.status == AppointmentStatus.BOOKED
            ),
            pending_bills=sum(
                1 for b in bills if b.payment_status == PaymentStatus.PENDING
            ),
            total_revenue=_total(b.final_amount for b in _paid(bills)),
        )

    def billing_summary(self) -> BillingSummary:
        bills = self.bill_repo.list_all()
        paid = _paid(bills)
        return BillingSummary(
            total_revenue=_total(b.final_amount for b in paid),
            pending_amount=_total(
                b.final_amount
                for b in bills
                if b.payment_status == PaymentStatus.PENDING
            ),
            tax_collected=_total(b.tax_amount for b in paid),
            total_bills=len(bills),
        )

    def income_by_package(self) -> List[PackageIncome]:
        """Paid package income, packages with no paid bills left out."""
        paid = _paid(self.bill_repo.list_all())
        results = []
        for package in self.package_repo.list_all():
            package_bills = [b for b in paid if b.package_id == package.id]
            if package_bills:
                results.append(
                    PackageIncome(
                        package_id=package.id,
                        package_name=package.name,
                        sales=len(package_bills),
                        revenue=_total(b.final_amount for b in package_bills),
                    )
                )
        return sorted(results, key=lambda p: p.revenue, reverse=True)

    def package_popularity(self) -> List[PackageIncome]:
        """Every package with its sales (void and refunded excluded) and revenue."""
        bills = [
            b
            for b in self.bill_repo.list_all()
            if b.payment_status in (PaymentStatus.PENDING, PaymentStatus.PAID)
        ]
        results = []
        for package in self.package_repo.list_all():
            package_bills = [b for b in bills if b.package_id == package.id]
            results.append(
                PackageIncome(
                    package_id=package.id,
                    package_name=package.name,
                    sales=len(package_bills),
                    revenue=_total(b.final_amount for b in _paid(package_bills)),
                )
            )
        return results

    def service_distribution(self) -> List[ServiceShare]:
        counts = Counter(a.service_type for a in self.appointment_repo.list_all())
        return [
            ServiceShare(service_type=s.value, label=SERVICE_LABELS[s], count=counts[s])
            for s in ServiceType
            if counts[s] > 0
        ]

    def branch_performance(self) -> List[BranchPerformance]:
        appointments = self.appointment_repo.list_all()
        paid = _paid(self.bill_repo.list_all())
        results = []
        for branch in self.branch_repo.list_all():
            apt_ids = {a.id for a in appointments if a.branch_id == branch.id}
            results.append(
                BranchPerformance(
                    branch_id=branch.id,
                    branch_name=branch.name,
                    appointments=len(apt_ids),
                    revenue=_total(
                        b.final_amount for b in paid if b.appointment_id in apt_ids
                    ),
                )
            )
        return results

    def status_breakdown(self) -> Dict[str, int]:
        counts = Counter(a.status for a in self.appointment_repo.list_all())
        return {status.value: counts[status] for status in AppointmentStatus}

    def membership_distribution(self) -> List[MembershipShare]:
        """Patients per tier with a whole-number percentage of all patients."""
        patients = self.patient_repo.list_all()
        counts = Counter(p.membership_tier for p in patients)
        total = len(patients)
        return [
            MembershipShare(
                tier=tier.value,
                count=counts[tier],
                percentage=round(counts[tier] * 100 / total) if total else 0,
            )
            for tier in MembershipTier
        ]
