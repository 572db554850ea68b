"""Bill repository backed by SQLAlchemy."""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select

from wellness_clinic.core.exceptions import NotFoundError
from wellness_clinic.db.base import BillRecord
from wellness_clinic.domain.entities import Bill as DomainBill
from wellness_clinic.domain.interfaces import IBillRepository


class BillRepository(IBillRepository):
    """Repository for Bill persistence operations. Bills are never deleted."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, bill_id: str) -> Optional[DomainBill]:
        record = self.db.get(BillRecord, bill_id)
        return self._to_domain(record) if record else None

    def list_all(self) -> List[DomainBill]:
        records = self.db.scalars(
            select(BillRecord).order_by(BillRecord.bill_date, BillRecord.id)
        ).all()
        return [self._to_domain(r) for r in records]

    def append(self, bill: DomainBill) -> DomainBill:
        record = BillRecord(
            id=bill.id,
            patient_id=bill.patient_id,
            appointment_id=bill.appointment_id,
            package_id=bill.package_id,
            sessions_booked=bill.sessions_booked,
            gross_amount=bill.gross_amount,
            package_discount_rate=bill.package_discount_rate,
            membership_discount_rate=bill.membership_discount_rate,
            tax_rate=bill.tax_rate,
            tax_amount=bill.tax_amount,
            final_amount=bill.final_amount,
            payment_status=bill.payment_status.value,
            bill_date=bill.bill_date,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return self._to_domain(record)

    def update(self, bill: DomainBill) -> DomainBill:
        # Only the payment status moves once a bill is issued
        record = self.db.get(BillRecord, bill.id)
        if record is None:
            raise NotFoundError(f"Bill {bill.id} not found")
        record.payment_status = bill.payment_status.value
        self.db.commit()
        self.db.refresh(record)
        return self._to_domain(record)

    def _to_domain(self, record: BillRecord) -> DomainBill:
        """Convert DB model to domain entity."""
        return DomainBill(
            id=record.id,
            patient_id=record.patient_id,
            appointment_id=record.appointment_id,
            package_id=record.package_id,
            sessions_booked=record.sessions_booked,
            gross_amount=Decimal(record.gross_amount),
            package_discount_rate=Decimal(record.package_discount_rate).normalize(),
            membership_discount_rate=Decimal(record.membership_discount_rate).normalize(),
            tax_rate=Decimal(record.tax_rate).normalize(),
            tax_amount=Decimal(record.tax_amount),
            final_amount=Decimal(record.final_amount),
            payment_status=record.payment_status,
            bill_date=record.bill_date,
        )
