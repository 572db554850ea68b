"""
Appointment repository backed by SQLAlchemy.

The partial unique index on (doctor_id, appointment_datetime) for booked rows
makes the append a conditional insert: a second booked row for the same
doctor and time fails inside the database, and that failure is reported as
SlotConflict.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from wellness_clinic.core.exceptions import NotFoundError, SlotConflict
from wellness_clinic.db.base import AppointmentRecord
from wellness_clinic.domain.entities import Appointment as DomainAppointment
from wellness_clinic.domain.entities import AppointmentStatus
from wellness_clinic.domain.interfaces import IAppointmentRepository

logger = logging.getLogger(__name__)


class AppointmentRepository(IAppointmentRepository):
    """Repository for Appointment persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, appointment_id: str) -> Optional[DomainAppointment]:
        record = self.db.get(AppointmentRecord, appointment_id)
        return self._to_domain(record) if record else None

    def find_conflict(
        self, doctor_id: str, appointment_datetime: datetime
    ) -> Optional[DomainAppointment]:
        record = self.db.scalars(
            select(AppointmentRecord).where(
                AppointmentRecord.doctor_id == doctor_id,
                AppointmentRecord.appointment_datetime == appointment_datetime,
                AppointmentRecord.status == AppointmentStatus.BOOKED.value,
            )
        ).first()
        return self._to_domain(record) if record else None

    def list_for_doctor_on(self, doctor_id: str, day: date) -> List[DomainAppointment]:
        records = self.db.scalars(
            select(AppointmentRecord)
            .where(
                AppointmentRecord.doctor_id == doctor_id,
                AppointmentRecord.appointment_date == day,
            )
            .order_by(AppointmentRecord.appointment_datetime)
        ).all()
        return [self._to_domain(r) for r in records]

    def count_for_branch_date(self, branch_id: str, day: date) -> int:
        # every status counts; token sequence numbers are never reused
        return self.db.scalar(
            select(func.count())
            .select_from(AppointmentRecord)
            .where(
                AppointmentRecord.branch_id == branch_id,
                AppointmentRecord.appointment_date == day,
            )
        )

    def list_all(self) -> List[DomainAppointment]:
        records = self.db.scalars(
            select(AppointmentRecord).order_by(AppointmentRecord.appointment_datetime)
        ).all()
        return [self._to_domain(r) for r in records]

    def _to_record(self, appointment: DomainAppointment) -> AppointmentRecord:
        return AppointmentRecord(
            id=appointment.id,
            token=appointment.token,
            patient_id=appointment.patient_id,
            doctor_id=appointment.doctor_id,
            branch_id=appointment.branch_id,
            service_type=appointment.service_type.value,
            appointment_datetime=appointment.appointment_datetime,
            appointment_date=appointment.date,
            status=appointment.status.value,
            notes=appointment.notes,
            created_at=appointment.created_at,
        )

    def append(self, appointment: DomainAppointment) -> DomainAppointment:
        record = self._to_record(appointment)
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                "Appointment insert rejected by database",
                extra={
                    "context": {
                        "token": appointment.token,
                        "doctor_id": appointment.doctor_id,
                        "error": str(e.orig),
                    }
                },
            )
            raise SlotConflict(
                f"Doctor {appointment.doctor_id} is already booked at "
                f"{appointment.appointment_datetime.isoformat()} "
                f"or token {appointment.token} is taken"
            ) from e
        self.db.refresh(record)
        return self._to_domain(record)

    def update(self, appointment: DomainAppointment) -> DomainAppointment:
        record = self.db.get(AppointmentRecord, appointment.id)
        if record is None:
            raise NotFoundError(f"Appointment {appointment.id} not found")
        record.status = appointment.status.value
        record.notes = appointment.notes
        record.appointment_datetime = appointment.appointment_datetime
        record.appointment_date = appointment.date
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise SlotConflict(
                f"Doctor {appointment.doctor_id} is already booked at "
                f"{appointment.appointment_datetime.isoformat()}"
            ) from e
        self.db.refresh(record)
        return self._to_domain(record)

    def cancel_and_append(
        self, cancelled: DomainAppointment, replacement: DomainAppointment
    ) -> DomainAppointment:
        """Cancel the old row and insert its replacement in one commit."""
        old = self.db.get(AppointmentRecord, cancelled.id)
        if old is None:
            raise NotFoundError(f"Appointment {cancelled.id} not found")
        old.status = cancelled.status.value
        old.notes = cancelled.notes
        record = self._to_record(replacement)
        try:
            # the cancellation must reach the index before the new row does
            self.db.flush()
            self.db.add(record)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                "Reschedule rejected by database",
                extra={
                    "context": {
                        "appointment_id": cancelled.id,
                        "token": replacement.token,
                        "error": str(e.orig),
                    }
                },
            )
            raise SlotConflict(
                f"Doctor {replacement.doctor_id} is already booked at "
                f"{replacement.appointment_datetime.isoformat()} "
                f"or token {replacement.token} is taken"
            ) from e
        self.db.refresh(record)
        return self._to_domain(record)

    def _to_domain(self, record: AppointmentRecord) -> DomainAppointment:
        """Convert DB model to domain entity."""
        return DomainAppointment(
            id=record.id,
            token=record.token,
            patient_id=record.patient_id,
            doctor_id=record.doctor_id,
            branch_id=record.branch_id,
            service_type=record.service_type,
            appointment_datetime=record.appointment_datetime,
            status=record.status,
            notes=record.notes,
            created_at=record.created_at,
        )
