from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, Index, Integer, Numeric, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from .session import Base


class AppointmentRecord(Base):
    """Appointment table. Rows are never deleted; only status changes."""

    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    token: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    patient_id: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    doctor_id: Mapped[str] = mapped_column(String(40), nullable=False)
    branch_id: Mapped[str] = mapped_column(String(40), nullable=False)
    service_type: Mapped[str] = mapped_column(String(40), nullable=False)
    appointment_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    # Date part of appointment_datetime, kept for the token sequence count
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="booked")
    notes: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    __table_args__ = (
        # At most one booked appointment per doctor and exact time. Cancelled
        # and completed rows may share the slot.
        Index(
            "uq_appointments_booked_doctor_slot",
            "doctor_id",
            "appointment_datetime",
            unique=True,
            sqlite_where=text("status = 'booked'"),
            postgresql_where=text("status = 'booked'"),
        ),
        Index("ix_appointments_branch_date", "branch_id", "appointment_date"),
        Index("ix_appointments_doctor_date", "doctor_id", "appointment_date"),
    )


class BillRecord(Base):
    """Bill table; amounts stored rounded to cents."""

    __tablename__ = "bills"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    patient_id: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    appointment_id: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    package_id: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    sessions_booked: Mapped[int] = mapped_column(Integer, nullable=False)
    gross_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    package_discount_rate: Mapped[Decimal] = mapped_column(Numeric(5, 4), nullable=False)
    membership_discount_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 4), nullable=False
    )
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 4), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    final_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )
    bill_date: Mapped[date] = mapped_column(Date, nullable=False)
