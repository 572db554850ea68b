"""Management commands for the wellness clinic backend."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

import click

from wellness_clinic.core.config import WELLNESS_TAX_RATE
from wellness_clinic.core.exceptions import ClinicError
from wellness_clinic.db.seed import build_demo_data, seed_database
from wellness_clinic.db.session import SessionLocal, create_tables
from wellness_clinic.repositories import (
    InMemoryAppointmentRepository,
    InMemoryBranchRepository,
    InMemoryDoctorRepository,
)
from wellness_clinic.services.pricing_service import price
from wellness_clinic.services.scheduling_service import SchedulingService

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("init-db")
def init_db() -> None:
    """Create the appointments and bills tables."""
    create_tables()
    logging.info("Tables created.")


@cli.command("seed")
def seed() -> None:
    """Create tables and insert the demo appointments and bills."""
    create_tables()
    session = SessionLocal()
    try:
        inserted = seed_database(session)
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    logging.info("Seed complete: %s rows inserted.", inserted)


@cli.command("quote")
@click.argument("base_price")
@click.argument("quantity", type=int)
@click.option("--package-discount", default="0", help="Package discount in [0, 1).")
@click.option(
    "--tier",
    default="none",
    type=click.Choice(["none", "silver", "gold", "platinum"]),
    help="Membership tier of the patient.",
)
@click.option("--tax-rate", default=None, help="Override WELLNESS_TAX_RATE.")
def quote(
    base_price: str,
    quantity: int,
    package_discount: str,
    tier: str,
    tax_rate: Optional[str],
) -> None:
    """Print the itemized price for QUANTITY sessions at BASE_PRICE."""
    try:
        breakdown = price(
            base_price,
            quantity,
            package_discount,
            tier,
            tax_rate if tax_rate is not None else WELLNESS_TAX_RATE,
        ).rounded()
    except ClinicError as e:
        raise click.ClickException(e.message)

    rows = [
        ("Gross", breakdown.gross),
        ("Package discount", -breakdown.package_discount_amount),
        ("After package discount", breakdown.after_package_discount),
        ("Membership discount", -breakdown.membership_discount_amount),
        ("After membership discount", breakdown.after_membership_discount),
        (f"Wellness tax ({breakdown.tax_rate * 100:.0f}%)", breakdown.tax_amount),
        ("Final amount", breakdown.final_amount),
    ]
    for label, amount in rows:
        # + 0 turns -0.00 into 0.00
        click.echo(f"{label:<28}{amount + Decimal('0'):>12}")


@cli.command("slots")
@click.argument("day")
@click.argument("doctor_id")
@click.argument("branch_id")
def slots(day: str, doctor_id: str, branch_id: str) -> None:
    """List the demo clinic's slots for DOCTOR_ID at BRANCH_ID on DAY."""
    data = build_demo_data()
    scheduling = SchedulingService(
        InMemoryAppointmentRepository(data.appointments),
        InMemoryBranchRepository(data.branches),
        InMemoryDoctorRepository(data.doctors),
    )
    try:
        result = scheduling.available_slots(day, doctor_id, branch_id)
    except ClinicError as e:
        raise click.ClickException(e.message)
    except ValueError as e:
        raise click.ClickException(f"Invalid date {day!r}: {e}")

    for slot in result:
        click.echo(f"{slot.time}  {'free' if slot.is_available else 'booked'}")


if __name__ == "__main__":
    cli()
