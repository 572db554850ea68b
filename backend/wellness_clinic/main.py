"""
Flask application factory.

create_app() loads .env, configures logging, wires repositories into the
services and registers the blueprints. Services are stored in
app.extensions["clinic"] so controllers never build their own.
"""

import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from flask import Flask
from sqlalchemy.orm import scoped_session

from wellness_clinic.core import config
from wellness_clinic.core.logging_config import setup_logging
from wellness_clinic.db.seed import DemoData, build_demo_data, seed_database
from wellness_clinic.db.session import create_tables, get_sessionmaker
from wellness_clinic.repositories import (
    AppointmentRepository,
    BillRepository,
    InMemoryAppointmentRepository,
    InMemoryBillRepository,
    InMemoryBranchRepository,
    InMemoryConsultationNoteRepository,
    InMemoryDoctorRepository,
    InMemoryPackageRepository,
    InMemoryPatientRepository,
)
from wellness_clinic.services.billing_service import BillingService
from wellness_clinic.services.directory_service import DirectoryService
from wellness_clinic.services.patient_service import PatientService
from wellness_clinic.services.pricing_service import PricingService
from wellness_clinic.services.records_service import RecordsService
from wellness_clinic.services.report_service import ReportService
from wellness_clinic.services.scheduling_service import SchedulingService

logger = logging.getLogger(__name__)


def build_services(
    data: DemoData,
    appointment_repo=None,
    bill_repo=None,
    pricing: Optional[PricingService] = None,
    session_policy: str = config.PACKAGE_SESSION_POLICY,
) -> Dict[str, Any]:
    """Wire repositories into the application services.

    Appointments and bills default to in-memory collections seeded from
    `data`; pass SQL repositories to persist them instead.
    """
    branches = InMemoryBranchRepository(data.branches)
    doctors = InMemoryDoctorRepository(data.doctors)
    patients = InMemoryPatientRepository(data.patients)
    packages = InMemoryPackageRepository(data.packages)
    notes = InMemoryConsultationNoteRepository(data.notes)
    appointments = appointment_repo or InMemoryAppointmentRepository(data.appointments)
    bills = bill_repo or InMemoryBillRepository(data.bills)
    pricing = pricing or PricingService()

    return {
        "pricing": pricing,
        "scheduling": SchedulingService(appointments, branches, doctors),
        "billing": BillingService(
            bills,
            packages,
            patients,
            doctors,
            appointments,
            pricing=pricing,
            session_policy=session_policy,
        ),
        "patients": PatientService(patients),
        "directory": DirectoryService(doctors, packages, branches),
        "records": RecordsService(notes, patients, doctors, appointments),
        "reports": ReportService(patients, appointments, bills, packages, branches),
    }


def create_app(overrides: Optional[Dict[str, Any]] = None) -> Flask:
    load_dotenv()

    app = Flask(__name__)
    app.config.update(
        REPOSITORY_BACKEND=config.get_repository_backend(),
        LOG_LEVEL=config.get_log_level(),
        LOG_JSON=config.use_json_logs(),
        LOG_TO_FILE=config.use_file_logs(),
        PACKAGE_SESSION_POLICY=config.PACKAGE_SESSION_POLICY,
    )
    if overrides:
        app.config.update(overrides)

    setup_logging(
        app=app,
        log_level=app.config["LOG_LEVEL"],
        enable_sql_echo=app.config["LOG_LEVEL"] == "DEBUG",
        use_json_format=app.config["LOG_JSON"],
        log_to_file=app.config["LOG_TO_FILE"],
    )
    config.log_config()

    data = build_demo_data()
    if app.config["REPOSITORY_BACKEND"] == "sql":
        create_tables()
        db = scoped_session(get_sessionmaker())
        seed_database(db, data)
        services = build_services(
            data,
            appointment_repo=AppointmentRepository(db),
            bill_repo=BillRepository(db),
            session_policy=app.config["PACKAGE_SESSION_POLICY"],
        )

        @app.teardown_appcontext
        def remove_session(exception=None):
            db.remove()

    else:
        services = build_services(
            data, session_policy=app.config["PACKAGE_SESSION_POLICY"]
        )
    app.extensions["clinic"] = services

    from wellness_clinic.controllers.appointment_controller import appointment_bp
    from wellness_clinic.controllers.billing_controller import billing_bp
    from wellness_clinic.controllers.directory_controller import directory_bp
    from wellness_clinic.controllers.errors import register_error_handlers
    from wellness_clinic.controllers.health_controller import health_bp
    from wellness_clinic.controllers.patient_controller import patient_bp
    from wellness_clinic.controllers.reports_controller import reports_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(appointment_bp)
    app.register_blueprint(billing_bp)
    app.register_blueprint(patient_bp)
    app.register_blueprint(directory_bp)
    app.register_blueprint(reports_bp)
    register_error_handlers(app)

    logger.info(
        "Application created",
        extra={"context": {"repository_backend": app.config["REPOSITORY_BACKEND"]}},
    )
    return app
