"""
Reports controller - dashboard numbers and the admin reports page.
"""

import time
from dataclasses import asdict
from decimal import Decimal

from flask import Blueprint, request

from wellness_clinic.core.api_utils import (
    api_response,
    current_role,
    get_service,
    require_capability,
)
from wellness_clinic.core.exceptions import ValidationError
from wellness_clinic.core.logging_config import log_performance
from wellness_clinic.core.permissions import can_view_package_income, can_view_reports
from wellness_clinic.schemas.dtos import parse_date

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _jsonable(value):
    """asdict() the report rows and render Decimals as strings."""
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if hasattr(value, "__dataclass_fields__"):
        return _jsonable(asdict(value))
    if isinstance(value, Decimal):
        return str(value)
    return value


@reports_bp.route("/dashboard", methods=["GET"])
def dashboard():
    day = request.args.get("date")
    try:
        day = parse_date(day) if day else None
    except ValueError:
        raise ValidationError("date must be an ISO date", field="date")
    stats = get_service("reports").dashboard(day)
    return api_response(True, "Dashboard statistics", _jsonable(stats))


@reports_bp.route("/summary", methods=["GET"])
@require_capability(can_view_reports, "view reports")
def summary():
    started = time.perf_counter()
    reports = get_service("reports")
    data = {
        "billing": reports.billing_summary(),
        "service_distribution": reports.service_distribution(),
        "branch_performance": reports.branch_performance(),
        "package_popularity": reports.package_popularity(),
        "status_breakdown": reports.status_breakdown(),
        "membership_distribution": reports.membership_distribution(),
    }
    if can_view_package_income(current_role()):
        data["income_by_package"] = reports.income_by_package()
    log_performance(
        "reports.summary",
        (time.perf_counter() - started) * 1000,
        sections=len(data),
    )
    return api_response(True, "Reports", _jsonable(data))
