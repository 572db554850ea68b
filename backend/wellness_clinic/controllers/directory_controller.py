"""
Directory controller - doctor directory and wellness package catalog.
"""

from flask import Blueprint, request

from wellness_clinic.core.api_utils import api_response, get_service, require_capability
from wellness_clinic.core.permissions import visible_sections
from wellness_clinic.schemas.dtos import DoctorResponse, PackageResponse, to_dicts

directory_bp = Blueprint("directory", __name__, url_prefix="/api")


def _can_browse_doctors(role) -> bool:
    return "doctors" in visible_sections(role)


def _can_browse_packages(role) -> bool:
    return "packages" in visible_sections(role)


@directory_bp.route("/doctors", methods=["GET"])
@require_capability(_can_browse_doctors, "browse the doctor directory")
def list_doctors():
    directory = get_service("directory")
    doctors = directory.search_doctors(
        request.args.get("q", ""),
        branch_id=request.args.get("branch_id"),
        service_type=request.args.get("service_type"),
    )
    headcount = directory.doctor_availability()
    return api_response(
        True,
        f"{len(doctors)} doctors",
        {
            "doctors": to_dicts([DoctorResponse.from_domain(d) for d in doctors]),
            "available": headcount.available,
            "unavailable": headcount.unavailable,
        },
    )


@directory_bp.route("/packages", methods=["GET"])
@require_capability(_can_browse_packages, "browse wellness packages")
def list_packages():
    directory = get_service("directory")
    packages = directory.search_packages(
        request.args.get("q", ""), service_type=request.args.get("service_type")
    )
    return api_response(
        True,
        f"{len(packages)} packages",
        {
            "packages": to_dicts([PackageResponse.from_domain(p) for p in packages]),
            "counts_by_service": directory.active_packages_by_service(),
        },
    )
