"""
Health controller - liveness endpoint for monitoring.
"""

from flask import Blueprint, current_app

from wellness_clinic.core.api_utils import api_response

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health_check():
    """Report that the app is up and which repository backend it runs on."""
    return api_response(
        True,
        "ok",
        {"status": "healthy", "backend": current_app.config.get("REPOSITORY_BACKEND")},
    )
