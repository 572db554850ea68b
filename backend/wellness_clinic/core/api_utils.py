"""
Common API utilities for consistent response formatting across all controllers.
"""

from functools import wraps
from typing import Any, Callable, Optional

from flask import current_app, jsonify, request

from wellness_clinic.core.logging_config import ROLE_HEADER
from wellness_clinic.core.permissions import parse_role, require
from wellness_clinic.domain.entities import UserRole


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Args:
        success: Whether the operation was successful
        message: Human-readable message about the operation
        data: Optional data payload
        status_code: HTTP status code

    Returns:
        Tuple of (json_response, status_code)
    """
    response = {"success": success, "message": message}

    if data is not None:
        response["data"] = data

    return jsonify(response), status_code


def current_role() -> UserRole:
    """Role of the caller, taken from the X-User-Role header.

    There is no authentication; a missing header is treated as a patient.
    """
    return parse_role(request.headers.get(ROLE_HEADER, UserRole.PATIENT.value).lower())


def get_service(name: str):
    """Look up a service wired into the app by create_app()."""
    return current_app.extensions["clinic"][name]


def require_capability(check: Callable[[UserRole], bool], action: str):
    """Decorator rejecting the request with PermissionDenied unless check(role)."""

    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            require(check(current_role()), action)
            return f(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    """Request JSON object, or {} when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
