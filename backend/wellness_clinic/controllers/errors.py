"""
Maps clinic exceptions to HTTP responses.

Services raise typed errors; this is the only place that turns them into
status codes.
"""

import logging

from flask import Flask
from werkzeug.exceptions import HTTPException

from wellness_clinic.core.api_utils import api_response
from wellness_clinic.core.exceptions import (
    ClinicError,
    IncompleteRequest,
    InvalidStatusTransition,
    NotFoundError,
    PermissionDenied,
    SlotConflict,
    TokenSequenceExhausted,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins
STATUS_CODES = (
    (NotFoundError, 404),
    (PermissionDenied, 403),
    (SlotConflict, 409),
    (InvalidStatusTransition, 409),
    (TokenSequenceExhausted, 409),
    (ClinicError, 400),
)


def status_for(error: ClinicError) -> int:
    for error_type, status in STATUS_CODES:
        if isinstance(error, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ClinicError)
    def handle_clinic_error(error: ClinicError):
        status = status_for(error)
        details = {"error": error.code}
        if isinstance(error, IncompleteRequest):
            details["missing"] = error.missing
        if isinstance(error, ValidationError) and error.field:
            details["field"] = error.field
        logger.info(
            "Request rejected",
            extra={"context": {"code": error.code, "status_code": status}},
        )
        return api_response(False, error.message, details, status)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return api_response(False, error.description or error.name, None, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.error("Unhandled error", exc_info=error)
        return api_response(False, "Internal server error", {"error": "server_error"}, 500)
