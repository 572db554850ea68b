# Controllers package initialization
# This file makes the controllers directory a Python package
# and allows importing controller modules

from . import (
    appointment_controller,
    billing_controller,
    directory_controller,
    errors,
    health_controller,
    patient_controller,
    reports_controller,
)

__all__ = [
    "appointment_controller",
    "billing_controller",
    "directory_controller",
    "errors",
    "health_controller",
    "patient_controller",
    "reports_controller",
]
