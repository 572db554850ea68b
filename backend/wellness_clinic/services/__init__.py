# Services package initialization
# This file makes the services directory a Python package
# and allows importing service modules

from . import (
    billing_service,
    directory_service,
    patient_service,
    pricing_service,
    records_service,
    report_service,
    scheduling_service,
)

__all__ = [
    "billing_service",
    "directory_service",
    "patient_service",
    "pricing_service",
    "records_service",
    "report_service",
    "scheduling_service",
]
