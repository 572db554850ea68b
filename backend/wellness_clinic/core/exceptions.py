"""
Custom exceptions for the clinic core.

Every failure raised by the pricing engine, the booking allocator or the
application services derives from ClinicError so callers (HTTP handlers, the
CLI) can catch one type and surface ``code`` and ``message`` to the user.
"""

from typing import Iterable, Optional


class ClinicError(Exception):
    """Base class for all local validation failures."""

    code = "clinic_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClinicError):
    """Raised when a registration or update request is malformed."""

    code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(ClinicError):
    code = "not_found"


class PermissionDenied(ClinicError):
    """Raised when a role lacks the capability for an action."""

    code = "permission_denied"


class InvalidStatusTransition(ClinicError):
    """Raised when an appointment or bill is moved to a disallowed state."""

    code = "invalid_status_transition"

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(f"Cannot move {entity} from '{current}' to '{target}'")
        self.entity = entity
        self.current = current
        self.target = target


# ===========================
# Pricing
# ===========================


class PricingError(ClinicError):
    code = "pricing_error"


class InvalidQuantity(PricingError):
    code = "invalid_quantity"


class InvalidRate(PricingError):
    code = "invalid_rate"


class InvalidAmount(PricingError):
    code = "invalid_amount"


# ===========================
# Booking
# ===========================


class BookingError(ClinicError):
    code = "booking_error"


class IncompleteRequest(BookingError):
    """Raised when a booking request is missing required fields."""

    code = "incomplete_request"

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(
            "Booking request is missing required fields: " + ", ".join(self.missing)
        )


class SlotConflict(BookingError):
    """Raised when the doctor already holds a booked appointment at that time."""

    code = "slot_conflict"


class InvalidSlot(BookingError):
    code = "invalid_slot"


class DoctorUnavailable(BookingError):
    code = "doctor_unavailable"


class SpecializationMismatch(BookingError):
    code = "specialization_mismatch"


class TokenSequenceExhausted(BookingError):
    code = "token_sequence_exhausted"


# ===========================
# Billing
# ===========================


class BillingError(ClinicError):
    code = "billing_error"


class PackageUnavailable(BillingError):
    code = "package_unavailable"


class SessionLimitExceeded(BillingError):
    code = "session_limit_exceeded"
