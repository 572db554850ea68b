"""
Billing controller - quotes, package purchases and payment status.
"""

from flask import Blueprint, request

from wellness_clinic.core.api_utils import (
    api_response,
    get_service,
    json_body,
    require_capability,
)
from wellness_clinic.core.exceptions import ValidationError
from wellness_clinic.core.permissions import can_manage_bills
from wellness_clinic.domain.entities import MembershipTier
from wellness_clinic.schemas.dtos import (
    BillResponse,
    PackagePurchaseRequest,
    to_dict,
    to_dicts,
)
from wellness_clinic.services.pricing_service import price

billing_bp = Blueprint("billing", __name__, url_prefix="/api/billing")


def _billing():
    return get_service("billing")


def _sessions(value) -> int:
    """Read a session count from JSON; non-integers are rejected by pricing."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return value


@billing_bp.route("/quote", methods=["POST"])
def quote():
    """Price without recording anything.

    Either {"package_id", "sessions", "patient_id"?} or a raw
    {"base_unit_price", "quantity", "package_discount_rate", "membership_tier"}.
    """
    data = json_body()
    if data.get("package_id"):
        breakdown = _billing().quote_package(
            data["package_id"],
            _sessions(data.get("sessions", 1)),
            data.get("patient_id"),
        )
    elif "base_unit_price" in data:
        breakdown = price(
            data["base_unit_price"],
            _sessions(data.get("quantity", 1)),
            data.get("package_discount_rate", "0"),
            data.get("membership_tier", MembershipTier.NONE.value),
            get_service("pricing").tax_rate,
        )
    else:
        raise ValidationError(
            "Provide package_id or base_unit_price", field="package_id"
        )
    return api_response(True, "Quote calculated", breakdown.rounded().as_dict())


@billing_bp.route("", methods=["GET"])
@require_capability(can_manage_bills, "view bills")
def list_bills():
    bills = _billing().search(request.args.get("q", ""), request.args.get("status"))
    return api_response(
        True,
        f"{len(bills)} bills",
        to_dicts([BillResponse.from_domain(b) for b in bills]),
    )


@billing_bp.route("/packages/purchase", methods=["POST"])
@require_capability(can_manage_bills, "create bills")
def purchase_package():
    data = json_body()
    bill = _billing().purchase_package(
        PackagePurchaseRequest(
            patient_id=data.get("patient_id", ""),
            package_id=data.get("package_id", ""),
            sessions=_sessions(data.get("sessions", 1)),
        )
    )
    return api_response(
        True,
        f"Bill {bill.id} created for {bill.final_amount}",
        to_dict(BillResponse.from_domain(bill)),
        201,
    )


@billing_bp.route("/appointments/<appointment_id>", methods=["POST"])
@require_capability(can_manage_bills, "create bills")
def bill_appointment(appointment_id: str):
    bill = _billing().bill_appointment(appointment_id)
    return api_response(
        True,
        f"Bill {bill.id} created for {bill.final_amount}",
        to_dict(BillResponse.from_domain(bill)),
        201,
    )


@billing_bp.route("/<bill_id>/<action>", methods=["POST"])
@require_capability(can_manage_bills, "change bill status")
def change_status(bill_id: str, action: str):
    actions = {
        "pay": _billing().mark_paid,
        "void": _billing().void,
        "refund": _billing().refund,
    }
    if action not in actions:
        raise ValidationError(f"Unknown bill action '{action}'", field="action")
    bill = actions[action](bill_id)
    return api_response(
        True,
        f"Bill {bill.id} is now {bill.payment_status.value}",
        to_dict(BillResponse.from_domain(bill)),
    )
