"""
Pricing engine for wellness packages and consultations.

The pipeline is applied in a fixed order, each stage working on the running
amount: package discount on gross, membership discount on the
package-discounted amount, wellness tax last. All arithmetic is done in
Decimal at full precision; rounding to cents only happens through
PriceBreakdown.rounded() when a bill is stored or displayed.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from wellness_clinic.core.config import WELLNESS_TAX_RATE
from wellness_clinic.core.exceptions import InvalidAmount, InvalidQuantity, InvalidRate
from wellness_clinic.domain.entities import (
    CENT,
    MEMBERSHIP_DISCOUNTS,
    Bill,
    Doctor,
    MembershipTier,
    PriceBreakdown,
    WellnessPackage,
    round_money,
)

logger = logging.getLogger(__name__)

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
ONE = Decimal("1")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidOperation(value)
    if isinstance(value, Decimal):
        return value
    # floats go through str() so 0.1 stays 0.1 and not its binary expansion
    return Decimal(str(value))


def _rate(value: Any, name: str) -> Decimal:
    try:
        rate = _to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidRate(f"{name} must be a number in [0, 1), got {value!r}")
    if not rate.is_finite() or not (ZERO <= rate < ONE):
        raise InvalidRate(f"{name} must be in [0, 1), got {value!r}")
    return rate


def _membership_tier(value: Any) -> MembershipTier:
    try:
        return MembershipTier(value)
    except ValueError:
        raise InvalidRate(f"Unknown membership tier {value!r}")


def apply_stages(
    gross: Decimal,
    package_discount_rate: Decimal,
    membership_discount_rate: Decimal,
    tax_rate: Decimal,
) -> dict:
    """Run the discount/tax stages over an already computed gross amount."""
    after_package = gross * (ONE - package_discount_rate)
    after_membership = after_package * (ONE - membership_discount_rate)
    tax_amount = after_membership * tax_rate
    return {
        "gross": gross,
        "package_discount_amount": gross - after_package,
        "after_package_discount": after_package,
        "membership_discount_amount": after_package - after_membership,
        "after_membership_discount": after_membership,
        "tax_amount": tax_amount,
        "final_amount": after_membership + tax_amount,
    }


def price(
    base_unit_price: Number,
    quantity: int,
    package_discount_rate: Number,
    membership_tier: Union[MembershipTier, str],
    tax_rate: Number = WELLNESS_TAX_RATE,
) -> PriceBreakdown:
    """Compute an itemized price for `quantity` units of `base_unit_price`.

    Raises:
        InvalidQuantity: quantity is not a positive integer
        InvalidRate: a rate is outside [0, 1) or the tier is unknown
        InvalidAmount: the base price is negative, not a number or finer than a cent
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(f"Quantity must be a positive integer, got {quantity!r}")

    try:
        base = _to_decimal(base_unit_price)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(f"Base price must be a number, got {base_unit_price!r}")
    if not base.is_finite() or base < ZERO:
        raise InvalidAmount(f"Base price cannot be negative, got {base_unit_price!r}")
    try:
        whole_cents = base == base.quantize(CENT)
    except InvalidOperation:
        whole_cents = False
    if not whole_cents:
        # bills store the gross in cents
        raise InvalidAmount(f"Base price must be in whole cents, got {base_unit_price!r}")

    package_rate = _rate(package_discount_rate, "Package discount rate")
    tax = _rate(tax_rate, "Tax rate")
    tier = _membership_tier(membership_tier)
    membership_rate = MEMBERSHIP_DISCOUNTS[tier]

    stages = apply_stages(base * quantity, package_rate, membership_rate, tax)
    return PriceBreakdown(
        base_unit_price=base,
        quantity=quantity,
        package_discount_rate=package_rate,
        membership_tier=tier,
        membership_discount_rate=membership_rate,
        tax_rate=tax,
        **stages,
    )


class PricingService:
    """Quotes for the two things the clinic sells, plus bill reconciliation."""

    def __init__(self, tax_rate: Number = WELLNESS_TAX_RATE):
        self.tax_rate = _rate(tax_rate, "Tax rate")

    def quote_package(
        self,
        package: WellnessPackage,
        sessions: int,
        membership_tier: Union[MembershipTier, str] = MembershipTier.NONE,
    ) -> PriceBreakdown:
        return price(
            package.session_price,
            sessions,
            package.package_discount,
            membership_tier,
            self.tax_rate,
        )

    def quote_consultation(
        self,
        doctor: Doctor,
        membership_tier: Union[MembershipTier, str] = MembershipTier.NONE,
    ) -> PriceBreakdown:
        return price(doctor.consultation_fee, 1, ZERO, membership_tier, self.tax_rate)

    def reconcile(self, bill: Bill) -> bool:
        """Check that a stored bill's tax and final amount follow from its other fields."""
        stages = apply_stages(
            bill.gross_amount,
            bill.package_discount_rate,
            bill.membership_discount_rate,
            bill.tax_rate,
        )
        matches = (
            round_money(stages["tax_amount"]) == bill.tax_amount
            and round_money(stages["final_amount"]) == bill.final_amount
        )
        if not matches:
            logger.warning(
                "Bill does not reconcile with pricing pipeline",
                extra={
                    "context": {
                        "bill_id": bill.id,
                        "stored_final": str(bill.final_amount),
                        "expected_final": str(round_money(stages["final_amount"])),
                    }
                },
            )
        return matches
