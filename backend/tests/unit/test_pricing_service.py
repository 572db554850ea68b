"""
Unit tests for the pricing pipeline.

Covers stage ordering, single rounding at the end, input validation and
bill reconciliation.
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from wellness_clinic.core.exceptions import InvalidAmount, InvalidQuantity, InvalidRate
from wellness_clinic.domain.entities import Bill, MembershipTier, round_money
from wellness_clinic.services.pricing_service import PricingService, price
from tests.factories.repository_factories import make_doctor, make_package


@pytest.mark.unit
@pytest.mark.pricing
class TestPricePipeline:
    def test_essential_package_for_gold_member(self):
        breakdown = price(Decimal("85"), 4, Decimal("0.10"), MembershipTier.GOLD)
        rounded = breakdown.rounded()

        assert rounded.gross == Decimal("340.00")
        assert rounded.package_discount_amount == Decimal("34.00")
        assert rounded.after_package_discount == Decimal("306.00")
        assert rounded.membership_discount_amount == Decimal("30.60")
        assert rounded.after_membership_discount == Decimal("275.40")
        assert rounded.tax_amount == Decimal("22.03")
        assert rounded.final_amount == Decimal("297.43")

    def test_nutrition_package_for_platinum_member(self):
        rounded = price(75, 8, "0.15", "platinum").rounded()

        assert rounded.gross == Decimal("600.00")
        assert rounded.after_package_discount == Decimal("510.00")
        assert rounded.after_membership_discount == Decimal("433.50")
        assert rounded.tax_amount == Decimal("34.68")
        assert rounded.final_amount == Decimal("468.18")

    def test_membership_discount_applies_to_package_discounted_amount(self):
        breakdown = price(100, 1, "0.20", MembershipTier.SILVER)

        # 5% of 80, not of 100
        assert breakdown.membership_discount_amount == Decimal("4.00")
        assert breakdown.after_membership_discount == Decimal("76.00")

    def test_tax_is_applied_after_all_discounts(self):
        breakdown = price(100, 1, "0.10", MembershipTier.GOLD, tax_rate="0.08")

        assert breakdown.tax_amount == breakdown.after_membership_discount * Decimal(
            "0.08"
        )

    def test_final_amount_rounded_once_from_full_precision(self):
        breakdown = price("33.33", 3, "0.15", MembershipTier.SILVER)
        rounded = breakdown.rounded()

        assert rounded.final_amount == round_money(breakdown.final_amount)
        assert rounded.rounded() == rounded

    def test_float_inputs_match_decimal_inputs(self):
        from_floats = price(85.0, 4, 0.1, "gold").rounded()
        from_decimals = price(Decimal("85"), 4, Decimal("0.1"), "gold").rounded()

        assert from_floats.final_amount == from_decimals.final_amount

    def test_zero_price_is_free(self):
        rounded = price(0, 5, 0, MembershipTier.NONE).rounded()

        assert rounded.final_amount == Decimal("0.00")
        assert rounded.tax_amount == Decimal("0.00")

    def test_zero_tax_rate(self):
        breakdown = price(50, 2, 0, MembershipTier.NONE, tax_rate=0)

        assert breakdown.final_amount == Decimal("100")

    def test_as_dict_renders_money_as_strings(self):
        data = price(75, 8, "0.15", "platinum").rounded().as_dict()

        assert data["final_amount"] == "468.18"
        assert data["membership_tier"] == "platinum"
        assert data["quantity"] == 8


@pytest.mark.unit
@pytest.mark.pricing
class TestPriceValidation:
    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2"])
    def test_rejects_bad_quantity(self, quantity):
        with pytest.raises(InvalidQuantity):
            price(85, quantity, 0, MembershipTier.NONE)

    @pytest.mark.parametrize("rate", ["1", "1.5", "-0.01", "abc", "NaN"])
    def test_rejects_bad_package_rate(self, rate):
        with pytest.raises(InvalidRate):
            price(85, 1, rate, MembershipTier.NONE)

    def test_rejects_bad_tax_rate(self):
        with pytest.raises(InvalidRate):
            price(85, 1, 0, MembershipTier.NONE, tax_rate="1")

    def test_rejects_unknown_tier(self):
        with pytest.raises(InvalidRate):
            price(85, 1, 0, "bronze")

    @pytest.mark.parametrize("base", ["0.3651", "85.001", Decimal("0.005")])
    def test_rejects_sub_cent_base_price(self, base):
        with pytest.raises(InvalidAmount):
            price(base, 1, 0, MembershipTier.NONE)

    def test_accepts_trailing_zero_precision(self):
        assert price("85.000", 1, 0, MembershipTier.NONE).gross == Decimal("85")

    @pytest.mark.parametrize("base", ["-1", "abc", "Infinity"])
    def test_rejects_bad_base_price(self, base):
        with pytest.raises(InvalidAmount):
            price(base, 1, 0, MembershipTier.NONE)


@pytest.mark.unit
@pytest.mark.pricing
@pytest.mark.services
class TestPricingService:
    def test_quote_package_uses_package_terms(self):
        service = PricingService(tax_rate="0.08")

        rounded = service.quote_package(make_package(), 4, MembershipTier.GOLD).rounded()

        assert rounded.final_amount == Decimal("297.43")

    def test_quote_consultation_is_one_session_without_package_discount(self):
        service = PricingService(tax_rate="0.08")
        doctor = make_doctor(consultation_fee=Decimal("80"))

        breakdown = service.quote_consultation(doctor, MembershipTier.SILVER)
        rounded = breakdown.rounded()

        assert breakdown.quantity == 1
        assert breakdown.package_discount_rate == Decimal("0")
        assert rounded.after_membership_discount == Decimal("76.00")
        assert rounded.tax_amount == Decimal("6.08")
        assert rounded.final_amount == Decimal("82.08")

    def test_invalid_service_tax_rate(self):
        with pytest.raises(InvalidRate):
            PricingService(tax_rate="-0.08")

    def test_seeded_bills_reconcile(self, demo_data):
        service = PricingService(tax_rate="0.08")

        assert all(service.reconcile(bill) for bill in demo_data.bills)

    @pytest.mark.parametrize("base", ["0.37", "19.99", "123.45"])
    def test_engine_bills_always_reconcile(self, base):
        service = PricingService(tax_rate="0.08")
        bill = Bill.from_breakdown(
            service.quote_consultation(
                make_doctor(consultation_fee=Decimal(base)), MembershipTier.SILVER
            ),
            "patient-1",
        )

        assert service.reconcile(bill)

    def test_tampered_bill_does_not_reconcile(self, demo_data):
        service = PricingService(tax_rate="0.08")
        tampered = replace(demo_data.bills[0], final_amount=Decimal("297.27"))

        assert service.reconcile(tampered) is False
