from decimal import Decimal

import pytest

from storefront.models.coupon import AppliedCoupon, CouponScope, DiscountType
from storefront.models.order import OrderTotal, PaymentMethod
from storefront.models.user import UserProfile
from storefront.services.membership_service import MembershipService
from storefront.services.pricing_service import PricingService, compute_total
from storefront.services.shipping_service import ShippingCalculator

from factories import make_user


@pytest.fixture
def pricing():
    return PricingService(MembershipService(Decimal("249")), ShippingCalculator(Decimal("40")), Decimal("50"))


def applied(amount):
    return AppliedCoupon(
        code="SAVE",
        discount_amount=Decimal(amount),
        discount_type=DiscountType.FLAT,
        discount_value=Decimal(amount),
        scope=CouponScope.PUBLIC,
    )


class TestComputeTotal:
    def test_cod_order(self):
        total = compute_total(Decimal("1000"), Decimal("249"), Decimal("100"), Decimal("0"), "cod", Decimal("50"))

        assert total.grand_total == Decimal("701")
        assert total.cod_surcharge == Decimal("50")
        assert total.total_discount == Decimal("349")

    def test_online_order_has_no_surcharge(self):
        total = compute_total(Decimal("1000"), Decimal("0"), Decimal("0"), Decimal("40"), PaymentMethod.ONLINE, Decimal("50"))

        assert total.cod_surcharge == Decimal("0")
        assert total.grand_total == Decimal("1040")

    def test_discounts_never_push_total_below_fees(self):
        total = compute_total(Decimal("200"), Decimal("249"), Decimal("150"), Decimal("40"), "cod", Decimal("50"))

        assert total.grand_total == Decimal("90")

    def test_gateway_alias(self):
        total = compute_total(Decimal("100"), Decimal("0"), Decimal("0"), Decimal("0"), "razorpay", Decimal("50"))
        assert total.cod_surcharge == Decimal("0")

    def test_unknown_payment_method(self):
        with pytest.raises(ValueError):
            compute_total(Decimal("100"), Decimal("0"), Decimal("0"), Decimal("0"), "cheque")


class TestShipping:
    def test_flat_fee(self):
        assert ShippingCalculator(Decimal("40")).calculate(Decimal("500"), False) == Decimal("40")

    def test_empty_cart_ships_free(self):
        assert ShippingCalculator(Decimal("40")).calculate(Decimal("0"), False) == Decimal("0")

    def test_subscriber_ships_free(self):
        assert ShippingCalculator(Decimal("40")).calculate(Decimal("500"), True) == Decimal("0")


class TestQuote:
    def test_regular_shopper(self, pricing):
        total = pricing.quote(Decimal("1000"), UserProfile.anonymous(), applied("100"), PaymentMethod.COD)

        assert total == OrderTotal(
            subtotal=Decimal("1000"),
            membership_discount=Decimal("0"),
            coupon_discount=Decimal("100"),
            shipping_fee=Decimal("40"),
            cod_surcharge=Decimal("50"),
            grand_total=Decimal("990"),
        )

    def test_subscriber(self, pricing):
        total = pricing.quote(Decimal("1000"), make_user(subscription_days=30), applied("100"), "cod")

        assert total.membership_discount == Decimal("249")
        assert total.shipping_fee == Decimal("0")
        assert total.grand_total == Decimal("701")

    def test_premium_without_subscription_pays_shipping(self, pricing):
        total = pricing.quote(Decimal("1000"), make_user(premium_days=30))

        assert total.membership_discount == Decimal("249")
        assert total.shipping_fee == Decimal("40")
        assert total.grand_total == Decimal("791")

    def test_empty_cart_member(self, pricing):
        total = pricing.quote(Decimal("0"), make_user(subscription_days=30))
        assert total.grand_total == Decimal("0")


class TestOrderTotal:
    @pytest.mark.parametrize("grand_total, minor_units", [
        (Decimal("701"), 70100),
        (Decimal("99.99"), 9999),
        (Decimal("12.345"), 1235),
    ])
    def test_amount_in_minor_units(self, grand_total, minor_units):
        total = OrderTotal(Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0"), Decimal("0"), grand_total)
        assert total.amount_in_minor_units == minor_units

    def test_to_dict(self):
        total = compute_total(Decimal("1000"), Decimal("249"), Decimal("100"), Decimal("0"), "cod", Decimal("50"))

        data = total.to_dict()

        assert data["grand_total"] == "701"
        assert data["amount_in_minor_units"] == 70100


def test_payment_method_parse():
    assert PaymentMethod.parse(" COD ") == PaymentMethod.COD
    assert PaymentMethod.parse("online") == PaymentMethod.ONLINE
    assert PaymentMethod.parse("razorpay") == PaymentMethod.ONLINE


def test_omitted_settings_fall_back_to_config():
    from storefront.core.config import config

    pricing = PricingService()

    assert pricing.cod_fee == config.pricing.cod_fee
    assert pricing.shipping_calculator.flat_fee == config.pricing.shipping_fee
    assert pricing.membership_service.discount_amount == config.pricing.membership_discount
    total = compute_total(Decimal("100"), Decimal("0"), Decimal("0"), Decimal("0"), "cod")
    assert total.cod_surcharge == config.pricing.cod_fee
