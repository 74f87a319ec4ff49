from datetime import datetime
from decimal import Decimal
from typing import Optional, Union
import logging

from storefront.core.config import config
from storefront.models.coupon import AppliedCoupon
from storefront.models.order import OrderTotal, PaymentMethod
from storefront.models.user import UserProfile
from storefront.services.membership_service import MembershipService
from storefront.services.shipping_service import ShippingCalculator

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def compute_total(
    subtotal: Decimal,
    membership_discount: Decimal,
    coupon_discount: Decimal,
    shipping_fee: Decimal,
    payment_method: Union[PaymentMethod, str],
    cod_fee: Optional[Decimal] = None,
) -> OrderTotal:
    """
    Compose the payable amount

    grand_total = max(0, subtotal - membership - coupon) + shipping + COD,
    so discounts larger than the subtotal never produce a negative total.
    """
    if isinstance(payment_method, str):
        payment_method = PaymentMethod.parse(payment_method)
    if cod_fee is None:
        cod_fee = config.pricing.cod_fee

    cod_surcharge = cod_fee if payment_method == PaymentMethod.COD else ZERO
    discounted = max(ZERO, subtotal - membership_discount - coupon_discount)

    return OrderTotal(
        subtotal=subtotal,
        membership_discount=membership_discount,
        coupon_discount=coupon_discount,
        shipping_fee=shipping_fee,
        cod_surcharge=cod_surcharge,
        grand_total=discounted + shipping_fee + cod_surcharge,
    )


class PricingService:
    """
    The one place every flow (cart, checkout, payment, order) prices an order

    Business Rules:
    - Membership discount from MembershipService (premium or subscription)
    - Shipping from ShippingCalculator (subscription only)
    - Coupon discount as computed when the coupon was applied
    - COD surcharge from configuration
    """

    def __init__(
        self,
        membership_service: Optional[MembershipService] = None,
        shipping_calculator: Optional[ShippingCalculator] = None,
        cod_fee: Optional[Decimal] = None,
    ):
        self.membership_service = membership_service or MembershipService()
        self.shipping_calculator = shipping_calculator or ShippingCalculator()
        self.cod_fee = config.pricing.cod_fee if cod_fee is None else cod_fee

    def quote(
        self,
        subtotal: Decimal,
        user: Optional[UserProfile],
        applied_coupon: Optional[AppliedCoupon] = None,
        payment_method: Union[PaymentMethod, str] = PaymentMethod.ONLINE,
        now: Optional[datetime] = None,
    ) -> OrderTotal:
        status = self.membership_service.resolve(user, now)

        membership_discount = self.membership_service.discount_amount if status.is_active else ZERO
        coupon_discount = applied_coupon.discount_amount if applied_coupon else ZERO
        shipping_fee = self.shipping_calculator.calculate(subtotal, status.subscription_active)

        total = compute_total(
            subtotal, membership_discount, coupon_discount, shipping_fee, payment_method, self.cod_fee
        )
        logger.debug(f"Quoted order: {total}")
        return total
