from decimal import Decimal
from typing import Optional

from storefront.core.config import config


class ShippingCalculator:
    """
    Flat-rate shipping

    Empty carts ship free, active subscribers ship free, everyone else pays
    the configured flat fee. Legacy premium members without a subscription
    still pay shipping.
    """

    def __init__(self, flat_fee: Optional[Decimal] = None):
        self.flat_fee = config.pricing.shipping_fee if flat_fee is None else flat_fee

    def calculate(self, subtotal: Decimal, subscription_active: bool) -> Decimal:
        if subtotal <= 0:
            return Decimal("0")
        if subscription_active:
            return Decimal("0")
        return self.flat_fee
