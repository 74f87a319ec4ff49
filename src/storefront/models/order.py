from dataclasses import dataclass
from typing import Dict, Any
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum


class PaymentMethod(Enum):
    """How the customer pays"""
    COD = "cod"
    ONLINE = "online"  # Payment gateway, handled outside this service

    @classmethod
    def parse(cls, value: str) -> "PaymentMethod":
        normalized = (value or "").strip().lower()
        # The storefront calls its gateway option "razorpay"
        if normalized == "razorpay":
            return cls.ONLINE
        return cls(normalized)


class PaymentStatus(Enum):
    """Payment status recorded on a placed order"""
    PENDING = "Pending"
    PAID = "Paid"


@dataclass(frozen=True)
class OrderTotal:
    """Line-item breakdown of the payable amount"""
    subtotal: Decimal
    membership_discount: Decimal
    coupon_discount: Decimal
    shipping_fee: Decimal
    cod_surcharge: Decimal
    grand_total: Decimal

    @property
    def total_discount(self) -> Decimal:
        return self.membership_discount + self.coupon_discount

    @property
    def amount_in_minor_units(self) -> int:
        """Grand total in paise/cents, as payment gateways expect"""
        return int((self.grand_total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "subtotal": str(self.subtotal),
            "membership_discount": str(self.membership_discount),
            "coupon_discount": str(self.coupon_discount),
            "shipping_fee": str(self.shipping_fee),
            "cod_surcharge": str(self.cod_surcharge),
            "grand_total": str(self.grand_total),
            "amount_in_minor_units": self.amount_in_minor_units,
        }
