from dataclasses import dataclass
from typing import Optional, Dict, Any
from decimal import Decimal
from enum import Enum


class DiscountType(Enum):
    """How a coupon's discount value is interpreted"""
    FLAT = "flat"
    PERCENTAGE = "percentage"


class CouponScope(Enum):
    """Who may redeem a coupon"""
    PUBLIC = "public"
    PERSONAL = "personal"


class CouponState(Enum):
    """Coupon application lifecycle"""
    UNAPPLIED = "unapplied"
    VALIDATING = "validating"
    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Coupon:
    """Coupon metadata as defined by the backend catalog (read-only)"""
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    scope: CouponScope = CouponScope.PUBLIC
    min_purchase_amount: Decimal = Decimal("0")
    max_discount_cap: Optional[Decimal] = None
    recipient_name: Optional[str] = None

    @property
    def is_public(self) -> bool:
        return self.scope == CouponScope.PUBLIC

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "discount_type": self.discount_type.value,
            "discount_value": str(self.discount_value),
            "scope": self.scope.value,
            "min_purchase_amount": str(self.min_purchase_amount),
            "max_discount_cap": str(self.max_discount_cap) if self.max_discount_cap is not None else None,
        }


@dataclass(frozen=True)
class AppliedCoupon:
    """A coupon that passed validation, with the discount computed for the cart"""
    code: str
    discount_amount: Decimal
    discount_type: DiscountType
    discount_value: Decimal
    scope: CouponScope
    recipient_name: Optional[str] = None

    @property
    def is_personal(self) -> bool:
        return self.scope == CouponScope.PERSONAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "discount_amount": str(self.discount_amount),
            "discount_type": self.discount_type.value,
            "discount_value": str(self.discount_value),
            "scope": self.scope.value,
            "recipient_name": self.recipient_name,
        }
