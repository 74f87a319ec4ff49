from .cart_service import CartService
from .coupon_service import CouponApplier, calculate_discount, public_coupons
from .membership_service import MembershipService, MembershipStatus
from .order_service import OrderService
from .pricing_service import PricingService, compute_total
from .session import SessionRegistry, StorefrontSession
from .shipping_service import ShippingCalculator

__all__ = [
    "CartService",
    "CouponApplier", "calculate_discount", "public_coupons",
    "MembershipService", "MembershipStatus",
    "OrderService",
    "PricingService", "compute_total",
    "SessionRegistry", "StorefrontSession",
    "ShippingCalculator"
]
