from .product import Product
from .cart import Cart, CartItem
from .coupon import Coupon, AppliedCoupon, CouponScope, CouponState, DiscountType
from .user import UserProfile, Subscription
from .order import OrderTotal, PaymentMethod, PaymentStatus

__all__ = [
    "Product",
    "Cart", "CartItem",
    "Coupon", "AppliedCoupon", "CouponScope", "CouponState", "DiscountType",
    "UserProfile", "Subscription",
    "OrderTotal", "PaymentMethod", "PaymentStatus"
]
