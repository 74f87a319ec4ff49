from storefront.routes.cart import cart_bp
from storefront.routes.checkout import checkout_bp
from storefront.routes.coupons import coupons_bp
from storefront.routes.membership import membership_bp

__all__ = ["cart_bp", "coupons_bp", "checkout_bp", "membership_bp"]
