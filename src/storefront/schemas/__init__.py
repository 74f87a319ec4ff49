from .common_schemas import MoneyField
from .coupon_schemas import BackendCoupon, CouponApplyEnvelope, CouponListEnvelope, CouponRecipient

__all__ = ["MoneyField", "BackendCoupon", "CouponApplyEnvelope", "CouponListEnvelope", "CouponRecipient"]
