from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional
from decimal import Decimal

from storefront.models.coupon import Coupon, CouponScope, DiscountType


class CouponRecipient(BaseModel):
    """Owner of a personal coupon"""
    name: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class BackendCoupon(BaseModel):
    """Coupon document as the storefront backend returns it"""
    code: Optional[str] = Field(default=None, description="Coupon code")
    discount: Decimal = Field(ge=0, description="Flat amount or percentage")
    discount_type: DiscountType = Field(alias="discountType")
    scope: CouponScope = Field(default=CouponScope.PUBLIC, alias="type")
    min_purchase: Decimal = Field(default=Decimal("0"), ge=0, alias="minPurchase")
    max_discount: Optional[Decimal] = Field(default=None, ge=0, alias="maxDiscount")
    recipient: Optional[CouponRecipient] = None

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "code": "WELCOME10",
                "discount": 10,
                "discountType": "percentage",
                "type": "public",
                "minPurchase": 500,
                "maxDiscount": 300
            }
        }
    )

    @field_validator('discount_type', mode='before')
    @classmethod
    def normalize_discount_type(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if v in ('percent', 'percentage'):
                return DiscountType.PERCENTAGE
        return v

    @field_validator('scope', 'min_purchase', mode='before')
    @classmethod
    def default_when_null(cls, v, info):
        if v is None:
            return CouponScope.PUBLIC if info.field_name == 'scope' else Decimal("0")
        return v

    @model_validator(mode='after')
    def validate_percentage_range(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.discount > 100:
            raise ValueError('Percentage discount cannot exceed 100')
        return self

    def to_coupon(self, code: Optional[str] = None) -> Coupon:
        """Convert to the domain coupon; `code` fills in when the backend omits it"""
        return Coupon(
            code=self.code or code or "",
            discount_type=self.discount_type,
            discount_value=self.discount,
            scope=self.scope,
            min_purchase_amount=self.min_purchase,
            max_discount_cap=self.max_discount,
            recipient_name=self.recipient.name if self.recipient else None,
        )


class CouponApplyEnvelope(BaseModel):
    """Response of POST /coupons/apply"""
    success: bool = False
    data: Optional[BackendCoupon] = None
    message: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class CouponListEnvelope(BaseModel):
    """Response of GET /coupons; entries are validated one by one"""
    data: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator('data', mode='before')
    @classmethod
    def default_when_null(cls, v):
        return v or []
