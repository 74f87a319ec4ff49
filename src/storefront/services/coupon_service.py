from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Protocol, List, Dict, Any
import logging
import threading

from storefront.core.exceptions import (
    BaseAPIException, BelowMinimumError, ConflictError, CouponNotFoundError,
    ExternalServiceError, ValidationError
)
from storefront.models.coupon import AppliedCoupon, Coupon, CouponState, DiscountType
from storefront.utils.formatting_utils import FormattingUtils
from storefront.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)


class CouponLookup(Protocol):
    def lookup_coupon(self, code: str, subtotal: Decimal, user_id: Optional[str] = None) -> Coupon: ...


def calculate_discount(coupon: Coupon, subtotal: Decimal) -> Decimal:
    """
    Discount a coupon grants on a subtotal

    Flat discounts never exceed the subtotal; percentages round half-up to
    whole units. The optional cap applies to both kinds.
    """
    if coupon.discount_type == DiscountType.FLAT:
        amount = min(subtotal, coupon.discount_value)
    else:
        amount = (subtotal * coupon.discount_value / Decimal(100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

    if coupon.max_discount_cap is not None:
        amount = min(amount, coupon.max_discount_cap)

    return max(amount, Decimal("0"))


class CouponApplier:
    """
    Coupon application state for one checkout session

    State machine: UNAPPLIED -> VALIDATING -> APPLIED | REJECTED, and
    APPLIED -> UNAPPLIED on removal. VALIDATING is exclusive: a second apply
    while a lookup is in flight raises ConflictError. Applying while a coupon
    is already applied returns the existing application unchanged.
    """

    def __init__(self, lookup: CouponLookup, currency: str = "INR"):
        self.lookup = lookup
        self.currency = currency
        self.state = CouponState.UNAPPLIED
        self.applied: Optional[AppliedCoupon] = None
        self.error: Optional[str] = None
        self._lock = threading.Lock()
        self._generation = 0

    @property
    def discount(self) -> Decimal:
        if self.state == CouponState.APPLIED and self.applied:
            return self.applied.discount_amount
        return Decimal("0")

    def apply_coupon(self, code: str, subtotal: Decimal, user_id: Optional[str] = None) -> AppliedCoupon:
        normalized = ValidationUtils.normalize_coupon_code(code)

        with self._lock:
            if self.state == CouponState.APPLIED and self.applied:
                logger.info(f"Coupon {self.applied.code} already applied; ignoring {normalized!r}")
                return self.applied
            if self.state == CouponState.VALIDATING:
                raise ConflictError("A coupon is already being validated", conflict_field="coupon")
            if not normalized:
                error = ValidationError("Please enter a coupon code")
                self._mark_rejected(error)
                raise error
            if not ValidationUtils.validate_coupon_code_length(normalized):
                error = ValidationError(
                    f"Coupon code must be at most {ValidationUtils.MAX_COUPON_CODE_LENGTH} characters"
                )
                self._mark_rejected(error)
                raise error

            self.state = CouponState.VALIDATING
            self.error = None
            generation = self._generation

        logger.info(f"Validating coupon {normalized} against subtotal {subtotal}")
        try:
            coupon = self.lookup.lookup_coupon(normalized, subtotal, user_id)
            applied = self._evaluate(normalized, coupon, subtotal)
        except (CouponNotFoundError, BelowMinimumError, ValidationError) as e:
            self._finish(generation, error=e)
            raise
        except ExternalServiceError as e:
            # Unreachable backend reads the same as an unknown code
            logger.warning(f"Coupon lookup for {normalized} failed: {e.internal_message}")
            error = CouponNotFoundError(normalized)
            self._finish(generation, error=error)
            raise error from e
        except Exception:
            self._finish(generation, error=BaseAPIException("Coupon validation failed"))
            raise

        self._finish(generation, applied=applied)
        logger.info(f"Applied coupon {applied.code}: discount {applied.discount_amount}")
        return applied

    def remove_coupon(self) -> None:
        """Back to UNAPPLIED; safe to call repeatedly"""
        with self._lock:
            self._generation += 1
            if self.applied:
                logger.info(f"Removed coupon {self.applied.code}")
            self.state = CouponState.UNAPPLIED
            self.applied = None
            self.error = None

    def _evaluate(self, code: str, coupon: Coupon, subtotal: Decimal) -> AppliedCoupon:
        if subtotal < coupon.min_purchase_amount:
            raise BelowMinimumError(
                code,
                coupon.min_purchase_amount,
                subtotal,
                minimum_display=FormattingUtils.format_money(coupon.min_purchase_amount, self.currency)
            )

        return AppliedCoupon(
            code=coupon.code or code,
            discount_amount=calculate_discount(coupon, subtotal),
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            scope=coupon.scope,
            recipient_name=coupon.recipient_name,
        )

    def _finish(self, generation: int, applied: Optional[AppliedCoupon] = None,
                error: Optional[BaseAPIException] = None) -> None:
        with self._lock:
            if generation != self._generation:
                # Removed while validating; drop the stale result
                return
            if error is not None:
                self._mark_rejected(error)
                return
            self.state = CouponState.APPLIED
            self.applied = applied
            self.error = None

    def _mark_rejected(self, error: BaseAPIException) -> None:
        self.state = CouponState.REJECTED
        self.applied = None
        self.error = error.message

    def to_dict(self) -> Dict[str, Any]:
        applied = self.applied.to_dict() if self.applied else None
        return {
            "state": self.state.value,
            "applied": applied,
            "discount": str(self.discount),
            "summary": FormattingUtils.format_savings(applied, self.currency) if applied else None,
            "error": self.error,
        }


def public_coupons(coupons: List[Coupon]) -> List[Coupon]:
    """Coupons that may be advertised in the offers panel"""
    return [coupon for coupon in coupons if coupon.is_public]
