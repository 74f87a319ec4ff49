from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Union
import logging
import threading

from storefront.models.coupon import AppliedCoupon, CouponState
from storefront.models.order import OrderTotal, PaymentMethod
from storefront.models.product import Product
from storefront.models.user import UserProfile
from storefront.services.cart_service import CartService
from storefront.services.coupon_service import CouponApplier
from storefront.services.pricing_service import PricingService

logger = logging.getLogger(__name__)


@dataclass
class StorefrontSession:
    """
    Everything a shopper's checkout depends on, passed explicitly to services

    Any cart change that moves the subtotal drops an applied coupon, because
    its discount was computed for the old subtotal.
    """
    session_key: str
    cart: CartService
    coupons: CouponApplier
    user: UserProfile = field(default_factory=UserProfile.anonymous)

    def add_item(self, product: Product, quantity: int, size: str = "", color: str = "") -> bool:
        return self._mutate(lambda: self.cart.add_item(product, quantity, size, color))

    def update_quantity(self, product_id: str, size: str, color: str, new_quantity: int) -> bool:
        return self._mutate(lambda: self.cart.update_quantity(product_id, size, color, new_quantity))

    def remove_item(self, product_id: str, size: str = "", color: str = "") -> bool:
        return self._mutate(lambda: self.cart.remove_item(product_id, size, color))

    def apply_coupon(self, code: str) -> AppliedCoupon:
        return self.coupons.apply_coupon(code, self.cart.subtotal(), self.user.id)

    def remove_coupon(self) -> None:
        self.coupons.remove_coupon()

    def quote(
        self,
        pricing: PricingService,
        payment_method: Union[PaymentMethod, str] = PaymentMethod.ONLINE,
        now: Optional[datetime] = None,
    ) -> OrderTotal:
        return pricing.quote(self.cart.subtotal(), self.user, self.coupons.applied, payment_method, now)

    def reset(self) -> None:
        """After an order is placed"""
        self.cart.clear()
        self.coupons.remove_coupon()

    def _mutate(self, operation: Callable[[], bool]) -> bool:
        before = self.cart.subtotal()
        changed = operation()
        if changed:
            self._invalidate_coupon(before)
        return changed

    def _invalidate_coupon(self, previous_subtotal: Decimal) -> None:
        if self.coupons.state != CouponState.APPLIED:
            return
        if self.cart.subtotal() != previous_subtotal:
            logger.info(f"Cart total changed for session {self.session_key}; coupon must be re-applied")
            self.coupons.remove_coupon()


class SessionRegistry:
    """
    In-process map of session key to StorefrontSession

    Holds at most max_sessions entries and evicts the least recently used.
    An evicted shopper gets a fresh session whose cart reloads from its
    stored snapshot; an applied coupon has to be applied again.
    """

    def __init__(self, factory: Callable[[str], StorefrontSession], max_sessions: int = 1000):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._factory = factory
        self._max_sessions = max_sessions
        self._sessions: "OrderedDict[str, StorefrontSession]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_key: str) -> bool:
        return session_key in self._sessions

    def get(self, session_key: str, user: Optional[UserProfile] = None) -> StorefrontSession:
        with self._lock:
            session = self._sessions.get(session_key)
            if session is None:
                session = self._factory(session_key)
                self._sessions[session_key] = session
                self._evict()
            else:
                self._sessions.move_to_end(session_key)
        if user is not None:
            session.user = user
        return session

    def _evict(self) -> None:
        while len(self._sessions) > self._max_sessions:
            session_key, _ = self._sessions.popitem(last=False)
            logger.info(f"Evicted idle session {session_key}")
