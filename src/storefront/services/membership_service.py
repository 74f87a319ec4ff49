from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional
import logging

from storefront.core.config import config
from storefront.models.user import UserProfile
from storefront.utils.date_utils import DateUtils

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipStatus:
    """Which membership programmes are active for a user at a given moment"""
    premium_active: bool
    subscription_active: bool
    expires_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.premium_active or self.subscription_active


class MembershipService:
    """
    Membership discount resolver

    Business Rules:
    - Discount applies when the legacy premium flag OR the subscription flag
      is set with an expiry strictly after now
    - A flag without a usable expiry never counts as active
    - Free shipping only looks at the subscription (see ShippingCalculator)
    """

    def __init__(self, discount_amount: Optional[Decimal] = None):
        self.discount_amount = config.pricing.membership_discount if discount_amount is None else discount_amount

    def resolve(self, user: Optional[UserProfile], now: Optional[datetime] = None) -> MembershipStatus:
        if user is None:
            return MembershipStatus(premium_active=False, subscription_active=False)

        now = now or DateUtils.now_utc()

        premium_active = user.is_premium and DateUtils.is_after(user.premium_expiry, now)
        subscription = user.subscription
        subscription_active = subscription.is_subscribed and DateUtils.is_after(subscription.subscription_expiry, now)

        if user.is_premium and user.premium_expiry is None:
            logger.warning(f"User {user.id} has premium flag without expiry; treating as inactive")
        if subscription.is_subscribed and subscription.subscription_expiry is None:
            logger.warning(f"User {user.id} has subscription flag without expiry; treating as inactive")

        active_expiries = [
            DateUtils.to_utc(expiry) for expiry, active in (
                (user.premium_expiry, premium_active),
                (subscription.subscription_expiry, subscription_active),
            ) if active
        ]

        return MembershipStatus(
            premium_active=premium_active,
            subscription_active=subscription_active,
            expires_at=max(active_expiries) if active_expiries else None,
        )

    def discount_for(self, user: Optional[UserProfile], now: Optional[datetime] = None) -> Decimal:
        """Flat membership discount, or zero"""
        if self.resolve(user, now).is_active:
            return self.discount_amount
        return Decimal("0")

    def describe(self, user: Optional[UserProfile], now: Optional[datetime] = None) -> dict:
        """Membership summary for the account page"""
        status = self.resolve(user, now)
        return {
            "is_active": status.is_active,
            "premium_active": status.premium_active,
            "subscription_active": status.subscription_active,
            "discount": str(self.discount_amount if status.is_active else Decimal("0")),
            "free_shipping": status.subscription_active,
            "expires_at": DateUtils.to_iso_string(status.expires_at) if status.expires_at else None,
            "expires_on": DateUtils.format_for_display(status.expires_at) if status.expires_at else None,
        }
