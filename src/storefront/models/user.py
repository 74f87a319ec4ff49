from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from datetime import datetime

from storefront.utils.date_utils import DateUtils


@dataclass
class Subscription:
    """Paid subscription block of the user profile"""
    is_subscribed: bool = False
    subscription_expiry: Optional[datetime] = None


@dataclass
class UserProfile:
    """
    The fields of the authenticated user that pricing reads

    Expiry values that are missing or cannot be parsed are stored as None,
    which membership checks treat as inactive.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    is_premium: bool = False
    premium_expiry: Optional[datetime] = None
    subscription: Subscription = field(default_factory=Subscription)

    @property
    def is_anonymous(self) -> bool:
        return self.id is None

    @classmethod
    def anonymous(cls) -> "UserProfile":
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "UserProfile":
        """Build from the backend's `/user/profile` document"""
        if not data:
            return cls.anonymous()

        subscription_data = data.get("subscription") or {}
        user_id = data.get("_id", data.get("id"))
        return cls(
            id=str(user_id) if user_id is not None else None,
            name=data.get("name"),
            email=data.get("email"),
            is_premium=bool(data.get("isPremium", False)),
            premium_expiry=DateUtils.parse_optional(data.get("premiumExpiry")),
            subscription=Subscription(
                is_subscribed=bool(subscription_data.get("isSubscribed", False)),
                subscription_expiry=DateUtils.parse_optional(subscription_data.get("subscriptionExpiry")),
            ),
        )
