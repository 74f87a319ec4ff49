from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.models.user import Subscription, UserProfile
from storefront.services.membership_service import MembershipService

from factories import make_user

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service():
    return MembershipService(Decimal("249"))


def profile(premium_expiry=None, is_premium=False, subscription_expiry=None, is_subscribed=False):
    return UserProfile(
        id="u1",
        is_premium=is_premium,
        premium_expiry=premium_expiry,
        subscription=Subscription(is_subscribed=is_subscribed, subscription_expiry=subscription_expiry),
    )


def test_active_premium_gets_discount(service):
    user = profile(is_premium=True, premium_expiry=NOW + timedelta(days=1))

    status = service.resolve(user, NOW)

    assert status.premium_active and not status.subscription_active
    assert service.discount_for(user, NOW) == Decimal("249")


def test_active_subscription_gets_discount(service):
    user = profile(is_subscribed=True, subscription_expiry=NOW + timedelta(days=30))

    assert service.resolve(user, NOW).subscription_active
    assert service.discount_for(user, NOW) == Decimal("249")


def test_expired_membership(service):
    user = profile(
        is_premium=True, premium_expiry=NOW - timedelta(seconds=1),
        is_subscribed=True, subscription_expiry=NOW - timedelta(days=3),
    )

    assert not service.resolve(user, NOW).is_active
    assert service.discount_for(user, NOW) == Decimal("0")


def test_expiry_equal_to_now_is_inactive(service):
    user = profile(is_subscribed=True, subscription_expiry=NOW)
    assert service.discount_for(user, NOW) == Decimal("0")


def test_flag_without_expiry_is_inactive(service, caplog):
    user = profile(is_premium=True, is_subscribed=True)

    assert service.discount_for(user, NOW) == Decimal("0")
    assert "without expiry" in caplog.text


def test_expiry_without_flag_is_inactive(service):
    user = profile(premium_expiry=NOW + timedelta(days=10))
    assert service.discount_for(user, NOW) == Decimal("0")


@pytest.mark.parametrize("user", [None, UserProfile.anonymous()])
def test_anonymous_user(service, user):
    assert service.discount_for(user, NOW) == Decimal("0")


def test_latest_active_expiry_is_reported(service):
    later = NOW + timedelta(days=90)
    user = profile(
        is_premium=True, premium_expiry=NOW + timedelta(days=5),
        is_subscribed=True, subscription_expiry=later,
    )

    assert service.resolve(user, NOW).expires_at == later


def test_naive_and_aware_expiries_together(service):
    naive_premium = (NOW + timedelta(days=3)).replace(tzinfo=None)
    aware_subscription = NOW + timedelta(days=5)
    user = profile(
        is_premium=True, premium_expiry=naive_premium,
        is_subscribed=True, subscription_expiry=aware_subscription,
    )

    status = service.resolve(user, NOW)

    assert status.premium_active and status.subscription_active
    assert status.expires_at == aware_subscription
    assert service.discount_for(user, NOW) == Decimal("249")
    assert service.describe(user, NOW)["expires_at"] == aware_subscription.isoformat()


def test_describe(service):
    user = profile(is_subscribed=True, subscription_expiry=datetime(2026, 3, 31, 20, 0, tzinfo=timezone.utc))

    summary = service.describe(user, NOW)

    assert summary["is_active"] is True
    assert summary["discount"] == "249"
    assert summary["free_shipping"] is True
    # 20:00 UTC is past midnight in Asia/Kolkata
    assert summary["expires_on"] == "01 Apr 2026"


def test_describe_premium_only_pays_shipping(service):
    summary = service.describe(make_user(premium_days=10), None)

    assert summary["premium_active"] is True
    assert summary["free_shipping"] is False


def test_describe_inactive(service):
    summary = service.describe(UserProfile.anonymous(), NOW)

    assert summary["is_active"] is False
    assert summary["discount"] == "0"
    assert summary["expires_at"] is None


class TestProfileParsing:
    def test_backend_document(self):
        user = UserProfile.from_dict({
            "_id": "abc",
            "name": "Asha",
            "isPremium": True,
            "premiumExpiry": "2026-06-01T00:00:00.000Z",
            "subscription": {"isSubscribed": True, "subscriptionExpiry": "2026-02-01T10:00:00+05:30"},
        })

        assert user.id == "abc"
        assert user.premium_expiry == datetime(2026, 6, 1, tzinfo=timezone.utc)
        assert user.subscription.subscription_expiry == datetime(2026, 2, 1, 4, 30, tzinfo=timezone.utc)

    def test_unparseable_expiry_is_none(self):
        user = UserProfile.from_dict({"_id": "abc", "isPremium": True, "premiumExpiry": "next year"})

        assert user.premium_expiry is None
        assert MembershipService(Decimal("249")).discount_for(user, NOW) == Decimal("0")

    def test_empty_document_is_anonymous(self):
        assert UserProfile.from_dict(None).is_anonymous
        assert UserProfile.from_dict({}).is_anonymous
