from decimal import Decimal

import pytest

from storefront.core.exceptions import (
    BelowMinimumError, ConflictError, CouponNotFoundError, NetworkFailureError, ValidationError
)
from storefront.models.coupon import CouponScope, CouponState, DiscountType
from storefront.services.coupon_service import CouponApplier, calculate_discount, public_coupons

from factories import FakeBackend, make_coupon


@pytest.fixture
def applier(backend):
    return CouponApplier(backend)


class TestCalculateDiscount:
    def test_flat(self):
        assert calculate_discount(make_coupon(discount_type=DiscountType.FLAT, value=200), Decimal("1000")) == Decimal("200")

    def test_flat_never_exceeds_subtotal(self):
        assert calculate_discount(make_coupon(discount_type=DiscountType.FLAT, value=200), Decimal("150")) == Decimal("150")

    def test_percentage(self):
        assert calculate_discount(make_coupon(value=10), Decimal("1000")) == Decimal("100")

    @pytest.mark.parametrize("subtotal, expected", [
        (Decimal("1005"), Decimal("101")),  # 100.5 rounds half-up
        (Decimal("999"), Decimal("100")),
        (Decimal("994"), Decimal("99")),
    ])
    def test_percentage_rounds_to_whole_units(self, subtotal, expected):
        assert calculate_discount(make_coupon(value=10), subtotal) == expected

    def test_cap(self):
        assert calculate_discount(make_coupon(value=50, cap=300), Decimal("1000")) == Decimal("300")

    def test_zero_subtotal(self):
        assert calculate_discount(make_coupon(discount_type=DiscountType.FLAT, value=200), Decimal("0")) == Decimal("0")


class TestApplyCoupon:
    def test_applies_known_code(self, applier, backend):
        applied = applier.apply_coupon("  SAVE10 ", Decimal("1000"), "u1")

        assert applied.code == "SAVE10"
        assert applied.discount_amount == Decimal("100")
        assert applier.state == CouponState.APPLIED
        assert applier.discount == Decimal("100")
        assert backend.lookups == [{"code": "SAVE10", "subtotal": Decimal("1000"), "user_id": "u1"}]

    def test_unknown_code_is_rejected(self, applier):
        with pytest.raises(CouponNotFoundError):
            applier.apply_coupon("NOPE", Decimal("1000"))

        assert applier.state == CouponState.REJECTED
        assert applier.discount == Decimal("0")
        assert applier.error == "Invalid coupon code"

    def test_below_minimum(self, applier):
        with pytest.raises(BelowMinimumError) as exc_info:
            applier.apply_coupon("FLAT200", Decimal("499"))

        assert "₹500.00" in exc_info.value.message
        assert exc_info.value.status_code == 422
        assert applier.state == CouponState.REJECTED

    def test_exactly_minimum_qualifies(self, applier):
        assert applier.apply_coupon("FLAT200", Decimal("500")).discount_amount == Decimal("200")

    @pytest.mark.parametrize("code", ["", "   ", None])
    def test_empty_code(self, applier, backend, code):
        with pytest.raises(ValidationError):
            applier.apply_coupon(code, Decimal("1000"))

        assert backend.lookups == []
        assert applier.state == CouponState.REJECTED

    def test_over_long_code_is_rejected_not_truncated(self):
        stored = "A" * 64
        backend = FakeBackend(coupons=[make_coupon(stored, value=50)])
        applier = CouponApplier(backend)

        with pytest.raises(ValidationError):
            applier.apply_coupon(stored + "XYZ", Decimal("1000"))

        assert backend.lookups == []
        assert applier.state == CouponState.REJECTED
        assert applier.discount == Decimal("0")

    def test_longest_allowed_code(self):
        stored = "A" * 64
        applier = CouponApplier(FakeBackend(coupons=[make_coupon(stored, value=50)]))

        assert applier.apply_coupon(stored, Decimal("1000")).discount_amount == Decimal("500")

    def test_network_failure_reads_as_not_found(self, applier, backend):
        backend.lookup_error = NetworkFailureError()

        with pytest.raises(CouponNotFoundError):
            applier.apply_coupon("SAVE10", Decimal("1000"))

        assert applier.state == CouponState.REJECTED

    def test_rejected_then_retry(self, applier):
        with pytest.raises(CouponNotFoundError):
            applier.apply_coupon("NOPE", Decimal("1000"))

        applier.apply_coupon("SAVE10", Decimal("1000"))

        assert applier.state == CouponState.APPLIED
        assert applier.error is None

    def test_apply_while_applied_keeps_existing(self, applier, backend):
        first = applier.apply_coupon("SAVE10", Decimal("1000"))

        again = applier.apply_coupon("FLAT200", Decimal("1000"))

        assert again is first
        assert len(backend.lookups) == 1

    def test_apply_while_validating_conflicts(self):
        class ReentrantLookup(FakeBackend):
            def lookup_coupon(self, code, subtotal, user_id=None):
                with pytest.raises(ConflictError):
                    applier.apply_coupon("OTHER", subtotal)
                return super().lookup_coupon(code, subtotal, user_id)

        applier = CouponApplier(ReentrantLookup(coupons=[make_coupon("SAVE10")]))

        applier.apply_coupon("SAVE10", Decimal("1000"))

        assert applier.state == CouponState.APPLIED

    def test_removal_during_validation_discards_result(self):
        class RemovingLookup(FakeBackend):
            def lookup_coupon(self, code, subtotal, user_id=None):
                applier.remove_coupon()
                return super().lookup_coupon(code, subtotal, user_id)

        applier = CouponApplier(RemovingLookup(coupons=[make_coupon("SAVE10")]))

        applier.apply_coupon("SAVE10", Decimal("1000"))

        assert applier.state == CouponState.UNAPPLIED
        assert applier.applied is None


class TestRemoveCoupon:
    def test_remove(self, applier):
        applier.apply_coupon("SAVE10", Decimal("1000"))

        applier.remove_coupon()

        assert applier.state == CouponState.UNAPPLIED
        assert applier.discount == Decimal("0")

    def test_different_code_after_removal(self, applier):
        applier.apply_coupon("SAVE10", Decimal("1000"))
        applier.remove_coupon()

        applied = applier.apply_coupon("FLAT200", Decimal("1000"))

        assert applied.code == "FLAT200"
        assert applier.discount == Decimal("200")

    def test_remove_is_idempotent(self, applier):
        applier.remove_coupon()
        applier.remove_coupon()
        assert applier.state == CouponState.UNAPPLIED


class TestSummary:
    def test_public_coupon(self, applier):
        applier.apply_coupon("SAVE10", Decimal("1000"))

        data = applier.to_dict()

        assert data["state"] == "applied"
        assert data["discount"] == "100"
        assert data["summary"] == "10% off - ₹100.00 saved"

    def test_personal_coupon_names_recipient(self, applier):
        applier.apply_coupon("ASHA150", Decimal("1000"))

        assert applier.applied.is_personal
        assert applier.to_dict()["summary"] == "Flat ₹150 off - ₹150.00 saved (For: Asha)"

    def test_unapplied(self, applier):
        data = applier.to_dict()
        assert data["applied"] is None
        assert data["summary"] is None


def test_public_coupons_excludes_personal(backend):
    coupons = public_coupons(backend.list_coupons())

    assert [coupon.code for coupon in coupons] == ["SAVE10", "FLAT200"]
    assert all(coupon.scope == CouponScope.PUBLIC for coupon in coupons)
