from flask import Blueprint

from storefront.clients.backend_client import BackendClient
from storefront.core.config import config
from storefront.routes.schemas import ApplyCouponSchema
from storefront.routes.utils import get_container, get_session, load_json, success_response
from storefront.services.coupon_service import public_coupons
from storefront.utils.formatting_utils import FormattingUtils


coupons_bp = Blueprint("coupons", __name__)

_apply_schema = ApplyCouponSchema()


@coupons_bp.route("/public", methods=["GET"])
def list_public_coupons():
    """Coupons advertised to every shopper, with a display label for each."""
    coupons = public_coupons(get_container().get(BackendClient).list_coupons())

    data = []
    for coupon in coupons:
        entry = coupon.to_dict()
        entry["label"] = FormattingUtils.format_discount_label(
            coupon.discount_type.value, coupon.discount_value, config.pricing.currency
        )
        data.append(entry)

    return success_response(data)


@coupons_bp.route("/apply", methods=["POST"])
def apply_coupon():
    """
    Validate a code against the current cart subtotal and apply it.

    Body: { "code": str }
    Re-applying while a coupon is applied returns the existing application.
    """
    data = load_json(_apply_schema)
    session = get_session()

    applied = session.apply_coupon(data["code"])
    return success_response(session.coupons.to_dict(), message=f"Coupon {applied.code} applied.")


@coupons_bp.route("/applied", methods=["DELETE"])
def remove_coupon():
    session = get_session()
    session.remove_coupon()
    return success_response(session.coupons.to_dict(), message="Coupon removed.")
