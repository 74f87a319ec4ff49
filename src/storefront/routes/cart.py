import logging

from flask import Blueprint

from storefront.core.config import config
from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.models.product import Product
from storefront.routes.schemas import AddCartItemSchema, CartLineSchema, UpdateCartItemSchema
from storefront.routes.utils import get_session, load_json, success_response
from storefront.services.session import StorefrontSession
from storefront.utils.formatting_utils import FormattingUtils

logger = logging.getLogger(__name__)

cart_bp = Blueprint("cart", __name__)

_add_schema = AddCartItemSchema()
_update_schema = UpdateCartItemSchema()
_line_schema = CartLineSchema()


def _cart_payload(session: StorefrontSession) -> dict:
    data = session.cart.cart.to_dict()
    data["subtotal_display"] = FormattingUtils.format_money(session.cart.subtotal(), config.pricing.currency)
    data["coupon"] = session.coupons.to_dict()
    return data


@cart_bp.route("/me", methods=["GET"])
def get_my_cart():
    """Return the current session's cart."""
    return success_response(_cart_payload(get_session()))


@cart_bp.route("/me/items", methods=["POST"])
def add_cart_item():
    """
    Add a product line to the cart.

    Body: { "product": {"_id", "name", "price", ...}, "quantity": int, "size": str, "color": str }
    An existing line with the same product, size and color grows instead of duplicating.
    """
    data = load_json(_add_schema)
    session = get_session()

    product = Product.from_dict(data["product"])
    if not session.add_item(product, data["quantity"], data["size"], data["color"]):
        raise ValidationError(
            "Quantity must be at least 1",
            field_errors=[{"field": "quantity", "message": "must be at least 1"}]
        )

    return success_response(_cart_payload(session), message="Item added to cart.", status=201)


@cart_bp.route("/me/items", methods=["PATCH"])
def update_cart_item():
    """
    Set the quantity of an existing line.

    Body: { "product_id": str, "size": str, "color": str, "quantity": int }
    Quantities below 1 are rejected; use DELETE to remove a line.
    """
    data = load_json(_update_schema)
    session = get_session()

    if data["quantity"] < 1:
        raise ValidationError(
            "Quantity must be at least 1; remove the item instead",
            field_errors=[{"field": "quantity", "message": "must be at least 1"}]
        )

    if not session.update_quantity(data["product_id"], data["size"], data["color"], data["quantity"]):
        raise NotFoundError("Cart item", data["product_id"])

    return success_response(_cart_payload(session), message="Cart updated.")


@cart_bp.route("/me/items", methods=["DELETE"])
def remove_cart_item():
    """Body: { "product_id": str, "size": str, "color": str }"""
    data = load_json(_line_schema)
    session = get_session()

    if not session.remove_item(data["product_id"], data["size"], data["color"]):
        raise NotFoundError("Cart item", data["product_id"])

    return success_response(_cart_payload(session), message="Item removed from cart.")


@cart_bp.route("/me", methods=["DELETE"])
def clear_cart():
    session = get_session()
    session.reset()
    logger.info(f"Cart cleared for session {session.session_key}")
    return success_response(_cart_payload(session), message="Cart cleared.")
