from flask import Blueprint, request

from storefront.core.config import config
from storefront.core.exceptions import ValidationError
from storefront.models.order import OrderTotal, PaymentMethod
from storefront.routes.schemas import PlaceOrderSchema
from storefront.routes.utils import (
    get_bearer_token, get_container, get_session, load_json, success_response
)
from storefront.services.order_service import OrderService
from storefront.services.pricing_service import PricingService
from storefront.schemas.common_schemas import MoneyField


checkout_bp = Blueprint("checkout", __name__)

_order_schema = PlaceOrderSchema()


def _parse_payment_method(value: str) -> PaymentMethod:
    try:
        return PaymentMethod.parse(value)
    except ValueError:
        raise ValidationError(
            f"Unsupported payment method: {value}",
            field_errors=[{"field": "payment_method", "message": "must be one of cod, online"}]
        )


def _display(total: OrderTotal) -> dict:
    currency = config.pricing.currency
    lines = {
        "subtotal": total.subtotal,
        "membership_discount": total.membership_discount,
        "coupon_discount": total.coupon_discount,
        "shipping_fee": total.shipping_fee,
        "cod_surcharge": total.cod_surcharge,
        "grand_total": total.grand_total,
    }
    return {name: MoneyField(amount=amount, currency=currency).to_dict() for name, amount in lines.items()}


@checkout_bp.route("/summary", methods=["GET"])
def get_summary():
    """
    Price breakdown for the current cart.

    Query params:
      payment_method  cod | online (default: online)
    """
    payment_method = _parse_payment_method(request.args.get("payment_method", "online"))
    session = get_session()

    total = session.quote(get_container().get(PricingService), payment_method)
    return success_response({
        "payment_method": payment_method.value,
        "currency": config.pricing.currency,
        "total": total.to_dict(),
        "display": _display(total),
        "coupon": session.coupons.to_dict(),
    })


@checkout_bp.route("/orders", methods=["POST"])
def place_order():
    """
    Place an order for the current cart.

    Body: { "shipping_address": str | object, "payment_method": "cod" | "online",
            "payment_reference": str (required for online) }
    """
    data = load_json(_order_schema)
    session = get_session()

    result = get_container().get(OrderService).place_order(
        session,
        data["shipping_address"],
        _parse_payment_method(data["payment_method"]),
        payment_reference=data["payment_reference"],
        token=get_bearer_token(),
    )
    return success_response(result, message="Order placed successfully.", status=201)
