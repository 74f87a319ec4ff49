from datetime import datetime
from typing import Any, Dict, Optional, Union
import logging

from storefront.clients.backend_client import BackendClient
from storefront.core.exceptions import ValidationError
from storefront.models.order import OrderTotal, PaymentMethod, PaymentStatus
from storefront.services.pricing_service import PricingService
from storefront.services.session import StorefrontSession
from storefront.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)


class OrderService:
    """
    Order placement

    Business Rules:
    - The cart must hold at least one priced line, and no unpriced ones
    - A shipping address (saved address id or full address) is required
    - Online payments carry the gateway's payment reference and are recorded
      as Paid; COD orders are Pending and include the COD surcharge
    - On success the cart is cleared and the coupon released
    """

    def __init__(self, backend_client: BackendClient, pricing_service: PricingService):
        self.backend = backend_client
        self.pricing = pricing_service

    def place_order(
        self,
        session: StorefrontSession,
        shipping_address: Union[str, Dict[str, Any], None],
        payment_method: Union[PaymentMethod, str],
        payment_reference: Optional[str] = None,
        token: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        if isinstance(payment_method, str):
            payment_method = PaymentMethod.parse(payment_method)

        logger.info(f"Placing {payment_method.value} order for session {session.session_key}")

        cart = session.cart.cart
        if cart.is_empty or cart.subtotal() <= 0:
            raise ValidationError("Your cart is empty")

        unpriced = [item for item in cart.items if not item.is_priced]
        if unpriced:
            raise ValidationError(
                "Some items in your cart are unavailable. Remove them to place the order",
                field_errors=[
                    {"field": item.product.id if item.product else "", "message": "missing price"}
                    for item in unpriced
                ]
            )

        self._validate_address(shipping_address)

        if payment_method == PaymentMethod.ONLINE and not payment_reference:
            raise ValidationError("Payment reference is required for online payments")

        total = session.quote(self.pricing, payment_method, now)
        payload = self._build_payload(session, shipping_address, payment_method, payment_reference, total)

        order = self.backend.create_order(payload, token=token)
        logger.info(f"Order placed for session {session.session_key}: total {total.grand_total}")

        session.reset()
        return {"order": order, "total": total.to_dict()}

    @staticmethod
    def _validate_address(shipping_address: Union[str, Dict[str, Any], None]) -> None:
        if not shipping_address:
            raise ValidationError("Please select a shipping address")

        if isinstance(shipping_address, dict):
            required = ("name", "address", "city", "state", "postalCode", "phone")
            missing = [name for name in required if not str(shipping_address.get(name) or "").strip()]
            if missing:
                raise ValidationError(
                    "Please fill all address fields",
                    field_errors=[{"field": name, "message": "required"} for name in missing]
                )
            if not ValidationUtils.validate_pincode(str(shipping_address["postalCode"])):
                raise ValidationError(
                    "Please enter a valid 6-digit pincode",
                    field_errors=[{"field": "postalCode", "message": "invalid"}]
                )

    @staticmethod
    def _build_payload(
        session: StorefrontSession,
        shipping_address: Union[str, Dict[str, Any]],
        payment_method: PaymentMethod,
        payment_reference: Optional[str],
        total: OrderTotal,
    ) -> Dict[str, Any]:
        order_items = [
            {
                "product": item.product.id,
                "name": item.product.name,
                "quantity": item.quantity,
                "size": item.size,
                "color": item.color,
                "price": float(item.product.price),
                "image": item.product.image,
            }
            for item in session.cart.cart.items
        ]

        payment_info = {
            "method": payment_method.value,
            "status": (PaymentStatus.PENDING if payment_method == PaymentMethod.COD else PaymentStatus.PAID).value,
        }
        if payment_reference:
            payment_info["reference"] = payment_reference

        applied = session.coupons.applied
        return {
            "orderItems": order_items,
            "shippingAddress": shipping_address,
            "paymentInfo": payment_info,
            "subtotal": float(total.subtotal),
            "membershipDiscount": float(total.membership_discount),
            "couponDiscount": float(total.coupon_discount),
            "couponCode": applied.code if applied else None,
            "shippingFee": float(total.shipping_fee),
            "codCharge": float(total.cod_surcharge),
            "totalPrice": float(total.grand_total),
        }
