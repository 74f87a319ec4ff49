from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple
from decimal import Decimal
import logging

from storefront.models.product import Product
from storefront.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)

LineKey = Tuple[str, str, str]


@dataclass
class CartItem:
    """Represents a line in a shopping cart"""
    product: Optional[Product]
    quantity: int
    size: str = ""
    color: str = ""

    @property
    def key(self) -> LineKey:
        product_id = self.product.id if self.product else ""
        return (product_id, self.size, self.color)

    @property
    def is_priced(self) -> bool:
        """Whether the line can contribute to the subtotal"""
        return self.product is not None and self.product.has_valid_price

    @property
    def line_total(self) -> Decimal:
        """Price x quantity, zero for malformed lines"""
        if not self.is_priced:
            return Decimal("0")
        return self.product.price * self.quantity

    def matches(self, product_id: str, size: str, color: str) -> bool:
        return self.key == (str(product_id), size or "", color or "")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        product_data = data.get("product")
        product = Product.from_dict(product_data) if isinstance(product_data, dict) else None
        quantity = data.get("quantity")
        return cls(
            product=product,
            quantity=quantity if ValidationUtils.validate_quantity(quantity) else 1,
            size=str(data.get("size") or ""),
            color=str(data.get("color") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "product": self.product.to_dict() if self.product else None,
            "quantity": self.quantity,
            "size": self.size,
            "color": self.color,
            "line_total": str(self.line_total),
        }


@dataclass
class Cart:
    """
    Shopping cart aggregate

    Lines are unique on (product id, size, color). Mutators return True when
    the cart changed and False for rejected or no-op calls.
    """
    items: List[CartItem] = field(default_factory=list)

    def get_item(self, product_id: str, size: str = "", color: str = "") -> Optional[CartItem]:
        """Find cart line by product and variant attributes"""
        return next((item for item in self.items if item.matches(product_id, size, color)), None)

    def add_item(self, product: Product, quantity: int, size: str = "", color: str = "") -> bool:
        """Add a line, or increase the quantity of the matching line"""
        if not ValidationUtils.validate_quantity(quantity):
            return False

        existing = self.get_item(product.id, size, color)
        if existing:
            existing.quantity += quantity
        else:
            self.items.append(CartItem(product=product, quantity=quantity, size=size or "", color=color or ""))
        return True

    def update_quantity(self, product_id: str, size: str, color: str, new_quantity: int) -> bool:
        """Set a line's quantity; use remove_item for zero or negative"""
        if not ValidationUtils.validate_quantity(new_quantity):
            return False

        existing = self.get_item(product_id, size, color)
        if not existing:
            return False
        existing.quantity = new_quantity
        return True

    def remove_item(self, product_id: str, size: str = "", color: str = "") -> bool:
        """Remove the matching line"""
        original_length = len(self.items)
        self.items = [item for item in self.items if not item.matches(product_id, size, color)]
        return len(self.items) < original_length

    def clear(self) -> None:
        """Remove all items from cart"""
        self.items.clear()

    def subtotal(self) -> Decimal:
        """Sum of price x quantity over well-formed lines"""
        total = Decimal("0")
        for item in self.items:
            if not item.is_priced:
                logger.debug(f"Skipping unpriced cart line {item.key}")
                continue
            total += item.line_total
        return total

    def item_count(self) -> int:
        """Total quantity of all items"""
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    def snapshot(self) -> List[Dict[str, Any]]:
        """Line items in the stored layout (product, quantity, size, color)"""
        return [
            {
                "product": item.product.to_dict() if item.product else None,
                "quantity": item.quantity,
                "size": item.size,
                "color": item.color,
            }
            for item in self.items
        ]

    @classmethod
    def from_snapshot(cls, lines: List[Dict[str, Any]]) -> "Cart":
        """Rebuild a cart from stored line items, merging duplicate keys"""
        cart = cls()
        for line in lines:
            if not isinstance(line, dict):
                continue
            item = CartItem.from_dict(line)
            existing = next((i for i in cart.items if i.key == item.key), None)
            if existing:
                existing.quantity += item.quantity
            else:
                cart.items.append(item)
        return cart

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "items": [item.to_dict() for item in self.items],
            "item_count": self.item_count(),
            "subtotal": str(self.subtotal()),
            "is_empty": self.is_empty,
        }
