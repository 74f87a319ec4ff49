from decimal import Decimal
import logging

from storefront.core.exceptions import PersistenceError
from storefront.models.cart import Cart
from storefront.models.product import Product
from storefront.repositories.cart_repository import CartSnapshotRepository

logger = logging.getLogger(__name__)


class CartService:
    """
    Shopping cart for one session

    Responsibilities:
    - Apply cart mutations through the Cart aggregate
    - Persist a snapshot after every mutation
    - Keep working in memory when storage is unavailable
    """

    def __init__(self, repository: CartSnapshotRepository, session_key: str):
        self.repository = repository
        self.session_key = session_key
        self.cart = self._load()

    def _load(self) -> Cart:
        try:
            cart = self.repository.load(self.session_key)
        except PersistenceError as e:
            logger.warning(f"Could not load cart for session {self.session_key}: {e.internal_message}")
            return Cart()

        if cart is None:
            return Cart()

        logger.info(f"Restored cart for session {self.session_key} with {cart.item_count()} items")
        return cart

    def _persist(self) -> None:
        try:
            self.repository.save(self.session_key, self.cart)
        except PersistenceError as e:
            logger.error(f"Failed to save cart for session {self.session_key}: {e.internal_message}")

    def add_item(self, product: Product, quantity: int, size: str = "", color: str = "") -> bool:
        """Add product to cart; existing (product, size, color) lines grow instead of duplicating"""
        logger.info(f"Adding to cart - session: {self.session_key}, product: {product.id}, quantity: {quantity}")

        if not self.cart.add_item(product, quantity, size, color):
            logger.info(f"Rejected add of product {product.id} with quantity {quantity}")
            return False

        self._persist()
        return True

    def update_quantity(self, product_id: str, size: str, color: str, new_quantity: int) -> bool:
        """Set a line's quantity; zero or negative is rejected, use remove_item"""
        logger.info(f"Updating cart line {product_id}/{size}/{color} to quantity {new_quantity}")

        if not self.cart.update_quantity(product_id, size, color, new_quantity):
            return False

        self._persist()
        return True

    def remove_item(self, product_id: str, size: str = "", color: str = "") -> bool:
        logger.info(f"Removing cart line {product_id}/{size}/{color}")

        if not self.cart.remove_item(product_id, size, color):
            return False

        self._persist()
        return True

    def clear(self) -> None:
        """Empty the cart and drop its stored snapshot"""
        logger.info(f"Clearing cart for session {self.session_key}")
        self.cart.clear()
        try:
            self.repository.delete(self.session_key)
        except PersistenceError as e:
            logger.error(f"Failed to delete cart snapshot for session {self.session_key}: {e.internal_message}")

    def subtotal(self) -> Decimal:
        return self.cart.subtotal()

    def item_count(self) -> int:
        return self.cart.item_count()

