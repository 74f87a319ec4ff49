from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from decimal import Decimal

from storefront.utils.validators import ValidationUtils


@dataclass
class Product:
    """Catalog product as held by a cart line (weak reference to the catalog)"""
    id: str
    name: str
    price: Optional[Decimal]  # None when the catalog sent a non-numeric price
    image: Optional[str] = None
    category: Optional[str] = None
    sizes: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)

    @property
    def has_valid_price(self) -> bool:
        return self.price is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """Build from the backend's product document (`_id` or `id`)"""
        product_id = data.get("_id", data.get("id"))
        return cls(
            id=str(product_id) if product_id is not None else "",
            name=str(data.get("name") or ""),
            price=ValidationUtils.to_price(data.get("price")),
            image=data.get("image"),
            category=data.get("category"),
            sizes=list(data.get("sizes") or []),
            colors=list(data.get("colors") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "_id": self.id,
            "name": self.name,
            "price": float(self.price) if self.price is not None else None,
            "image": self.image,
            "category": self.category,
            "sizes": list(self.sizes),
            "colors": list(self.colors),
        }
