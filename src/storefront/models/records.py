from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from storefront.db import Base


class CartSnapshotRecord(Base):
    """
    Serialized cart lines for one browser session.

    The payload is the JSON list of line items, rewritten in full on every
    cart mutation; the row is deleted when the cart is cleared after an
    order is placed.
    """

    __tablename__ = "cart_snapshots"

    session_key = Column(String(128), primary_key=True)
    payload = Column(Text, nullable=False, default="[]")
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<CartSnapshotRecord session_key={self.session_key}>"
