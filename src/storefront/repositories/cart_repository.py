from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
import json
import logging

from storefront.repositories.base import BaseRepository
from storefront.models.cart import Cart
from storefront.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class CartSnapshotRepository(BaseRepository[Cart]):
    """Key/value store of serialized cart lines, one row per session"""

    @property
    def table_name(self) -> str:
        return "cart_snapshots"

    def get_by_id(self, session_key: str) -> Optional[Cart]:
        return self.load(session_key)

    def load(self, session_key: str) -> Optional[Cart]:
        """
        Read the stored cart for a session

        Returns None when nothing was stored. A corrupt payload is logged and
        treated as an empty cart.
        """
        row = self.execute_single_query(
            f"SELECT payload FROM {self.table_name} WHERE session_key = :session_key",
            {"session_key": session_key}
        )
        if not row:
            return None

        try:
            lines: List[Dict[str, Any]] = json.loads(row["payload"])
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cart snapshot for session {session_key}: {e}")
            return Cart()

        if not isinstance(lines, list):
            logger.warning(f"Discarding cart snapshot for session {session_key}: payload is not a list")
            return Cart()

        return Cart.from_snapshot(lines)

    def save(self, session_key: str, cart: Cart) -> None:
        """Write the full cart snapshot (upsert)"""
        try:
            payload = json.dumps(cart.snapshot())
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Cart snapshot is not serializable: {e}", "SERIALIZE")

        self.execute_command(
            f"""
            INSERT INTO {self.table_name} (session_key, payload, updated_at)
            VALUES (:session_key, :payload, :updated_at)
            ON CONFLICT (session_key)
            DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at
            """,
            {
                "session_key": session_key,
                "payload": payload,
                "updated_at": datetime.now(timezone.utc),
            }
        )

    def delete(self, session_key: str) -> bool:
        """Drop a session's snapshot"""
        affected_rows = self.execute_command(
            f"DELETE FROM {self.table_name} WHERE session_key = :session_key",
            {"session_key": session_key}
        )
        return affected_rows > 0
