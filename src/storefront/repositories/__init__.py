from .base import BaseRepository
from .cart_repository import CartSnapshotRepository

__all__ = ["BaseRepository", "CartSnapshotRepository"]
