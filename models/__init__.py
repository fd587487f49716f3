"""Domain models exposed by the Coalition sync service."""
from .kv_entry import KVEntry
from .pending_write import PendingWrite
from .product import Product

__all__ = ["KVEntry", "PendingWrite", "Product"]
