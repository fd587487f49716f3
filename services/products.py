from __future__ import annotations

import logging
from typing import Dict, List, Optional

from core.logs import ensure_logger
from core.settings import PRODUCTS_LOG_PATH
from datetime_utils import to_rfc3339_utc
from models.product import Product
from services.product_store import RemoteStoreError, SupabaseProductStore
from services.retry_queue import RetryQueue


def _ensure_logger() -> logging.Logger:
    return ensure_logger("coalition.products", PRODUCTS_LOG_PATH)


class ProductService:
    """Admin-side product writes with a durable fallback for failed requests."""

    def __init__(
        self,
        remote: SupabaseProductStore,
        queue: RetryQueue,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.remote = remote
        self.queue = queue
        self.logger = logger or _ensure_logger()

    # ------------------------------------------------------------------
    # Writes
    async def add(self, product: Product) -> bool:
        try:
            await self.remote.insert(product.to_db_row())
        except RemoteStoreError as exc:
            return self._defer("add", product, exc)
        return self._confirmed("add", product)

    async def update(self, product: Product) -> bool:
        try:
            await self.remote.update(product.id, product.to_db_row())
        except RemoteStoreError as exc:
            return self._defer("update", product, exc)
        return self._confirmed("update", product)

    async def delete(self, product: Product) -> bool:
        try:
            await self.remote.delete(product.id)
        except RemoteStoreError as exc:
            return self._defer("delete", product, exc)
        return self._confirmed("delete", product)

    # ------------------------------------------------------------------
    # Reads
    async def list_products(self) -> List[Product]:
        try:
            rows = await self.remote.list()
        except RemoteStoreError as exc:
            self.logger.error("Product list failed: %s", exc)
            return []
        products: List[Product] = []
        for row in rows:
            try:
                products.append(Product.from_db_row(row))
            except (KeyError, TypeError, ValueError) as exc:
                self.logger.warning("Skipping malformed product row: %s", exc)
        return products

    def status(self) -> Dict:
        return {
            "configured": self.remote.is_configured,
            "queueSize": self.queue.pending_count(),
            "pending": [
                {
                    "id": write.id,
                    "operation": write.operation,
                    "name": write.payload.name,
                    "attempts": write.attempts,
                    "lastAttempt": to_rfc3339_utc(write.last_attempt_at),
                }
                for write in self.queue.pending_writes()
            ],
        }

    # ------------------------------------------------------------------
    def _defer(self, operation: str, product: Product, exc: Exception) -> bool:
        self.logger.warning("Product %s failed for %s, queued for retry: %s", operation, product.id, exc)
        self.queue.enqueue(operation, product)
        return False

    def _confirmed(self, operation: str, product: Product) -> bool:
        # A direct write supersedes whatever was waiting for this product.
        self.queue.remove(product.id)
        self.logger.info("Product %s succeeded for %s", operation, product.id)
        return True


__all__ = ["ProductService"]
