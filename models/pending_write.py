"""A product write waiting to be replayed against the remote store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from datetime_utils import ensure_utc, from_epoch_ms, parse_rfc3339, to_rfc3339_utc
from models.product import Product


VALID_OPS = ("add", "update", "delete")


@dataclass
class PendingWrite:
    id: str
    operation: str
    payload: Product
    attempts: int
    last_attempt_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "operation": self.operation,
            "product": self.payload.to_dict(),
            "attempts": self.attempts,
            "lastAttempt": to_rfc3339_utc(self.last_attempt_at, millis=True),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PendingWrite":
        if not isinstance(data, dict):
            raise ValueError("pending write must be an object")
        operation = data.get("operation")
        if operation not in VALID_OPS:
            raise ValueError(f"Unsupported op: {operation}")
        product = Product.from_dict(data.get("product") or data.get("payload") or {})
        raw_last = data.get("lastAttempt")
        if isinstance(raw_last, bool) or not isinstance(raw_last, (int, float, str)):
            raise ValueError(f"unreadable lastAttempt: {raw_last!r}")
        if isinstance(raw_last, str):
            last_attempt = parse_rfc3339(raw_last)
        else:
            try:
                last_attempt = from_epoch_ms(raw_last)
            except (OverflowError, OSError) as exc:
                raise ValueError(f"lastAttempt out of range: {raw_last!r}") from exc
        if last_attempt is None:
            raise ValueError("pending write has no lastAttempt")
        attempts = int(data.get("attempts") or 1)
        return cls(
            id=str(data.get("id") or product.id),
            operation=operation,
            payload=product,
            attempts=max(attempts, 1),
            last_attempt_at=ensure_utc(last_attempt),
        )


__all__ = ["PendingWrite", "VALID_OPS"]
