"""Durable retry queue for product writes that failed against the remote store.

Entries are keyed by product id, so a product has at most one pending write.
The queue is mirrored into the key-value store after every mutation and
reloaded on construction, which lets writes from a previous run resume.

A timer task fires every ``tick_interval_sec`` and spawns a processing pass.
Each pass walks the entries in insertion order and replays those whose
backoff window (``2 ** (attempts - 1) * base_interval_sec``) has elapsed.
Only one pass runs at a time; a pass started while another is awaiting the
remote store returns immediately.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Protocol, Set

from core.logs import ensure_logger
from core.settings import RETRY, RETRY_LOG_PATH, RetrySettings
from datetime_utils import utc_now
from models.pending_write import VALID_OPS, PendingWrite
from models.product import Product


class DurableStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...


class RemoteProducts(Protocol):
    async def insert(self, row: dict) -> None: ...

    async def update(self, product_id: str, row: dict) -> None: ...

    async def delete(self, product_id: str) -> None: ...


def _ensure_logger() -> logging.Logger:
    return ensure_logger("coalition.retry", RETRY_LOG_PATH)


def _label(write: PendingWrite) -> str:
    return write.payload.name or write.id


class RetryQueue:
    def __init__(
        self,
        storage: DurableStorage,
        remote: RemoteProducts,
        *,
        settings: RetrySettings = RETRY,
        clock: Callable[[], datetime] = utc_now,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.storage = storage
        self.remote = remote
        self.settings = settings
        self.logger = logger or _ensure_logger()
        self._clock = clock
        self._queue: Dict[str, PendingWrite] = {}
        self._processing = False
        self._timer: Optional[asyncio.Task] = None
        self._ticks: Set[asyncio.Task] = set()
        self._load()

    # ------------------------------------------------------------------
    # Public API
    def enqueue(self, operation: str, product: Product) -> None:
        if operation not in VALID_OPS:
            raise ValueError(f"Unsupported op: {operation}")
        snapshot = copy.deepcopy(product)
        now = self._clock()
        existing = self._queue.get(snapshot.id)
        if existing:
            existing.operation = operation
            existing.payload = snapshot
            existing.attempts += 1
            existing.last_attempt_at = now
        else:
            self._queue[snapshot.id] = PendingWrite(
                id=snapshot.id,
                operation=operation,
                payload=snapshot,
                attempts=1,
                last_attempt_at=now,
            )
        self._save()
        self.logger.info(
            "Queued %s for %s (%s pending)",
            operation,
            snapshot.name or snapshot.id,
            len(self._queue),
        )

    def remove(self, product_id: str) -> None:
        if self._queue.pop(product_id, None) is None:
            return
        self._save()
        self.logger.info("Removed %s from retry queue (%s remaining)", product_id, len(self._queue))

    def pending_count(self) -> int:
        return len(self._queue)

    def pending_writes(self) -> List[PendingWrite]:
        return [copy.deepcopy(write) for write in self._queue.values()]

    def clear(self) -> None:
        self._queue.clear()
        self._save()
        self.logger.info("Retry queue cleared")

    @property
    def running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self) -> None:
        """Start the periodic processor. Must be called from a running event loop."""

        if self.running:
            return
        self._timer = asyncio.create_task(self._run_timer())

    def stop(self) -> None:
        """Stop scheduling passes; a pass already awaiting the remote store completes."""

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait_for_ticks(self) -> None:
        if self._ticks:
            await asyncio.gather(*list(self._ticks), return_exceptions=True)

    async def process_once(self) -> int:
        """Run one processing pass and return how many writes reached the remote store."""

        if self._processing or not self._queue:
            return 0
        self._processing = True
        try:
            return await self._process()
        finally:
            self._processing = False

    # ------------------------------------------------------------------
    # Processing
    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.settings.tick_interval_sec)
            tick = asyncio.create_task(self._tick())
            self._ticks.add(tick)
            tick.add_done_callback(self._ticks.discard)

    async def _tick(self) -> None:
        try:
            await self.process_once()
        except Exception as exc:  # pragma: no cover
            self.logger.error("Retry queue pass crashed: %s", exc)

    async def _process(self) -> int:
        self.logger.info("Processing retry queue (%s items)", len(self._queue))
        succeeded = 0
        for write in list(self._queue.values()):
            if self._queue.get(write.id) is not write:
                continue

            if write.attempts >= self.settings.max_attempts:
                self.logger.error(
                    "Max retries exceeded for %s, dropping %s after %s attempts",
                    _label(write),
                    write.operation,
                    write.attempts,
                )
                del self._queue[write.id]
                self._save()
                continue

            delay = self.settings.backoff_seconds(write.attempts)
            elapsed = (self._clock() - write.last_attempt_at).total_seconds()
            if elapsed < delay:
                self.logger.debug("Waiting %ss before retry for %s", round(delay - elapsed), _label(write))
                continue

            operation, payload = write.operation, write.payload
            try:
                await self._retry_write(write.id, operation, payload)
            except Exception as exc:
                write.attempts += 1
                write.last_attempt_at = self._clock()
                self.logger.warning(
                    "Retry failed for %s (attempt %s/%s): %s",
                    _label(write),
                    write.attempts,
                    self.settings.max_attempts,
                    exc,
                )
                if self._queue.get(write.id) is write:
                    self._save()
                continue

            succeeded += 1
            self.logger.info("Retry successful for %s", _label(write))
            # Re-enqueued while the request was in flight: keep the newer write.
            if (
                self._queue.get(write.id) is write
                and write.operation == operation
                and write.payload is payload
            ):
                del self._queue[write.id]
                self._save()
        return succeeded

    async def _retry_write(self, product_id: str, operation: str, product: Product) -> None:
        row = product.to_db_row()
        if operation == "add":
            await self.remote.insert(row)
        elif operation == "update":
            await self.remote.update(product_id, row)
        elif operation == "delete":
            await self.remote.delete(product_id)
        else:  # pragma: no cover - rejected by enqueue/_load
            raise ValueError(f"Unsupported op: {operation}")

    # ------------------------------------------------------------------
    # Persistence
    def _save(self) -> None:
        data = [write.to_dict() for write in self._queue.values()]
        try:
            self.storage.set_item(self.settings.storage_key, json.dumps(data, ensure_ascii=False))
        except Exception as exc:
            self.logger.error("Failed to save retry queue: %s", exc)

    def _load(self) -> None:
        try:
            raw = self.storage.get_item(self.settings.storage_key)
        except Exception as exc:
            self.logger.error("Failed to load retry queue: %s", exc)
            return
        if not raw:
            return
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as exc:
            self.logger.error("Failed to load retry queue: %s", exc)
            return
        if not isinstance(entries, list):
            self.logger.warning("Ignoring retry queue blob of type %s", type(entries).__name__)
            return

        for entry in entries:
            try:
                write = PendingWrite.from_dict(entry)
            except (TypeError, ValueError) as exc:
                self.logger.warning("Skipping unreadable pending write: %s", exc)
                continue
            self._queue[write.id] = write
        self.logger.info("Loaded %s pending writes from storage", len(self._queue))


__all__ = ["DurableStorage", "RemoteProducts", "RetryQueue"]
