"""Explicit wiring of storage, remote client and retry queue."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from core.settings import RETRY, SUPABASE, RetrySettings, SupabaseSettings
from services.product_store import SupabaseProductStore
from services.products import ProductService
from services.retry_queue import RetryQueue
from storage.db import get_session, init_db
from storage.kv import KeyValueStore


@dataclass
class AppContext:
    storage: KeyValueStore
    remote: SupabaseProductStore
    queue: RetryQueue
    products: ProductService

    async def aclose(self) -> None:
        self.queue.stop()
        await self.queue.wait_for_ticks()
        await self.remote.aclose()


def build_context(
    session_factory: Optional[Callable[[], Session]] = None,
    remote: Optional[SupabaseProductStore] = None,
    *,
    retry: RetrySettings = RETRY,
    supabase: SupabaseSettings = SUPABASE,
) -> AppContext:
    if session_factory is None:
        init_db()
        session_factory = get_session
    storage = KeyValueStore(session_factory)
    remote = remote or SupabaseProductStore(supabase)
    queue = RetryQueue(storage, remote, settings=retry)
    return AppContext(
        storage=storage,
        remote=remote,
        queue=queue,
        products=ProductService(remote, queue),
    )


__all__ = ["AppContext", "build_context"]
