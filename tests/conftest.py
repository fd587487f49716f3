import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytest
from sqlmodel import Session, SQLModel, create_engine

import models  # noqa: F401  registers the kv_entries table
from models import Product
from services.product_store import RemoteStoreError


class FakeClock:
    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class MemoryStorage:
    """Dict-backed stand-in for the durable key-value store."""

    def __init__(self):
        self.items: Dict[str, str] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def get_item(self, key):
        if self.fail_reads:
            raise OSError("storage unavailable")
        return self.items.get(key)

    def set_item(self, key, value):
        if self.fail_writes:
            raise OSError("disk full")
        self.writes += 1
        self.items[key] = value


class FakeRemote:
    """In-memory ``products`` table with scriptable failures."""

    is_configured = True

    def __init__(self):
        self.rows: Dict[str, dict] = {}
        self.calls: List[Tuple[str, str]] = []
        self.failures = 0
        self.always_fail = False
        self.gate: Optional[asyncio.Event] = None
        self.started: Optional[asyncio.Event] = None

    async def _call(self, op, product_id, row=None):
        self.calls.append((op, product_id))
        if self.started is not None:
            self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.always_fail or self.failures > 0:
            if self.failures > 0:
                self.failures -= 1
            raise RemoteStoreError(f"{op} {product_id} failed", status=503)
        if op == "delete":
            self.rows.pop(product_id, None)
        else:
            self.rows[product_id] = row

    async def insert(self, row):
        await self._call("insert", row["id"], row)

    async def update(self, product_id, row):
        await self._call("update", product_id, row)

    async def delete(self, product_id):
        await self._call("delete", product_id)

    async def list(self):
        if self.always_fail:
            raise RemoteStoreError("list failed", status=503)
        return list(self.rows.values())

    async def aclose(self):
        pass


@pytest.fixture()
def session_factory():
    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    def factory():
        return Session(engine)

    return factory


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def remote():
    return FakeRemote()


@pytest.fixture()
def make_product():
    def _make(product_id="p1", name="Coalition Hoodie", price=65.0, **fields):
        return Product(id=product_id, name=name, price=price, images=["hoodie.png"], **fields)

    return _make
