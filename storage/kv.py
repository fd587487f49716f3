"""Durable key-value store shared by features that persist small blobs."""
from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session

from datetime_utils import utc_now
from models.kv_entry import KVEntry
from storage.db import get_session


class KeyValueStore:
    """``getItem``/``setItem`` style storage on top of the ``kv_entries`` table."""

    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self._session_factory = session_factory

    def get_item(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            row = session.get(KVEntry, key)
            return row.value if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            row = session.get(KVEntry, key)
            if row is None:
                row = KVEntry(key=key, value=value)
            else:
                row.value = value
                row.updated_at = utc_now()
            session.add(row)
            session.commit()

    def remove_item(self, key: str) -> None:
        with self._session_factory() as session:
            row = session.get(KVEntry, key)
            if row is not None:
                session.delete(row)
                session.commit()


__all__ = ["KeyValueStore"]
