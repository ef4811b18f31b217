"""
Shared fixtures.

No test talks to a real backend: local storage is in memory and the
remote store is a fake that records what it was asked to do.
"""

import asyncio
import itertools
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from lifeos.audit import AuditLogger
from lifeos.services.storage import (
    InMemoryLocalStore,
    RemoteStoreInterface,
    StorageError,
)
from lifeos.store import DataStore


NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


class FakeRemoteStore(RemoteStoreInterface):
    """In-memory remote store with switchable failures."""

    def __init__(
        self,
        user_id: Optional[str] = "user-1",
        records: Optional[dict[str, dict[str, Any]]] = None,
        fail_fetch: bool = False,
        fail_upsert: bool = False,
    ):
        self.user_id = user_id
        self.records = dict(records or {})
        self.fail_fetch = fail_fetch
        self.fail_upsert = fail_upsert
        self.upserts: list[tuple[str, dict[str, Any]]] = []

    async def current_user_id(self) -> Optional[str]:
        return self.user_id

    async def fetch_record(self, user_id: str) -> Optional[dict[str, Any]]:
        if self.fail_fetch:
            raise StorageError("remote unreachable")
        return self.records.get(user_id)

    async def upsert_record(self, user_id: str, document: dict[str, Any]) -> None:
        if self.fail_upsert:
            raise StorageError("remote rejected write")
        self.records[user_id] = document
        self.upserts.append((user_id, document))


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def id_factory():
    counter = itertools.count(100)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def local_store():
    return InMemoryLocalStore()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def make_store(local_store, audit_logger, clock, id_factory):
    """Build a DataStore over the shared fixtures; load it unless told not to."""
    def factory(remote_store=None, load=True, local=None):
        store = DataStore(
            local_store=local if local is not None else local_store,
            remote_store=remote_store,
            audit_logger=audit_logger,
            clock=clock,
            id_factory=id_factory,
        )
        if load:
            asyncio.run(store.load())
        return store
    return factory


@pytest.fixture
def store(make_store):
    return make_store()
