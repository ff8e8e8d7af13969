"""Shared fixtures for the atoms service tests.

The SQLAlchemy remote store runs against an in-memory SQLite database.
``FlakyRemoteStore`` wraps it and raises ``RemoteError`` for chosen
(collection, operation) pairs.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from domain.errors import RemoteError
from domain.repositories.remote_store import OrderBy, RemoteStoreInterface, Row
from domain.services.collection_store import CollectionStore
from infrastructure.repositories.sqlalchemy_remote_store import (
    SqlAlchemyRemoteStore,
    create_tables,
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def at(minutes: int) -> datetime:
    """Timestamp ``minutes`` after a fixed base time."""
    return BASE_TIME + timedelta(minutes=minutes)


class FlakyRemoteStore(RemoteStoreInterface):
    """Remote store double that fails selected calls.

    ``fail(collection, operation, after=n)`` lets ``n`` matching calls
    through and fails every later one until ``heal`` is called.
    """

    def __init__(self, inner: RemoteStoreInterface) -> None:
        self.inner = inner
        self.calls: List[Tuple[str, str]] = []
        self._failures: Dict[Tuple[str, str], int] = {}

    def fail(self, collection: str, operation: str, after: int = 0) -> None:
        self._failures[(collection, operation)] = after

    def heal(self) -> None:
        self._failures.clear()

    def _check(self, collection: str, operation: str) -> None:
        self.calls.append((collection, operation))
        key = (collection, operation)
        if key not in self._failures:
            return
        if self._failures[key] > 0:
            self._failures[key] -= 1
            return
        raise RemoteError(f"injected {operation} failure", collection, operation)

    async def select(
        self,
        collection: str,
        columns: Sequence[str] = ("*",),
        filters: Optional[Mapping[str, Any]] = None,
        contains: Optional[Mapping[str, Sequence[Any]]] = None,
        order: Optional[OrderBy] = None,
    ) -> List[Row]:
        self._check(collection, "select")
        return await self.inner.select(collection, columns, filters, contains, order)

    async def insert(self, collection: str, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        self._check(collection, "insert")
        return await self.inner.insert(collection, rows)

    async def update(
        self, collection: str, patch: Mapping[str, Any], filters: Mapping[str, Any]
    ) -> None:
        self._check(collection, "update")
        await self.inner.update(collection, patch, filters)

    async def delete(self, collection: str, filters: Mapping[str, Any]) -> None:
        self._check(collection, "delete")
        await self.inner.delete(collection, filters)

    async def upsert(
        self, collection: str, row: Mapping[str, Any], conflict_key: str
    ) -> None:
        self._check(collection, "upsert")
        await self.inner.upsert(collection, row, conflict_key)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def remote_store(engine) -> SqlAlchemyRemoteStore:
    return SqlAlchemyRemoteStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def flaky(remote_store) -> FlakyRemoteStore:
    return FlakyRemoteStore(remote_store)


@pytest.fixture
def store(flaky) -> CollectionStore:
    return CollectionStore(flaky, connection_retries=2, retry_base_delay=0)


@pytest_asyncio.fixture
async def seeded_store(remote_store, store) -> CollectionStore:
    """Store loaded from a small catalog.

    Atoms (newest first): 3 "Forest walk", 2 "Secret garden", 1 "Sunset".
    Category 1 "Nature" holds tags "sky" and "forest"; category 2
    "Private" (private) holds "secret".
    """
    await remote_store.insert(
        "categories",
        [
            {"name": "Nature", "is_private": False},
            {"name": "Private", "is_private": True},
        ],
    )
    await remote_store.insert(
        "tags",
        [
            {"name": "sky", "count": 5},
            {"name": "forest", "count": 3},
            {"name": "secret", "count": 1},
        ],
    )
    await remote_store.insert(
        "category_tags",
        [
            {"category_id": 1, "tag_id": 1},
            {"category_id": 1, "tag_id": 2},
            {"category_id": 2, "tag_id": 3},
        ],
    )
    await remote_store.insert(
        "creators", [{"name": "Ann Lee", "count": 2}, {"name": "Bo Chen", "count": 1}]
    )
    await remote_store.insert(
        "atoms",
        [
            {
                "title": "Sunset",
                "content_type": "image",
                "tags": ["Sky "],
                "creator_name": "Ann Lee",
                "created_at": at(1),
            },
            {
                "title": "Secret garden",
                "content_type": "image",
                "tags": ["secret", "forest"],
                "creator_name": "Bo Chen",
                "created_at": at(2),
            },
            {
                "title": "Forest walk",
                "content_type": "video",
                "tags": ["forest"],
                "creator_name": "Ann Lee, Bo Chen",
                "created_at": at(3),
            },
        ],
    )
    await store.initialize()
    return store


@pytest.fixture
def mock_client_factory():
    """Build an httpx.AsyncClient whose requests go to ``handler``."""

    def factory(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url="https://db.example.com/rest/v1",
        )

    return factory
