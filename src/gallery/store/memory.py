"""In-memory document store.

Single-process stand-in for the realtime document service, used by tests and
local runs. Every operation completes without yielding to the event loop
between its read and its write, so single-document transforms and batches are
atomic under asyncio.
"""

import asyncio
import copy
import itertools
from collections import defaultdict
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from src.gallery.core.exceptions import NotFoundError
from src.gallery.core.logging import get_logger
from src.gallery.store.base import (
    CREATED_AT,
    BatchOperation,
    Document,
    DocumentStore,
    Subscription,
    apply_transforms,
    sort_documents,
)

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _system_clock() -> datetime:
    return datetime.now(UTC)


class _MemorySubscription(Subscription):
    def __init__(
        self,
        store: "InMemoryDocumentStore",
        path: str,
        order_by: str,
        descending: bool,
        limit: int | None,
    ):
        self.path = path
        self.order_by = order_by
        self.descending = descending
        self.limit = limit
        self._store = store
        self._queue: asyncio.Queue[list[Document] | None] = asyncio.Queue()
        self._closed = False
        store._register(self)

    def push(self, snapshot: list[Document]) -> None:
        if not self._closed:
            self._queue.put_nowait(snapshot)

    async def __anext__(self) -> list[Document]:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        snapshot = await self._queue.get()
        if snapshot is None:
            raise StopAsyncIteration
        return snapshot

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store._unregister(self)
        # Drop undelivered snapshots; the end marker wakes a pending reader
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed DocumentStore with push-style subscriptions.

    Server timestamps come from `clock` and are forced to strictly increase,
    matching a store that assigns ascending creation times on write.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or _system_clock
        self._collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self._sequence: dict[tuple[str, str], int] = {}
        self._counter = itertools.count()
        self._last_timestamp: datetime | None = None
        self._subscriptions: dict[str, set[_MemorySubscription]] = defaultdict(set)

    # --- internals ---

    def _server_time(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _write(self, path: str, doc_id: str, data: dict[str, Any]) -> None:
        if (path, doc_id) not in self._sequence:
            self._sequence[(path, doc_id)] = next(self._counter)
        self._collections[path][doc_id] = data

    def _remove(self, path: str, doc_id: str) -> bool:
        collection = self._collections.get(path)
        existed = collection is not None and collection.pop(doc_id, None) is not None
        self._sequence.pop((path, doc_id), None)
        return existed

    def _ordered(
        self, path: str, order_by: str, descending: bool, limit: int | None
    ) -> list[Document]:
        docs = [
            Document(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._collections.get(path, {}).items()
        ]
        docs = sort_documents(
            docs,
            order_by,
            descending,
            tiebreak=lambda d: self._sequence.get((path, d.id), 0),
        )
        return docs[:limit] if limit is not None else docs

    def _register(self, subscription: _MemorySubscription) -> None:
        self._subscriptions[subscription.path].add(subscription)
        subscription.push(
            self._ordered(
                subscription.path,
                subscription.order_by,
                subscription.descending,
                subscription.limit,
            )
        )

    def _unregister(self, subscription: _MemorySubscription) -> None:
        subscriptions = self._subscriptions.get(subscription.path)
        if subscriptions is not None:
            subscriptions.discard(subscription)
            if not subscriptions:
                del self._subscriptions[subscription.path]

    def _notify(self, *paths: str) -> None:
        for path in dict.fromkeys(paths):
            for subscription in list(self._subscriptions.get(path, ())):
                subscription.push(
                    self._ordered(
                        path, subscription.order_by, subscription.descending, subscription.limit
                    )
                )

    # --- DocumentStore ---

    async def get(self, path: str, doc_id: str) -> Document | None:
        data = self._collections.get(path, {}).get(doc_id)
        if data is None:
            return None
        return Document(id=doc_id, data=copy.deepcopy(data))

    async def set(self, path: str, doc_id: str, data: dict[str, Any]) -> None:
        self._write(path, doc_id, apply_transforms({}, data, self._server_time()))
        self._notify(path)

    async def update(self, path: str, doc_id: str, fields: dict[str, Any]) -> None:
        current = self._collections.get(path, {}).get(doc_id)
        if current is None:
            raise NotFoundError()
        self._write(path, doc_id, apply_transforms(current, fields, self._server_time()))
        self._notify(path)

    async def delete(self, path: str, doc_id: str) -> bool:
        existed = self._remove(path, doc_id)
        if existed:
            self._notify(path)
        return existed

    async def query(
        self,
        path: str,
        *,
        order_by: str = CREATED_AT,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Document]:
        return self._ordered(path, order_by, descending, limit)

    async def count(self, path: str) -> int:
        return len(self._collections.get(path, {}))

    def subscribe(
        self,
        path: str,
        *,
        order_by: str = CREATED_AT,
        descending: bool = True,
        limit: int | None = None,
    ) -> Subscription:
        return _MemorySubscription(self, path, order_by, descending, limit)

    async def commit_batch(self, operations: list[BatchOperation]) -> None:
        now = self._server_time()
        for op in operations:
            if op.kind == "set":
                self._write(op.path, op.doc_id, apply_transforms({}, op.data or {}, now))
            else:
                self._remove(op.path, op.doc_id)
        self._notify(*(op.path for op in operations))

    async def close(self) -> None:
        for subscriptions in list(self._subscriptions.values()):
            for subscription in list(subscriptions):
                await subscription.close()
        logger.debug("In-memory store closed")

