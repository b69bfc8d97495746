"""Redis-backed document store.

Layout (all keys prefixed with the configured namespace):
- `{ns}:doc:{path}:{id}`   JSON-encoded document
- `{ns}:idx:{path}`        sorted set of document ids scored by creation time
- `{ns}:changes:{path}`    pub/sub channel notified after every write

Single-document transforms run inside WATCH/MULTI transactions; batches run
as one MULTI pipeline. Server timestamps come from the Redis TIME command.
"""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from redis.asyncio import Redis
from redis.asyncio.client import Pipeline, PubSub
from redis.exceptions import RedisError

from src.gallery.core.exceptions import NotFoundError, StoreError
from src.gallery.core.logging import get_logger
from src.gallery.store.base import (
    CREATED_AT,
    BatchOperation,
    Document,
    DocumentStore,
    Subscription,
    apply_transforms,
    has_server_timestamp,
    sort_documents,
)

logger = get_logger(__name__)

# Seconds to block on pub/sub before re-checking whether the subscription closed
_POLL_TIMEOUT = 1.0


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Unsupported document value: {type(value).__name__}")


def _encode(data: dict[str, Any]) -> str:
    return json.dumps(data, default=_json_default, ensure_ascii=False)


def _decode(raw: str) -> dict[str, Any]:
    return json.loads(raw)  # type: ignore[no-any-return]


def _creation_score(data: dict[str, Any]) -> float | None:
    value = data.get(CREATED_AT)
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value).timestamp()
        except ValueError:
            return None
    return None


@contextmanager
def _store_errors(operation: str, path: str) -> Iterator[None]:
    """Translate Redis failures into StoreError."""
    try:
        yield
    except RedisError as e:
        logger.error("Redis store operation failed", operation=operation, path=path, error=str(e))
        raise StoreError() from e


class _RedisSubscription(Subscription):
    def __init__(
        self,
        store: "RedisDocumentStore",
        path: str,
        order_by: str,
        descending: bool,
        limit: int | None,
    ):
        self._store = store
        self.path = path
        self.order_by = order_by
        self.descending = descending
        self.limit = limit
        self._pubsub: PubSub | None = None
        self._initial_pending = True
        self._closed = False

    async def _open(self) -> PubSub:
        with _store_errors("subscribe", self.path):
            pubsub = self._store.redis.pubsub()
            await pubsub.subscribe(self._store.channel(self.path))
        self._pubsub = pubsub
        self._store._subscriptions.add(self)
        return pubsub

    async def __aenter__(self) -> "_RedisSubscription":
        if self._pubsub is None:
            await self._open()
        return self

    async def _snapshot(self) -> list[Document]:
        return await self._store.query(
            self.path, order_by=self.order_by, descending=self.descending, limit=self.limit
        )

    async def __anext__(self) -> list[Document]:
        if self._closed:
            raise StopAsyncIteration
        pubsub = self._pubsub if self._pubsub is not None else await self._open()
        if self._initial_pending:
            self._initial_pending = False
            return await self._snapshot()

        while True:
            with _store_errors("subscribe", self.path):
                message = await pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=_POLL_TIMEOUT
                )
            if self._closed:
                raise StopAsyncIteration
            if message is not None:
                break
        # Coalesce a burst of writes into one snapshot
        with _store_errors("subscribe", self.path):
            while await pubsub.get_message(ignore_subscribe_messages=True, timeout=0.0):
                pass
        return await self._snapshot()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store._subscriptions.discard(self)
        if self._pubsub is not None:
            try:
                await self._pubsub.unsubscribe()
                await self._pubsub.aclose()
            except RedisError as e:
                logger.warning("Failed to close subscription cleanly", path=self.path, error=str(e))
            self._pubsub = None


class RedisDocumentStore(DocumentStore):
    """DocumentStore on top of a redis.asyncio client (decode_responses=True)."""

    def __init__(self, redis: Redis, namespace: str = "gallery"):
        self.redis = redis
        self.namespace = namespace
        self._subscriptions: set[_RedisSubscription] = set()

    # --- key layout ---

    def doc_key(self, path: str, doc_id: str) -> str:
        return f"{self.namespace}:doc:{path}:{doc_id}"

    def index_key(self, path: str) -> str:
        return f"{self.namespace}:idx:{path}"

    def channel(self, path: str) -> str:
        return f"{self.namespace}:changes:{path}"

    async def _server_time(self) -> datetime:
        seconds, microseconds = await self.redis.time()
        return datetime.fromtimestamp(seconds + microseconds / 1_000_000, tz=UTC)

    async def _resolve_time(self, *field_maps: dict[str, Any]) -> datetime:
        if any(has_server_timestamp(fields) for fields in field_maps):
            return await self._server_time()
        return datetime.now(UTC)

    def _stage_set(
        self, pipe: Pipeline, path: str, doc_id: str, data: dict[str, Any], now: datetime
    ) -> None:
        pipe.set(self.doc_key(path, doc_id), _encode(data))
        score = _creation_score(data)
        if score is not None:
            pipe.zadd(self.index_key(path), {doc_id: score})
        else:
            pipe.zadd(self.index_key(path), {doc_id: now.timestamp()}, nx=True)

    # --- DocumentStore ---

    async def get(self, path: str, doc_id: str) -> Document | None:
        with _store_errors("get", path):
            raw = await self.redis.get(self.doc_key(path, doc_id))
        if raw is None:
            return None
        return Document(id=doc_id, data=_decode(raw))

    async def set(self, path: str, doc_id: str, data: dict[str, Any]) -> None:
        with _store_errors("set", path):
            now = await self._resolve_time(data)
            resolved = apply_transforms({}, data, now)
            pipe = self.redis.pipeline(transaction=True)
            self._stage_set(pipe, path, doc_id, resolved, now)
            pipe.publish(self.channel(path), doc_id)
            await pipe.execute()

    async def update(self, path: str, doc_id: str, fields: dict[str, Any]) -> None:
        key = self.doc_key(path, doc_id)

        async def _apply(pipe: Pipeline) -> None:
            raw = await pipe.get(key)
            if raw is None:
                raise NotFoundError()
            resolved = apply_transforms(_decode(raw), fields, now)
            pipe.multi()
            pipe.set(key, _encode(resolved))
            pipe.publish(self.channel(path), doc_id)

        with _store_errors("update", path):
            now = await self._resolve_time(fields)
            await self.redis.transaction(_apply, key)

    async def delete(self, path: str, doc_id: str) -> bool:
        with _store_errors("delete", path):
            pipe = self.redis.pipeline(transaction=True)
            pipe.delete(self.doc_key(path, doc_id))
            pipe.zrem(self.index_key(path), doc_id)
            deleted, _ = await pipe.execute()
            if deleted:
                await self.redis.publish(self.channel(path), doc_id)
        return bool(deleted)

    async def query(
        self,
        path: str,
        *,
        order_by: str = CREATED_AT,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Document]:
        if limit is not None and limit <= 0:
            return []
        indexed = order_by == CREATED_AT
        end = limit - 1 if indexed and limit is not None else -1
        with _store_errors("query", path):
            ids: list[str] = await self.redis.zrange(self.index_key(path), 0, end, desc=descending)
            if not ids:
                return []
            raws = await self.redis.mget([self.doc_key(path, doc_id) for doc_id in ids])
        docs = [
            Document(id=doc_id, data=_decode(raw))
            for doc_id, raw in zip(ids, raws, strict=True)
            if raw is not None
        ]
        if indexed:
            return docs
        docs = sort_documents(docs, order_by, descending)
        return docs[:limit] if limit is not None else docs

    async def count(self, path: str) -> int:
        with _store_errors("count", path):
            return int(await self.redis.zcard(self.index_key(path)))

    def subscribe(
        self,
        path: str,
        *,
        order_by: str = CREATED_AT,
        descending: bool = True,
        limit: int | None = None,
    ) -> Subscription:
        return _RedisSubscription(self, path, order_by, descending, limit)

    async def commit_batch(self, operations: list[BatchOperation]) -> None:
        paths = list(dict.fromkeys(op.path for op in operations))
        with _store_errors("batch", ",".join(paths)):
            now = await self._resolve_time(*(op.data or {} for op in operations))
            pipe = self.redis.pipeline(transaction=True)
            for op in operations:
                if op.kind == "set":
                    resolved = apply_transforms({}, op.data or {}, now)
                    self._stage_set(pipe, op.path, op.doc_id, resolved, now)
                else:
                    pipe.delete(self.doc_key(op.path, op.doc_id))
                    pipe.zrem(self.index_key(op.path), op.doc_id)
            for path in paths:
                pipe.publish(self.channel(path), "batch")
            await pipe.execute()

    async def close(self) -> None:
        for subscription in list(self._subscriptions):
            await subscription.close()
