"""Document store interface consumed by the gallery protocol.

The protocol never talks to a concrete backend directly. Services receive a
DocumentStore and use only these primitives: point reads and writes,
single-document atomic transforms, atomic multi-document batches, ordered
queries, counts, and live subscriptions.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final, Literal
from uuid import uuid4

# Collection paths
PROJECTS: Final[str] = "projects"
PROJECT_SECRETS: Final[str] = "project_secrets"
COMMENT_SECRETS: Final[str] = "comment_secrets"
RATE_LIMITS: Final[str] = "rate_limits"

CREATED_AT: Final[str] = "created_at"
UPDATED_AT: Final[str] = "updated_at"


def comments_path(project_id: str) -> str:
    return f"{PROJECTS}/{project_id}/comments"


def deployments_path(project_id: str) -> str:
    return f"{PROJECTS}/{project_id}/deployments"


class _Sentinel:
    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


SERVER_TIMESTAMP: Final = _Sentinel("SERVER_TIMESTAMP")
DELETE_FIELD: Final = _Sentinel("DELETE_FIELD")


class Increment:
    """Atomically add `amount` to a numeric field (missing counts as 0)."""

    __slots__ = ("amount",)

    def __init__(self, amount: int = 1):
        self.amount = amount

    def __repr__(self) -> str:
        return f"Increment({self.amount})"


class ArrayUnion:
    """Atomically append values not already present in an array field."""

    __slots__ = ("values",)

    def __init__(self, *values: Any):
        self.values = values

    def __repr__(self) -> str:
        return f"ArrayUnion{self.values!r}"


class ArrayRemove:
    """Atomically remove every occurrence of the values from an array field."""

    __slots__ = ("values",)

    def __init__(self, *values: Any):
        self.values = values

    def __repr__(self) -> str:
        return f"ArrayRemove{self.values!r}"


def has_server_timestamp(fields: dict[str, Any]) -> bool:
    return any(value is SERVER_TIMESTAMP for value in fields.values())


def apply_transforms(
    current: dict[str, Any], fields: dict[str, Any], now: datetime
) -> dict[str, Any]:
    """Return `current` with `fields` merged in, resolving transform markers."""
    result = copy.deepcopy(current)
    for key, value in fields.items():
        if value is DELETE_FIELD:
            result.pop(key, None)
        elif value is SERVER_TIMESTAMP:
            result[key] = now
        elif isinstance(value, Increment):
            result[key] = (result.get(key) or 0) + value.amount
        elif isinstance(value, ArrayUnion):
            existing = list(result.get(key) or [])
            existing.extend(v for v in value.values if v not in existing)
            result[key] = existing
        elif isinstance(value, ArrayRemove):
            result[key] = [v for v in (result.get(key) or []) if v not in value.values]
        else:
            result[key] = copy.deepcopy(value)
    return result


@dataclass
class Document:
    """A stored document: store-assigned id plus its field map."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


def sort_documents(
    docs: list[Document],
    order_by: str,
    descending: bool,
    tiebreak: Callable[[Document], Any] | None = None,
) -> list[Document]:
    """Order documents by a field; documents missing the field sort as oldest."""

    def key(doc: Document) -> tuple[Any, ...]:
        value = doc.data.get(order_by)
        present = value is not None
        return (present, value if present else 0, tiebreak(doc) if tiebreak else 0)

    return sorted(docs, key=key, reverse=descending)


@dataclass(frozen=True)
class BatchOperation:
    kind: Literal["set", "delete"]
    path: str
    doc_id: str
    data: dict[str, Any] | None = None


class WriteBatch:
    """Collects set/delete operations and commits them atomically."""

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._operations: list[BatchOperation] = []

    def set(self, path: str, doc_id: str, data: dict[str, Any]) -> "WriteBatch":
        self._operations.append(BatchOperation("set", path, doc_id, data))
        return self

    def delete(self, path: str, doc_id: str) -> "WriteBatch":
        self._operations.append(BatchOperation("delete", path, doc_id))
        return self

    @property
    def operations(self) -> list[BatchOperation]:
        return list(self._operations)

    async def commit(self) -> None:
        if self._operations:
            await self._store.commit_batch(self.operations)
        self._operations.clear()


class Subscription(ABC):
    """Live, ordered view of one collection.

    Iterating yields the full current result set on open and again after
    every change. Use as an async context manager so teardown is deterministic:

        async with store.subscribe(PROJECTS) as snapshots:
            async for docs in snapshots:
                ...
    """

    def __aiter__(self) -> "Subscription":
        return self

    @abstractmethod
    async def __anext__(self) -> list[Document]: ...

    @abstractmethod
    async def close(self) -> None: ...

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class DocumentStore(ABC):
    """Injected store client used by every repository.

    Backend failures surface as StoreError; updating a missing document
    raises NotFoundError.
    """

    def new_id(self) -> str:
        """Generate a store-style document id (20 url-safe characters)."""
        return uuid4().hex[:20]

    @abstractmethod
    async def get(self, path: str, doc_id: str) -> Document | None: ...

    @abstractmethod
    async def set(self, path: str, doc_id: str, data: dict[str, Any]) -> None:
        """Create or overwrite a document."""

    @abstractmethod
    async def update(self, path: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into an existing document, resolving transforms atomically."""

    @abstractmethod
    async def delete(self, path: str, doc_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""

    @abstractmethod
    async def query(
        self,
        path: str,
        *,
        order_by: str = CREATED_AT,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Document]: ...

    @abstractmethod
    async def count(self, path: str) -> int: ...

    @abstractmethod
    def subscribe(
        self,
        path: str,
        *,
        order_by: str = CREATED_AT,
        descending: bool = True,
        limit: int | None = None,
    ) -> Subscription: ...

    @abstractmethod
    async def commit_batch(self, operations: list[BatchOperation]) -> None: ...

    async def create(self, path: str, data: dict[str, Any], doc_id: str | None = None) -> str:
        """Add a document stamped with a server-assigned creation time."""
        doc_id = doc_id or self.new_id()
        await self.set(path, doc_id, {**data, CREATED_AT: SERVER_TIMESTAMP})
        return doc_id

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    async def close(self) -> None:
        """Release backend resources and end open subscriptions."""
