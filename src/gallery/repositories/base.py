"""Base repository with common document operations."""

from collections.abc import Callable
from typing import Any

from src.gallery.models.base import StoredModel
from src.gallery.store.base import CREATED_AT, Document, DocumentStore, Subscription


class ModelSubscription[ModelType: StoredModel]:
    """Live query that yields parsed models instead of raw documents.

    Use as an async context manager so the underlying subscription is torn
    down when the consuming view goes away.
    """

    def __init__(self, subscription: Subscription, convert: Callable[[Document], ModelType]):
        self._subscription = subscription
        self._convert = convert

    def __aiter__(self) -> "ModelSubscription[ModelType]":
        return self

    async def __anext__(self) -> list[ModelType]:
        docs = await self._subscription.__anext__()
        return [self._convert(doc) for doc in docs]

    async def close(self) -> None:
        await self._subscription.close()

    async def __aenter__(self) -> "ModelSubscription[ModelType]":
        await self._subscription.__aenter__()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


class DocumentRepository[ModelType: StoredModel]:
    """Base repository over one document collection.

    Repositories handle data access only. Nested collections (comments,
    deployments) take the parent project id and override `path`; the parent
    id is copied into `parent_field` on every parsed model.
    """

    model: type[ModelType]
    collection: str
    parent_field: str | None = None

    def __init__(self, store: DocumentStore):
        self.store = store

    def path(self, parent_id: str | None = None) -> str:
        return self.collection

    def to_model(self, doc: Document, parent_id: str | None = None) -> ModelType:
        extra: dict[str, Any] = {}
        if self.parent_field and parent_id is not None:
            extra[self.parent_field] = parent_id
        return self.model.from_document(doc, **extra)

    async def get_document(self, doc_id: str, parent_id: str | None = None) -> Document | None:
        """Raw document, secret-shaped fields included."""
        return await self.store.get(self.path(parent_id), doc_id)

    async def get_by_id(self, doc_id: str, parent_id: str | None = None) -> ModelType | None:
        doc = await self.get_document(doc_id, parent_id)
        return self.to_model(doc, parent_id) if doc is not None else None

    async def list_documents(
        self,
        parent_id: str | None = None,
        *,
        order_by: str = CREATED_AT,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[Document]:
        return await self.store.query(
            self.path(parent_id), order_by=order_by, descending=descending, limit=limit
        )

    async def list_all(
        self,
        parent_id: str | None = None,
        *,
        order_by: str = CREATED_AT,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[ModelType]:
        docs = await self.list_documents(
            parent_id, order_by=order_by, descending=descending, limit=limit
        )
        return [self.to_model(doc, parent_id) for doc in docs]

    async def count(self, parent_id: str | None = None) -> int:
        return await self.store.count(self.path(parent_id))

    async def update(
        self, doc_id: str, fields: dict[str, Any], parent_id: str | None = None
    ) -> None:
        await self.store.update(self.path(parent_id), doc_id, fields)

    async def delete(self, doc_id: str, parent_id: str | None = None) -> bool:
        return await self.store.delete(self.path(parent_id), doc_id)

    def subscribe(
        self, parent_id: str | None = None, *, limit: int | None = None
    ) -> ModelSubscription[ModelType]:
        """Newest-first live view of the collection."""
        subscription = self.store.subscribe(self.path(parent_id), limit=limit)
        return ModelSubscription(subscription, lambda doc: self.to_model(doc, parent_id))


def require_parent(parent_id: str | None) -> str:
    if not parent_id:
        raise ValueError("Parent project id required for a nested collection")
    return parent_id
