"""Repository for the hashed-credential namespaces."""

from typing import Any

from src.gallery.models.enums import ResourceKind
from src.gallery.models.secret import CommentSecret, ProjectSecret
from src.gallery.store.base import Document, DocumentStore, WriteBatch

_SECRET_MODELS: dict[ResourceKind, type[ProjectSecret] | type[CommentSecret]] = {
    ResourceKind.PROJECT: ProjectSecret,
    ResourceKind.COMMENT: CommentSecret,
}


class SecretRepository:
    """Reads and writes secret records; each ResourceKind maps to its own collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    @staticmethod
    def _record(hashed: str, project_id: str | None) -> dict[str, Any]:
        record: dict[str, Any] = {"hashed_password": hashed}
        if project_id is not None:
            record["project_id"] = project_id
        return record

    async def get(
        self, kind: ResourceKind, resource_id: str
    ) -> ProjectSecret | CommentSecret | None:
        doc = await self.store.get(kind.secret_collection, resource_id)
        if doc is None:
            return None
        return _SECRET_MODELS[kind].from_document(doc)

    async def put(
        self, kind: ResourceKind, resource_id: str, hashed: str, project_id: str | None = None
    ) -> None:
        await self.store.set(kind.secret_collection, resource_id, self._record(hashed, project_id))

    def stage_put(
        self,
        batch: WriteBatch,
        kind: ResourceKind,
        resource_id: str,
        hashed: str,
        project_id: str | None = None,
    ) -> None:
        batch.set(kind.secret_collection, resource_id, self._record(hashed, project_id))

    async def delete(self, kind: ResourceKind, resource_id: str) -> bool:
        return await self.store.delete(kind.secret_collection, resource_id)

    async def list_all(self, kind: ResourceKind) -> list[ProjectSecret | CommentSecret]:
        docs = await self.store.query(kind.secret_collection)
        return [_SECRET_MODELS[kind].from_document(doc) for doc in docs]

    async def legacy_document(
        self, kind: ResourceKind, resource_id: str, parent_id: str | None = None
    ) -> Document | None:
        """Public record that may still embed a pre-migration plaintext password."""
        path = kind.legacy_path(parent_id)
        if path is None:
            return None
        return await self.store.get(path, resource_id)
