"""Secret store: hashed credentials kept apart from the public collections."""

from src.gallery.core.logging import get_logger
from src.gallery.models.enums import ResourceKind
from src.gallery.repositories import SecretRepository
from src.gallery.store.base import WriteBatch

logger = get_logger(__name__)

LEGACY_PASSWORD_FIELD = "password"


class SecretStore:
    """get/put/delete of hashed secrets, one namespace per ResourceKind.

    Store failures propagate as StoreError: every caller of the secret store
    fails closed.
    """

    def __init__(self, repo: SecretRepository):
        self.repo = repo

    async def get(self, kind: ResourceKind, resource_id: str) -> str | None:
        record = await self.repo.get(kind, resource_id)
        return record.hashed_password if record else None

    async def put(
        self, kind: ResourceKind, resource_id: str, hashed: str, project_id: str | None = None
    ) -> None:
        await self.repo.put(kind, resource_id, hashed, project_id=project_id)

    def stage_put(
        self,
        batch: WriteBatch,
        kind: ResourceKind,
        resource_id: str,
        hashed: str,
        project_id: str | None = None,
    ) -> None:
        """Add a secret write to an atomic batch alongside its public record."""
        self.repo.stage_put(batch, kind, resource_id, hashed, project_id=project_id)

    async def delete(self, kind: ResourceKind, resource_id: str) -> bool:
        """Remove a secret; deleting an absent secret is a no-op returning False."""
        deleted = await self.repo.delete(kind, resource_id)
        if not deleted:
            logger.debug("Secret already absent", kind=kind.label, resource_id=resource_id)
        return deleted

    async def legacy_plaintext(
        self, kind: ResourceKind, resource_id: str, parent_id: str | None = None
    ) -> str | None:
        """Plaintext password still embedded in a pre-migration public record."""
        doc = await self.repo.legacy_document(kind, resource_id, parent_id)
        if doc is None:
            return None
        value = doc.get(LEGACY_PASSWORD_FIELD)
        return value if isinstance(value, str) and value else None
