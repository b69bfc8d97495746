"""Repository for a project's deployment log subcollection."""

from typing import Any

from src.gallery.models.deployment import DeploymentLog
from src.gallery.repositories.base import DocumentRepository, require_parent
from src.gallery.store.base import SERVER_TIMESTAMP, UPDATED_AT, deployments_path


class DeploymentLogRepository(DocumentRepository[DeploymentLog]):
    model = DeploymentLog
    parent_field = "project_id"

    def path(self, parent_id: str | None = None) -> str:
        return deployments_path(require_parent(parent_id))

    async def create(self, project_id: str, version: str, content: str) -> str:
        return await self.store.create(
            self.path(project_id), {"version": version, "content": content}
        )

    async def update_fields(self, project_id: str, log_id: str, fields: dict[str, Any]) -> None:
        await self.update(log_id, {**fields, UPDATED_AT: SERVER_TIMESTAMP}, parent_id=project_id)

    async def newest(self, project_id: str) -> DeploymentLog | None:
        """Most recently created log, by server creation time."""
        logs = await self.list_all(project_id, limit=1)
        return logs[0] if logs else None
