"""Repository for the public projects collection."""

from typing import Any

from src.gallery.models.project import Project
from src.gallery.repositories.base import DocumentRepository
from src.gallery.store.base import (
    CREATED_AT,
    PROJECTS,
    SERVER_TIMESTAMP,
    UPDATED_AT,
    ArrayRemove,
    ArrayUnion,
    Increment,
    WriteBatch,
)


class ProjectRepository(DocumentRepository[Project]):
    model = Project
    collection = PROJECTS

    def stage_create(self, batch: WriteBatch, project_id: str, fields: dict[str, Any]) -> None:
        """Add a new project to `batch` with zeroed counters and a server creation time."""
        batch.set(
            self.collection,
            project_id,
            {
                **fields,
                "likes": 0,
                "liked_by": [],
                "comment_count": 0,
                "latest_version": None,
                CREATED_AT: SERVER_TIMESTAMP,
            },
        )

    async def update_fields(self, project_id: str, fields: dict[str, Any]) -> None:
        """Overwrite public fields and stamp the update time."""
        await self.update(project_id, {**fields, UPDATED_AT: SERVER_TIMESTAMP})

    async def increment_comment_count(self, project_id: str, amount: int) -> None:
        await self.update(project_id, {"comment_count": Increment(amount)})

    async def set_comment_count(self, project_id: str, count: int) -> None:
        await self.update(project_id, {"comment_count": count})

    async def set_latest_version(self, project_id: str, version: str | None) -> None:
        await self.update(project_id, {"latest_version": version})

    async def write_likes(self, project_id: str, likes: int, liked_by: list[str]) -> None:
        await self.update(project_id, {"likes": likes, "liked_by": liked_by})

    async def apply_like(self, project_id: str, likes: int, session_id: str, liked: bool) -> None:
        """Write the new like count and flip the session's membership in liked_by."""
        membership = ArrayUnion(session_id) if liked else ArrayRemove(session_id)
        await self.update(project_id, {"likes": likes, "liked_by": membership})
