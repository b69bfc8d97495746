"""Repository for a project's comments subcollection."""

from src.gallery.models.comment import Comment
from src.gallery.repositories.base import DocumentRepository, require_parent
from src.gallery.store.base import SERVER_TIMESTAMP, UPDATED_AT, comments_path


class CommentRepository(DocumentRepository[Comment]):
    model = Comment
    parent_field = "project_id"

    def path(self, parent_id: str | None = None) -> str:
        return comments_path(require_parent(parent_id))

    async def create(self, project_id: str, author: str, content: str, comment_id: str) -> str:
        return await self.store.create(
            self.path(project_id), {"author": author, "content": content}, doc_id=comment_id
        )

    async def update_content(self, project_id: str, comment_id: str, content: str) -> None:
        await self.update(
            comment_id, {"content": content, UPDATED_AT: SERVER_TIMESTAMP}, parent_id=project_id
        )
