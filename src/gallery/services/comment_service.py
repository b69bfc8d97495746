"""Comment posting, owner edits and deletes, and the live comment feed."""

from typing import Any

from src.gallery.core.exceptions import MSG_PROFANITY, NotFoundError, ValidationError
from src.gallery.core.logging import get_logger
from src.gallery.core.profanity import ProfanityFilter
from src.gallery.core.security import hash_secret
from src.gallery.models.comment import Comment
from src.gallery.models.enums import RepairKind, ResourceKind
from src.gallery.repositories import CommentRepository, ModelSubscription, ProjectRepository
from src.gallery.schemas import CommentCreate, CommentUpdate, parse_input
from src.gallery.services.reconciliation_service import PendingRepair, ReconciliationService
from src.gallery.services.secret_store import SecretStore

logger = get_logger(__name__)


class CommentService:
    """Comments carry their own password, independent of the project's.

    The comment document is authoritative; the parent's comment_count and
    the secret cleanup on delete are advisory writes.
    """

    def __init__(
        self,
        comments: CommentRepository,
        projects: ProjectRepository,
        secrets: SecretStore,
        reconciliation: ReconciliationService,
        profanity: ProfanityFilter,
    ):
        self.comments = comments
        self.projects = projects
        self.secrets = secrets
        self.reconciliation = reconciliation
        self.profanity = profanity

    def ensure_clean(self, content: str) -> None:
        """Raise ValidationError if content contains a blocked word."""
        if self.profanity.contains_profanity(content):
            raise ValidationError(MSG_PROFANITY)

    async def add(self, project_id: str, payload: CommentCreate | dict[str, Any]) -> Comment:
        """Post a comment: secret first, then the public record, then the count."""
        data = parse_input(CommentCreate, payload)
        self.ensure_clean(data.content)

        comment_id = self.comments.store.new_id()
        await self.secrets.put(
            ResourceKind.COMMENT, comment_id, hash_secret(data.password), project_id=project_id
        )
        await self.comments.create(project_id, data.author, data.content, comment_id)
        await self.reconciliation.advisory(
            PendingRepair(RepairKind.COMMENT_COUNT, project_id),
            self.projects.increment_comment_count(project_id, 1),
        )

        logger.info("Comment added", project_id=project_id, comment_id=comment_id)
        return await self.require(project_id, comment_id)

    async def require(self, project_id: str, comment_id: str) -> Comment:
        comment = await self.comments.get_by_id(comment_id, project_id)
        if comment is None:
            raise NotFoundError()
        return comment

    async def edit(
        self, project_id: str, comment_id: str, payload: CommentUpdate | dict[str, Any]
    ) -> Comment:
        data = parse_input(CommentUpdate, payload)
        self.ensure_clean(data.content)
        await self.comments.update_content(project_id, comment_id, data.content)
        logger.info("Comment edited", project_id=project_id, comment_id=comment_id)
        return await self.require(project_id, comment_id)

    async def delete(self, project_id: str, comment_id: str) -> None:
        """Remove the comment, then best-effort its secret and the count decrement.

        The count has no floor; drift below the true value is repaired by
        reconciliation.
        """
        if not await self.comments.delete(comment_id, project_id):
            raise NotFoundError()
        await self.reconciliation.advisory(
            PendingRepair(RepairKind.COMMENT_SECRET, project_id, comment_id),
            self.secrets.delete(ResourceKind.COMMENT, comment_id),
        )
        await self.reconciliation.advisory(
            PendingRepair(RepairKind.COMMENT_COUNT, project_id),
            self.projects.increment_comment_count(project_id, -1),
        )
        logger.info("Comment deleted", project_id=project_id, comment_id=comment_id)

    async def list_comments(self, project_id: str) -> list[Comment]:
        return await self.comments.list_all(project_id)

    def subscribe(self, project_id: str) -> ModelSubscription[Comment]:
        return self.comments.subscribe(project_id)
