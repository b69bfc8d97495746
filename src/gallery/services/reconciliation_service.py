"""Repair of denormalized caches and advisory secondary writes.

Primary writes (the comment, the deployment log, the public edit) are
authoritative. Secondary writes that only keep caches or secret cleanup in
step run through `advisory()`: a failure is logged, recorded here, and never
fails or undoes the primary write. `run()` replays what was recorded and
recomputes every cache from the records themselves.
"""

from collections.abc import Awaitable
from dataclasses import dataclass

from src.gallery.core.exceptions import GalleryError
from src.gallery.core.logging import get_logger
from src.gallery.models.enums import RepairKind, ResourceKind
from src.gallery.models.secret import CommentSecret
from src.gallery.repositories import (
    CommentRepository,
    DeploymentLogRepository,
    ProjectRepository,
    SecretRepository,
)
from src.gallery.schemas import ReconciliationReport

logger = get_logger(__name__)


@dataclass(frozen=True)
class PendingRepair:
    """A secondary write that failed and still needs to be applied."""

    kind: RepairKind
    project_id: str
    resource_id: str | None = None


class ReconciliationService:
    def __init__(
        self,
        projects: ProjectRepository,
        comments: CommentRepository,
        deployments: DeploymentLogRepository,
        secrets: SecretRepository,
    ):
        self.projects = projects
        self.comments = comments
        self.deployments = deployments
        self.secrets = secrets
        self.pending: list[PendingRepair] = []

    def record(self, repair: PendingRepair) -> None:
        if repair not in self.pending:
            self.pending.append(repair)

    async def advisory(self, repair: PendingRepair, operation: Awaitable[object]) -> bool:
        """Await a secondary write; on failure record `repair` instead of raising."""
        try:
            await operation
        except GalleryError as e:
            logger.warning(
                "Advisory write failed, queued for repair",
                repair=repair.kind.value,
                project_id=repair.project_id,
                resource_id=repair.resource_id,
                error=e.message,
            )
            self.record(repair)
            return False
        return True

    # --- single-project repairs ---

    async def sync_comment_count(self, project_id: str) -> bool:
        """Set comment_count to the number of live comments. Returns True if it changed."""
        project = await self.projects.get_by_id(project_id)
        if project is None:
            return False
        actual = await self.comments.count(project_id)
        if project.comment_count == actual:
            return False
        await self.projects.set_comment_count(project_id, actual)
        logger.info(
            "Comment count repaired",
            project_id=project_id,
            cached=project.comment_count,
            actual=actual,
        )
        return True

    async def sync_latest_version(self, project_id: str) -> bool:
        """Set latest_version to the newest log's version. Returns True if it changed."""
        project = await self.projects.get_by_id(project_id)
        if project is None:
            return False
        newest = await self.deployments.newest(project_id)
        version = newest.version if newest else None
        if project.latest_version == version:
            return False
        await self.projects.set_latest_version(project_id, version)
        logger.info(
            "Latest version repaired",
            project_id=project_id,
            cached=project.latest_version,
            actual=version,
        )
        return True

    # --- collection-wide passes ---

    async def reconcile_comment_counts(self) -> int:
        fixed = 0
        for project in await self.projects.list_all():
            if await self.sync_comment_count(project.id):
                fixed += 1
        return fixed

    async def reconcile_like_counts(self) -> int:
        """Make likes equal the size of the (deduplicated) liked_by set."""
        fixed = 0
        for project in await self.projects.list_all():
            liked_by = list(dict.fromkeys(project.liked_by))
            if project.likes == len(liked_by) and liked_by == project.liked_by:
                continue
            await self.projects.write_likes(project.id, len(liked_by), liked_by)
            logger.info(
                "Like count repaired",
                project_id=project.id,
                cached=project.likes,
                actual=len(liked_by),
            )
            fixed += 1
        return fixed

    async def reconcile_latest_versions(self) -> int:
        fixed = 0
        for project in await self.projects.list_all():
            if await self.sync_latest_version(project.id):
                fixed += 1
        return fixed

    async def collect_orphan_comment_secrets(self) -> int:
        """Delete comment secrets whose comment no longer exists.

        Secrets without a recorded project id cannot be located and are kept.
        """
        removed = 0
        for secret in await self.secrets.list_all(ResourceKind.COMMENT):
            if not isinstance(secret, CommentSecret) or not secret.project_id:
                continue
            if await self.comments.get_document(secret.id, secret.project_id) is not None:
                continue
            if await self.secrets.delete(ResourceKind.COMMENT, secret.id):
                removed += 1
        if removed:
            logger.info("Orphan comment secrets removed", count=removed)
        return removed

    async def _apply(self, repair: PendingRepair) -> None:
        match repair.kind:
            case RepairKind.COMMENT_COUNT:
                await self.sync_comment_count(repair.project_id)
            case RepairKind.LATEST_VERSION:
                await self.sync_latest_version(repair.project_id)
            case RepairKind.COMMENT_SECRET:
                if repair.resource_id:
                    await self.secrets.delete(ResourceKind.COMMENT, repair.resource_id)

    async def repair_pending(self) -> tuple[int, int]:
        """Replay recorded repairs. Returns (repaired, still_failing)."""
        repaired = 0
        remaining: list[PendingRepair] = []
        for repair in self.pending:
            try:
                await self._apply(repair)
            except GalleryError as e:
                logger.warning(
                    "Repair failed, keeping it queued",
                    repair=repair.kind.value,
                    project_id=repair.project_id,
                    error=e.message,
                )
                remaining.append(repair)
            else:
                repaired += 1
        self.pending = remaining
        return repaired, len(remaining)

    async def run(self) -> ReconciliationReport:
        """Replay pending repairs, then recompute every cache from source records."""
        repaired, failed = await self.repair_pending()
        report = ReconciliationReport(
            pending_repaired=repaired,
            pending_failed=failed,
            comment_counts_fixed=await self.reconcile_comment_counts(),
            like_counts_fixed=await self.reconcile_like_counts(),
            latest_versions_fixed=await self.reconcile_latest_versions(),
            orphan_secrets_removed=await self.collect_orphan_comment_secrets(),
        )
        logger.info("Reconciliation finished", **report.model_dump())
        return report
