"""Deployment logs and the project's cached latest version."""

from typing import Any

from src.gallery.core.config import get_settings
from src.gallery.core.exceptions import NotFoundError
from src.gallery.core.logging import get_logger
from src.gallery.models.deployment import DeploymentLog
from src.gallery.models.enums import RepairKind
from src.gallery.repositories import (
    DeploymentLogRepository,
    ModelSubscription,
    ProjectRepository,
)
from src.gallery.schemas import (
    DeploymentLogCreate,
    DeploymentLogUpdate,
    DeploymentPage,
    parse_input,
)
from src.gallery.services.reconciliation_service import PendingRepair, ReconciliationService

logger = get_logger(__name__)


class DeploymentService:
    """Service for deployment logs, gated by the project's password.

    `latest_version` on the project is a cache of the newest log's version:
    set directly on add, re-queried after an edit, and left as-is on delete
    unless `recompute_on_delete` is enabled.
    """

    def __init__(
        self,
        deployments: DeploymentLogRepository,
        projects: ProjectRepository,
        reconciliation: ReconciliationService,
        recompute_on_delete: bool | None = None,
        page_size: int | None = None,
    ):
        settings = get_settings()
        self.deployments = deployments
        self.projects = projects
        self.reconciliation = reconciliation
        self.recompute_on_delete = (
            settings.recompute_latest_version_on_delete
            if recompute_on_delete is None
            else recompute_on_delete
        )
        self.page_size = page_size or settings.deployment_page_size

    async def add(
        self, project_id: str, payload: DeploymentLogCreate | dict[str, Any]
    ) -> DeploymentLog:
        """Append a log and set it as the latest version.

        New logs get a later server timestamp than every existing log, so the
        new one is the newest by construction.
        """
        data = parse_input(DeploymentLogCreate, payload)
        log_id = await self.deployments.create(project_id, data.version, data.content)
        await self.reconciliation.advisory(
            PendingRepair(RepairKind.LATEST_VERSION, project_id),
            self.projects.set_latest_version(project_id, data.version),
        )
        logger.info(
            "Deployment log added", project_id=project_id, log_id=log_id, version=data.version
        )
        return await self.require(project_id, log_id)

    async def edit(
        self, project_id: str, log_id: str, payload: DeploymentLogUpdate | dict[str, Any]
    ) -> DeploymentLog:
        """Update a log, then recompute latest_version from the newest log.

        The edited log is not necessarily the newest one.
        """
        data = parse_input(DeploymentLogUpdate, payload)
        await self.deployments.update_fields(project_id, log_id, data.changed_fields())
        await self.reconciliation.advisory(
            PendingRepair(RepairKind.LATEST_VERSION, project_id),
            self.refresh_latest_version(project_id),
        )
        logger.info("Deployment log edited", project_id=project_id, log_id=log_id)
        return await self.require(project_id, log_id)

    async def delete(self, project_id: str, log_id: str) -> None:
        if not await self.deployments.delete(log_id, project_id):
            raise NotFoundError()
        if self.recompute_on_delete:
            await self.reconciliation.advisory(
                PendingRepair(RepairKind.LATEST_VERSION, project_id),
                self.refresh_latest_version(project_id),
            )
        logger.info(
            "Deployment log deleted",
            project_id=project_id,
            log_id=log_id,
            latest_version_recomputed=self.recompute_on_delete,
        )

    async def get(self, project_id: str, log_id: str) -> DeploymentLog | None:
        return await self.deployments.get_by_id(log_id, project_id)

    async def require(self, project_id: str, log_id: str) -> DeploymentLog:
        log = await self.get(project_id, log_id)
        if log is None:
            raise NotFoundError()
        return log

    async def list_recent(self, project_id: str, limit: int | None = None) -> DeploymentPage:
        """Newest `limit` logs plus the true total, for "load more" paging."""
        items = await self.deployments.list_all(project_id, limit=limit or self.page_size)
        total = await self.deployments.count(project_id)
        return DeploymentPage(items=items, total=total)

    def subscribe(
        self, project_id: str, limit: int | None = None
    ) -> ModelSubscription[DeploymentLog]:
        return self.deployments.subscribe(project_id, limit=limit or self.page_size)

    async def refresh_latest_version(self, project_id: str) -> str | None:
        """Set latest_version from the newest log and return it."""
        newest = await self.deployments.newest(project_id)
        version = newest.version if newest else None
        await self.projects.set_latest_version(project_id, version)
        return version
