"""One-time move of legacy plaintext passwords into the secret store."""

from typing import Any

from src.gallery.core.logging import get_logger
from src.gallery.core.security import hash_secret
from src.gallery.models.base import SECRET_FIELDS
from src.gallery.models.enums import ResourceKind
from src.gallery.repositories import CommentRepository, ProjectRepository
from src.gallery.schemas import MigrationReport
from src.gallery.services.secret_store import LEGACY_PASSWORD_FIELD, SecretStore
from src.gallery.store.base import DELETE_FIELD, Document

logger = get_logger(__name__)


def legacy_digest(data: dict[str, Any]) -> str | None:
    """Digest to store for a legacy record.

    A plaintext `password` is hashed; a digest already embedded under
    `hashed_password` / `password_hash` is moved as-is, never re-hashed.
    """
    plaintext = data.get(LEGACY_PASSWORD_FIELD)
    if isinstance(plaintext, str) and plaintext:
        return hash_secret(plaintext)
    for field_name in ("hashed_password", "password_hash"):
        value = data.get(field_name)
        if isinstance(value, str) and value:
            return value
    return None


class MigrationService:
    """Scan public projects and comments and strip embedded credentials.

    Safe to run repeatedly: a record without credential fields is skipped,
    and an existing secret is never overwritten.
    """

    def __init__(
        self,
        projects: ProjectRepository,
        comments: CommentRepository,
        secrets: SecretStore,
    ):
        self.projects = projects
        self.comments = comments
        self.secrets = secrets

    async def migrate_legacy_passwords(self) -> MigrationReport:
        report = MigrationReport()
        for project_doc in await self.projects.list_documents():
            report.projects_scanned += 1
            await self._migrate(ResourceKind.PROJECT, project_doc, None, report)
            for comment_doc in await self.comments.list_documents(project_doc.id):
                report.comments_scanned += 1
                await self._migrate(ResourceKind.COMMENT, comment_doc, project_doc.id, report)

        logger.info("Legacy password migration finished", **report.model_dump())
        return report

    async def _migrate(
        self,
        kind: ResourceKind,
        doc: Document,
        project_id: str | None,
        report: MigrationReport,
    ) -> None:
        legacy_fields = sorted(
            field_name for field_name in SECRET_FIELDS if field_name in doc.data
        )
        if not legacy_fields:
            report.already_migrated += 1
            return

        if await self.secrets.get(kind, doc.id) is None:
            digest = legacy_digest(doc.data)
            if digest is not None:
                await self.secrets.put(kind, doc.id, digest, project_id=project_id)
                report.secrets_written += 1

        strip = {field_name: DELETE_FIELD for field_name in legacy_fields}
        if kind is ResourceKind.PROJECT:
            await self.projects.update(doc.id, strip)
        else:
            await self.comments.update(doc.id, strip, parent_id=project_id)
        report.fields_stripped += len(legacy_fields)
        logger.debug("Legacy credential migrated", kind=kind.label, resource_id=doc.id)
