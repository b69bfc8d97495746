"""Project registration, owner edits, likes, and the live gallery feed."""

from typing import Any

from src.gallery.core.config import get_settings
from src.gallery.core.exceptions import NotFoundError
from src.gallery.core.logging import get_logger, session_ref
from src.gallery.core.security import hash_secret
from src.gallery.models.enums import ResourceKind
from src.gallery.models.project import Project
from src.gallery.repositories import ModelSubscription, ProjectRepository
from src.gallery.schemas import LikeResult, ProjectCreate, ProjectUpdate, parse_input
from src.gallery.services.secret_store import SecretStore

logger = get_logger(__name__)


class ProjectService:
    """Service for project operations.

    Edits here assume the caller already verified the project password
    (see MutationFlow); this layer only applies writes.
    """

    def __init__(
        self,
        projects: ProjectRepository,
        secrets: SecretStore,
        default_generation: int | None = None,
    ):
        self.projects = projects
        self.secrets = secrets
        self.default_generation = default_generation or get_settings().default_generation

    async def register(self, payload: ProjectCreate | dict[str, Any]) -> Project:
        """Create a project and its secret in one atomic batch.

        The plaintext password is hashed into the project secret namespace
        and never written to the public record.
        """
        data = parse_input(ProjectCreate, payload)
        generation = data.generation or self.default_generation
        store = self.projects.store
        project_id = store.new_id()

        batch = store.batch()
        self.projects.stage_create(
            batch, project_id, {**data.public_fields(), "generation": generation}
        )
        self.secrets.stage_put(batch, ResourceKind.PROJECT, project_id, hash_secret(data.password))
        await batch.commit()

        logger.info("Project registered", project_id=project_id, generation=generation)
        return await self.require(project_id)

    async def get(self, project_id: str) -> Project | None:
        return await self.projects.get_by_id(project_id)

    async def require(self, project_id: str) -> Project:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError()
        return project

    async def list_projects(self) -> list[Project]:
        """All projects, newest first."""
        return await self.projects.list_all()

    async def edit(self, project_id: str, payload: ProjectUpdate | dict[str, Any]) -> Project:
        """Overwrite the supplied public fields and stamp the update time."""
        data = parse_input(ProjectUpdate, payload)
        fields = data.changed_fields()
        await self.projects.update_fields(project_id, fields)
        logger.info("Project edited", project_id=project_id, fields=sorted(fields))
        return await self.require(project_id)

    async def toggle_like(self, project_id: str, session_id: str) -> LikeResult:
        """Like or unlike for this session.

        Plain read-modify-write: concurrent toggles from different sessions
        can race on the count, which reconciliation repairs.
        """
        project = await self.require(project_id)
        liked = not project.is_liked_by(session_id)
        likes = project.likes + 1 if liked else max(project.likes - 1, 0)
        await self.projects.apply_like(project_id, likes, session_id, liked)
        logger.debug(
            "Like toggled",
            project_id=project_id,
            session=session_ref(session_id),
            liked=liked,
        )
        return LikeResult(liked=liked, likes=likes)

    def subscribe(self) -> ModelSubscription[Project]:
        """Live newest-first project list; first snapshot is the full current state."""
        return self.projects.subscribe()
