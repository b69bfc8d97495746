"""Gallery wiring: store backend, repositories, services, and app context."""

from collections.abc import Callable
from types import TracebackType

from src.gallery.context import AppContext
from src.gallery.core.config import Settings, get_settings
from src.gallery.core.link_preview import LinkPreviewClient
from src.gallery.core.logging import get_logger, setup_logging
from src.gallery.core.profanity import ProfanityFilter
from src.gallery.core.redis import close_redis, get_redis
from src.gallery.core.storage import JsonFileStorage, LocalStorage
from src.gallery.models.enums import Theme
from src.gallery.models.project import Project
from src.gallery.repositories import (
    CommentRepository,
    DeploymentLogRepository,
    ProjectRepository,
    RateLimitRepository,
    SecretRepository,
)
from src.gallery.schemas import LikeResult, MigrationReport, ReconciliationReport
from src.gallery.services import (
    CommentService,
    CredentialVerifier,
    DeploymentService,
    MigrationService,
    MutationFlow,
    ProjectService,
    RateLimiter,
    ReconciliationService,
    SecretStore,
    arrange_projects,
)
from src.gallery.store import DocumentStore, InMemoryDocumentStore, RedisDocumentStore

logger = get_logger(__name__)


class Gallery:
    """Every protocol component wired against one document store.

    Use as an async context manager, or call `close()` when done.
    """

    def __init__(
        self,
        settings: Settings,
        store: DocumentStore,
        context: AppContext,
        rate_limit_clock: Callable[[], int] | None = None,
        link_preview: LinkPreviewClient | None = None,
        owns_redis: bool = False,
    ):
        self.settings = settings
        self.store = store
        self.context = context
        self._owns_redis = owns_redis

        project_repo = ProjectRepository(store)
        comment_repo = CommentRepository(store)
        deployment_repo = DeploymentLogRepository(store)
        secret_repo = SecretRepository(store)

        self.profanity = ProfanityFilter(extra=settings.extra_profanity_words)
        self.secrets = SecretStore(secret_repo)
        self.rate_limiter = RateLimiter(
            RateLimitRepository(store),
            max_attempts=settings.rate_limit_max_attempts,
            window_ms=settings.rate_limit_window_ms,
            clock=rate_limit_clock,
        )
        self.verifier = CredentialVerifier(self.secrets, self.rate_limiter)
        self.reconciliation = ReconciliationService(
            project_repo, comment_repo, deployment_repo, secret_repo
        )
        self.projects = ProjectService(
            project_repo, self.secrets, default_generation=settings.default_generation
        )
        self.comments = CommentService(
            comment_repo, project_repo, self.secrets, self.reconciliation, self.profanity
        )
        self.deployments = DeploymentService(
            deployment_repo,
            project_repo,
            self.reconciliation,
            recompute_on_delete=settings.recompute_latest_version_on_delete,
            page_size=settings.deployment_page_size,
        )
        self.migration = MigrationService(project_repo, comment_repo, self.secrets)
        self.link_preview = link_preview or LinkPreviewClient(
            base_url=settings.link_preview_api_url,
            timeout=settings.link_preview_timeout_seconds,
        )

    def new_flow(self) -> MutationFlow:
        """Mutation flow bound to this device's session (rate limited per session)."""
        return MutationFlow(
            self.verifier,
            self.projects,
            self.comments,
            self.deployments,
            session_id=self.context.session_id,
        )

    def arrange(self, projects: list[Project]) -> list[Project]:
        """Apply the context's generation filter and sort order."""
        return arrange_projects(
            projects, self.context.sort_order, self.context.generation_filter
        )

    async def toggle_like(self, project_id: str) -> LikeResult:
        return await self.projects.toggle_like(project_id, self.context.session_id)

    async def migrate(self) -> MigrationReport:
        return await self.migration.migrate_legacy_passwords()

    async def reconcile(self) -> ReconciliationReport:
        return await self.reconciliation.run()

    async def close(self) -> None:
        await self.store.close()
        if self._owns_redis:
            await close_redis()
        logger.info("Gallery closed")

    async def __aenter__(self) -> "Gallery":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


async def open_store(settings: Settings) -> tuple[DocumentStore, bool]:
    """Store for the configured backend; returns (store, uses_shared_redis).

    A Redis backend that cannot be reached degrades to the in-memory store.
    """
    if settings.store_backend == "redis":
        redis = await get_redis(settings)
        if redis is not None:
            logger.info("Using Redis document store", namespace=settings.store_namespace)
            return RedisDocumentStore(redis, namespace=settings.store_namespace), True
        logger.warning("Redis unavailable, using in-memory document store")
    return InMemoryDocumentStore(), False


async def create_gallery(
    settings: Settings | None = None,
    *,
    store: DocumentStore | None = None,
    storage: LocalStorage | None = None,
    system_theme: Theme | None = None,
    rate_limit_clock: Callable[[], int] | None = None,
    link_preview: LinkPreviewClient | None = None,
) -> Gallery:
    """Build a Gallery.

    Args:
        settings: Defaults to get_settings().
        store: Injected document store; otherwise chosen from settings.
        storage: Device-local storage; defaults to a JSON file at local_storage_path.
        system_theme: OS theme preference, used when no theme is persisted.
        rate_limit_clock: Millisecond clock for the rate limiter (tests).
        link_preview: Injected link preview client.
    """
    settings = settings or get_settings()
    setup_logging(settings.debug)
    logger.info(f"Starting {settings.app_name}", env=settings.app_env)

    owns_redis = False
    if store is None:
        store, owns_redis = await open_store(settings)
    context = AppContext.load(
        storage or JsonFileStorage(settings.local_storage_path), system_theme=system_theme
    )
    return Gallery(
        settings,
        store,
        context,
        rate_limit_clock=rate_limit_clock,
        link_preview=link_preview,
        owns_redis=owns_redis,
    )
