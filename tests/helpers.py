"""Test helpers: controllable clock, failing store, and data builders."""

from datetime import UTC, datetime, timedelta
from typing import Any

from src.gallery.core.exceptions import StoreError
from src.gallery.main import Gallery
from src.gallery.models import Comment, DeploymentLog, Project
from src.gallery.store import Document, InMemoryDocumentStore

DEFAULT_PASSWORD = "1234"


class FakeClock:
    """Callable datetime clock with a millisecond view for the rate limiter."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 3, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def ms(self) -> int:
        return int(self.now.timestamp() * 1000)

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FailingStore(InMemoryDocumentStore):
    """In-memory store whose writes to chosen collections raise StoreError.

    `fail_paths` matches a collection path exactly or by suffix, so
    "comments" matches every project's comment collection.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()

    @staticmethod
    def _matches(path: str, patterns: set[str]) -> bool:
        return any(path == p or path.endswith("/" + p) for p in patterns)

    def _check(self, path: str, patterns: set[str]) -> None:
        if self._matches(path, patterns):
            raise StoreError()

    async def get(self, path: str, doc_id: str) -> Document | None:
        self._check(path, self.fail_reads)
        return await super().get(path, doc_id)

    async def set(self, path: str, doc_id: str, data: dict[str, Any]) -> None:
        self._check(path, self.fail_writes)
        await super().set(path, doc_id, data)

    async def update(self, path: str, doc_id: str, fields: dict[str, Any]) -> None:
        self._check(path, self.fail_writes)
        await super().update(path, doc_id, fields)

    async def delete(self, path: str, doc_id: str) -> bool:
        self._check(path, self.fail_writes)
        return await super().delete(path, doc_id)


async def create_project(gallery: Gallery, **overrides: Any) -> Project:
    """Register a project with sensible defaults (password "1234")."""
    payload: dict[str, Any] = {
        "title": "카카오 밥친구",
        "description": "점심 메뉴를 같이 고르는 서비스",
        "team": "밥팀",
        "members": "지민, 서준",
        "url": "https://example.com/bab",
        "tags": ["AI", "Web"],
        "password": DEFAULT_PASSWORD,
    }
    payload.update(overrides)
    return await gallery.projects.register(payload)


async def create_comment(
    gallery: Gallery, project_id: str, password: str = DEFAULT_PASSWORD, **overrides: Any
) -> Comment:
    payload: dict[str, Any] = {"author": "지민", "password": password, "content": "화이팅!"}
    payload.update(overrides)
    return await gallery.comments.add(project_id, payload)


async def create_deployment(
    gallery: Gallery, project_id: str, version: str, content: str = "릴리스 노트"
) -> DeploymentLog:
    return await gallery.deployments.add(project_id, {"version": version, "content": content})
