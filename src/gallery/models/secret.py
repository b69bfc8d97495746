"""Credential records kept outside the public collections."""

from typing import ClassVar

from src.gallery.models.base import StoredModel


class ProjectSecret(StoredModel):
    """Keyed by project id. Written once at registration, never updated."""

    strip_secrets: ClassVar[bool] = False

    hashed_password: str


class CommentSecret(StoredModel):
    """Keyed by comment id; `project_id` is kept for orphan cleanup."""

    strip_secrets: ClassVar[bool] = False

    hashed_password: str
    project_id: str | None = None
