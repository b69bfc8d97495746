from datetime import datetime

from src.gallery.models.base import StoredModel


class DeploymentLog(StoredModel):
    """A versioned release note posted by a team, gated by the project password."""

    project_id: str
    version: str
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
