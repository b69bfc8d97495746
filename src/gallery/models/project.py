from datetime import datetime
from typing import Final

from src.gallery.models.base import StoredModel

# Records written before generations were tracked belong to the third cohort
DEFAULT_GENERATION: Final[int] = 3


class Project(StoredModel):
    """A registered hackathon entry as shown in the public gallery.

    `likes` mirrors len(liked_by) and `comment_count` / `latest_version` are
    denormalized caches; all three can drift and are repaired by
    ReconciliationService.
    """

    title: str
    description: str = ""
    team: str = ""
    members: list[str] = []
    url: str = ""
    image_url: str | None = None
    tags: list[str] = []
    likes: int = 0
    liked_by: list[str] = []
    comment_count: int = 0
    latest_version: str | None = None
    generation: int = DEFAULT_GENERATION
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_liked_by(self, session_id: str) -> bool:
        return session_id in self.liked_by
