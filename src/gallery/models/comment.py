from datetime import datetime

from src.gallery.models.base import StoredModel


class Comment(StoredModel):
    project_id: str
    author: str
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def edited(self) -> bool:
        return self.updated_at is not None
