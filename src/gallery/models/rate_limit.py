from src.gallery.models.base import StoredModel


class RateLimitRecord(StoredModel):
    """Keyed by session id; epoch-millisecond timestamps of recent attempts, oldest first."""

    attempts: list[int] = []
