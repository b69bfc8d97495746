"""Repository for per-session verification attempt logs."""

from src.gallery.models.rate_limit import RateLimitRecord
from src.gallery.repositories.base import DocumentRepository
from src.gallery.store.base import RATE_LIMITS


class RateLimitRepository(DocumentRepository[RateLimitRecord]):
    model = RateLimitRecord
    collection = RATE_LIMITS

    async def get_attempts(self, session_id: str) -> list[int]:
        record = await self.get_by_id(session_id)
        return list(record.attempts) if record else []

    async def save_attempts(self, session_id: str, attempts: list[int]) -> None:
        await self.store.set(self.collection, session_id, {"attempts": attempts})
