"""Sliding-window throttle for password verification attempts."""

from collections.abc import Callable

from src.gallery.core.config import get_settings
from src.gallery.core.exceptions import MSG_TOO_MANY_ATTEMPTS, StoreError
from src.gallery.core.logging import get_logger, session_ref
from src.gallery.models.base import now_ms
from src.gallery.repositories import RateLimitRepository
from src.gallery.schemas import RateLimitDecision

logger = get_logger(__name__)

MsClock = Callable[[], int]


class RateLimiter:
    """Per-session attempt budget over a rolling window.

    The attempt log lives in the document store and is rewritten with
    last-write-wins semantics; two tabs racing on the same session can
    under-count, which is acceptable for a deterrent. Store failures fail
    open so an outage never locks legitimate users out.
    """

    def __init__(
        self,
        repo: RateLimitRepository,
        max_attempts: int | None = None,
        window_ms: int | None = None,
        clock: MsClock | None = None,
    ):
        settings = get_settings()
        self.repo = repo
        self.max_attempts = max_attempts or settings.rate_limit_max_attempts
        self.window_ms = window_ms or settings.rate_limit_window_ms
        self._clock = clock or now_ms

    def prune(self, attempts: list[int], now: int) -> list[int]:
        """Keep attempts younger than the window."""
        return [t for t in attempts if now - t < self.window_ms]

    async def check_and_record(self, session_id: str) -> RateLimitDecision:
        """Check the session's budget and, if allowed, record this attempt.

        A throttled call is not recorded, so the window drains on its own.
        """
        now = self._clock()
        try:
            recent = self.prune(await self.repo.get_attempts(session_id), now)
            if len(recent) >= self.max_attempts:
                logger.warning(
                    "Verification throttled",
                    session=session_ref(session_id),
                    attempts=len(recent),
                    window_ms=self.window_ms,
                )
                return RateLimitDecision(allowed=False, error=MSG_TOO_MANY_ATTEMPTS)
            await self.repo.save_attempts(session_id, [*recent, now])
        except StoreError as e:
            logger.warning(
                "Rate limit store unavailable, allowing attempt",
                session=session_ref(session_id),
                error=e.message,
            )
            return RateLimitDecision(allowed=True, fail_open=True)
        return RateLimitDecision(allowed=True)
