"""Result objects returned by the protocol components."""

from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field

from src.gallery.core.exceptions import (
    MSG_TOO_MANY_ATTEMPTS,
    MSG_WRONG_PASSWORD,
    CredentialError,
    RateLimitError,
)
from src.gallery.models.deployment import DeploymentLog
from src.gallery.models.enums import FlowStatus, VerificationFailure


class RateLimitDecision(BaseModel):
    """Answer of RateLimiter.check_and_record.

    `fail_open` marks an allowed decision taken because the attempt log
    could not be read or written.
    """

    model_config = ConfigDict(frozen=True)

    allowed: bool
    error: str | None = None
    fail_open: bool = False


class VerificationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    error: str | None = None
    failure: VerificationFailure | None = None
    legacy: bool = False

    @classmethod
    def ok(cls, *, legacy: bool = False) -> "VerificationResult":
        return cls(success=True, legacy=legacy)

    @classmethod
    def rate_limited(cls, message: str | None = None) -> "VerificationResult":
        return cls(
            success=False,
            error=message or MSG_TOO_MANY_ATTEMPTS,
            failure=VerificationFailure.RATE_LIMITED,
        )

    @classmethod
    def wrong_password(cls) -> "VerificationResult":
        return cls(
            success=False,
            error=MSG_WRONG_PASSWORD,
            failure=VerificationFailure.WRONG_PASSWORD,
        )

    def raise_for_failure(self) -> None:
        """Raise RateLimitError or CredentialError if verification failed."""
        if self.success:
            return
        if self.failure is VerificationFailure.RATE_LIMITED:
            raise RateLimitError(self.error)
        raise CredentialError(self.error)


class LikeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    liked: bool
    likes: int


class DeploymentPage(BaseModel):
    """Newest-first slice of a project's deployment logs plus the true total."""

    items: list[DeploymentLog]
    total: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_more(self) -> bool:
        return self.total > len(self.items)


class MigrationReport(BaseModel):
    projects_scanned: int = 0
    comments_scanned: int = 0
    secrets_written: int = 0
    fields_stripped: int = 0
    already_migrated: int = 0


class ReconciliationReport(BaseModel):
    comment_counts_fixed: int = 0
    like_counts_fixed: int = 0
    latest_versions_fixed: int = 0
    orphan_secrets_removed: int = 0
    pending_repaired: int = 0
    pending_failed: int = 0

    @property
    def total_fixed(self) -> int:
        return (
            self.comment_counts_fixed
            + self.like_counts_fixed
            + self.latest_versions_fixed
            + self.orphan_secrets_removed
            + self.pending_repaired
        )


class FlowOutcome(BaseModel):
    """What one MutationFlow step produced.

    `message` is user-facing text for inline prompts and toasts; `result`
    carries whatever the applied write returned.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: FlowStatus
    message: str | None = None
    result: Any = None

    @property
    def applied(self) -> bool:
        return self.status is FlowStatus.APPLIED
