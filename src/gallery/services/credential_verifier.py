"""Password verification shared by every owner-restricted action."""

from src.gallery.core.logging import get_logger, session_ref
from src.gallery.core.security import verify_legacy_plaintext, verify_secret
from src.gallery.models.enums import ResourceKind
from src.gallery.schemas import VerificationResult
from src.gallery.services.rate_limiter import RateLimiter
from src.gallery.services.secret_store import SecretStore

logger = get_logger(__name__)


class CredentialVerifier:
    """Throttle, then compare the input against the stored credential.

    The same path serves projects and comments; `kind` only selects the
    secret namespace and the legacy record to fall back to.
    """

    def __init__(self, secrets: SecretStore, rate_limiter: RateLimiter):
        self.secrets = secrets
        self.rate_limiter = rate_limiter

    async def verify(
        self,
        kind: ResourceKind,
        resource_id: str,
        plaintext: str,
        session_id: str | None = None,
        parent_id: str | None = None,
    ) -> VerificationResult:
        """Verify `plaintext` against the credential of `resource_id`.

        Args:
            kind: Which credential namespace to check.
            resource_id: Project id or comment id.
            plaintext: The password typed by the user.
            session_id: Viewer session; when given, the attempt is rate limited.
            parent_id: Project id of a comment, needed only for the legacy fallback.

        Raises:
            StoreError: if the secret or legacy record cannot be read.
        """
        if session_id:
            decision = await self.rate_limiter.check_and_record(session_id)
            if not decision.allowed:
                return VerificationResult.rate_limited(decision.error)

        stored = await self.secrets.get(kind, resource_id)
        if stored is not None:
            if verify_secret(plaintext, stored):
                return VerificationResult.ok()
            self._log_mismatch(kind, resource_id, session_id)
            return VerificationResult.wrong_password()

        legacy = await self.secrets.legacy_plaintext(kind, resource_id, parent_id)
        if legacy is None:
            self._log_mismatch(kind, resource_id, session_id)
            return VerificationResult.wrong_password()

        logger.warning(
            "Verifying against legacy plaintext password",
            kind=kind.label,
            resource_id=resource_id,
        )
        if verify_legacy_plaintext(plaintext, legacy):
            return VerificationResult.ok(legacy=True)
        self._log_mismatch(kind, resource_id, session_id)
        return VerificationResult.wrong_password()

    @staticmethod
    def _log_mismatch(kind: ResourceKind, resource_id: str, session_id: str | None) -> None:
        logger.info(
            "Credential mismatch",
            kind=kind.label,
            resource_id=resource_id,
            session=session_ref(session_id) if session_id else None,
        )
