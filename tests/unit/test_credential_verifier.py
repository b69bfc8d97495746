"""Tests for the secret store and credential verifier."""

import pytest

from src.gallery.core.exceptions import (
    MSG_TOO_MANY_ATTEMPTS,
    MSG_WRONG_PASSWORD,
    StoreError,
)
from src.gallery.core.security import hash_secret, legacy_sha256, verify_secret
from src.gallery.main import Gallery
from src.gallery.models import ResourceKind, VerificationFailure
from src.gallery.repositories import RateLimitRepository, SecretRepository
from src.gallery.services import CredentialVerifier, RateLimiter, SecretStore
from src.gallery.store import PROJECTS, InMemoryDocumentStore, comments_path
from tests.helpers import FailingStore, FakeClock, create_comment, create_project

pytestmark = pytest.mark.unit


class TestSecretStore:
    async def test_put_get_delete(self, store: InMemoryDocumentStore):
        secrets = SecretStore(SecretRepository(store))

        await secrets.put(ResourceKind.PROJECT, "p1", hash_secret("1234"))
        assert verify_secret("1234", await secrets.get(ResourceKind.PROJECT, "p1"))

        assert await secrets.delete(ResourceKind.PROJECT, "p1")
        assert await secrets.get(ResourceKind.PROJECT, "p1") is None

    async def test_delete_absent_is_noop(self, store: InMemoryDocumentStore):
        secrets = SecretStore(SecretRepository(store))
        assert await secrets.delete(ResourceKind.COMMENT, "missing") is False

    async def test_namespaces_are_separate(self, store: InMemoryDocumentStore):
        secrets = SecretStore(SecretRepository(store))
        await secrets.put(ResourceKind.PROJECT, "same-id", hash_secret("1111"))

        assert await secrets.get(ResourceKind.COMMENT, "same-id") is None
        assert await store.count("project_secrets") == 1
        assert await store.count("comment_secrets") == 0

    async def test_comment_secret_keeps_project_id(self, store: InMemoryDocumentStore):
        secrets = SecretStore(SecretRepository(store))
        hashed = hash_secret("1234")
        await secrets.put(ResourceKind.COMMENT, "c1", hashed, project_id="p1")

        doc = await store.get("comment_secrets", "c1")
        assert doc is not None
        assert doc.data == {"hashed_password": hashed, "project_id": "p1"}


class TestVerify:
    async def test_correct_project_password(self, gallery: Gallery):
        project = await create_project(gallery, password="4321")

        result = await gallery.verifier.verify(
            ResourceKind.PROJECT, project.id, "4321", session_id="session-a"
        )

        assert result.success
        assert not result.legacy

    async def test_wrong_password_is_credential_failure(self, gallery: Gallery):
        """The first four wrong attempts fail with the credential message, not the throttle."""
        project = await create_project(gallery, password="4321")

        for _ in range(4):
            result = await gallery.verifier.verify(
                ResourceKind.PROJECT, project.id, "0000", session_id="session-a"
            )
            assert not result.success
            assert result.failure is VerificationFailure.WRONG_PASSWORD
            assert result.error == MSG_WRONG_PASSWORD

    async def test_attempt_after_budget_throttled_even_if_correct(self, gallery: Gallery):
        project = await create_project(gallery, password="4321")
        for _ in range(4):
            await gallery.verifier.verify(
                ResourceKind.PROJECT, project.id, "0000", session_id="session-a"
            )
        # Fifth attempt is still evaluated and uses up the budget
        await gallery.verifier.verify(
            ResourceKind.PROJECT, project.id, "0000", session_id="session-a"
        )

        result = await gallery.verifier.verify(
            ResourceKind.PROJECT, project.id, "4321", session_id="session-a"
        )

        assert not result.success
        assert result.failure is VerificationFailure.RATE_LIMITED
        assert result.error == MSG_TOO_MANY_ATTEMPTS

    async def test_throttle_lifts_after_window(self, gallery: Gallery, clock: FakeClock):
        project = await create_project(gallery, password="4321")
        for _ in range(5):
            await gallery.verifier.verify(
                ResourceKind.PROJECT, project.id, "0000", session_id="session-a"
            )
        assert not (
            await gallery.verifier.verify(
                ResourceKind.PROJECT, project.id, "4321", session_id="session-a"
            )
        ).success

        clock.advance(61)
        result = await gallery.verifier.verify(
            ResourceKind.PROJECT, project.id, "4321", session_id="session-a"
        )
        assert result.success

    async def test_without_session_is_not_rate_limited(self, gallery: Gallery):
        project = await create_project(gallery, password="4321")
        for _ in range(10):
            await gallery.verifier.verify(ResourceKind.PROJECT, project.id, "0000")

        result = await gallery.verifier.verify(ResourceKind.PROJECT, project.id, "4321")
        assert result.success

    async def test_comment_uses_its_own_credential(self, gallery: Gallery):
        project = await create_project(gallery, password="1111")
        comment = await create_comment(gallery, project.id, password="2222")

        assert not (
            await gallery.verifier.verify(ResourceKind.COMMENT, comment.id, "1111")
        ).success
        assert (await gallery.verifier.verify(ResourceKind.COMMENT, comment.id, "2222")).success

    async def test_unknown_resource_fails_as_wrong_password(self, gallery: Gallery):
        result = await gallery.verifier.verify(ResourceKind.PROJECT, "missing", "1234")
        assert result.failure is VerificationFailure.WRONG_PASSWORD


class TestLegacyFallback:
    async def test_project_plaintext_fallback(self, store: InMemoryDocumentStore, gallery: Gallery):
        await store.set(PROJECTS, "legacy", {"title": "옛날 프로젝트", "password": "7777"})

        ok = await gallery.verifier.verify(ResourceKind.PROJECT, "legacy", "7777")
        bad = await gallery.verifier.verify(ResourceKind.PROJECT, "legacy", "7778")

        assert ok.success
        assert ok.legacy
        assert bad.failure is VerificationFailure.WRONG_PASSWORD

    async def test_comment_plaintext_fallback_needs_parent(
        self, store: InMemoryDocumentStore, gallery: Gallery
    ):
        await store.set(
            comments_path("p1"), "c1", {"author": "a", "content": "b", "password": "5555"}
        )

        with_parent = await gallery.verifier.verify(
            ResourceKind.COMMENT, "c1", "5555", parent_id="p1"
        )
        without_parent = await gallery.verifier.verify(ResourceKind.COMMENT, "c1", "5555")

        assert with_parent.success
        assert not without_parent.success

    async def test_secret_store_wins_over_legacy_field(
        self, store: InMemoryDocumentStore, gallery: Gallery
    ):
        await store.set(PROJECTS, "p1", {"title": "t", "password": "1111"})
        await gallery.secrets.put(ResourceKind.PROJECT, "p1", hash_secret("2222"))

        assert not (await gallery.verifier.verify(ResourceKind.PROJECT, "p1", "1111")).success
        assert (await gallery.verifier.verify(ResourceKind.PROJECT, "p1", "2222")).success

    async def test_stored_sha256_digest_still_verifies(self, gallery: Gallery):
        """Secrets written as unsalted SHA256 before Argon2 remain usable."""
        await gallery.secrets.put(ResourceKind.PROJECT, "p1", legacy_sha256("3333"))

        ok = await gallery.verifier.verify(ResourceKind.PROJECT, "p1", "3333")
        bad = await gallery.verifier.verify(ResourceKind.PROJECT, "p1", "3334")

        assert ok.success
        assert not ok.legacy
        assert bad.failure is VerificationFailure.WRONG_PASSWORD


async def test_secret_read_failure_propagates(clock: FakeClock):
    """Secret lookups fail closed."""
    failing = FailingStore(clock=clock)
    failing.fail_reads.add("project_secrets")
    verifier = CredentialVerifier(
        SecretStore(SecretRepository(failing)),
        RateLimiter(RateLimitRepository(failing), 5, 60_000, clock=clock.ms),
    )

    with pytest.raises(StoreError):
        await verifier.verify(ResourceKind.PROJECT, "p1", "1234", session_id="session-a")
