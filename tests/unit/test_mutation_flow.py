"""Tests for the password-gated mutation flow (src/gallery/services/mutation_flow.py)."""

import pytest

from src.gallery.core.exceptions import (
    MSG_INVALID_VERSION,
    MSG_NOT_FOUND,
    MSG_PROFANITY,
    MSG_TOO_MANY_ATTEMPTS,
    MSG_WRONG_PASSWORD,
)
from src.gallery.main import Gallery
from src.gallery.models import ActionKind, FlowStatus, MutationState
from src.gallery.services import FlowStateError, MutationFlow, PendingAction
from tests.helpers import FakeClock, create_comment, create_deployment, create_project

pytestmark = pytest.mark.unit


@pytest.fixture
def flow(gallery: Gallery) -> MutationFlow:
    return gallery.new_flow()


class TestEditProject:
    async def test_correct_password_applies(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery, password="1234")

        started = flow.begin(
            PendingAction(ActionKind.EDIT_PROJECT, project.id, payload={"title": "새 제목"})
        )
        assert started.status is FlowStatus.AWAITING_PASSWORD
        assert flow.state is MutationState.AWAITING_PASSWORD

        outcome = await flow.submit_password("1234")

        assert outcome.status is FlowStatus.APPLIED
        assert outcome.result.title == "새 제목"
        assert flow.state is MutationState.IDLE
        assert flow.pending is None

    async def test_wrong_password_stays_pending(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery, password="1234")
        flow.begin(PendingAction(ActionKind.EDIT_PROJECT, project.id, payload={"title": "x"}))

        outcome = await flow.submit_password("0000")

        assert outcome.status is FlowStatus.REJECTED
        assert outcome.message == MSG_WRONG_PASSWORD
        assert flow.state is MutationState.AWAITING_PASSWORD
        assert flow.error == MSG_WRONG_PASSWORD
        assert (await gallery.projects.require(project.id)).title == project.title

        retry = await flow.submit_password("1234")
        assert retry.applied
        assert flow.error is None

    async def test_throttled_after_five_attempts(
        self, gallery: Gallery, flow: MutationFlow, clock: FakeClock
    ):
        project = await create_project(gallery, password="1234")
        flow.begin(PendingAction(ActionKind.EDIT_PROJECT, project.id, payload={"title": "x"}))

        for _ in range(5):
            assert (await flow.submit_password("0000")).message == MSG_WRONG_PASSWORD

        throttled = await flow.submit_password("1234")
        assert throttled.status is FlowStatus.REJECTED
        assert throttled.message == MSG_TOO_MANY_ATTEMPTS
        assert flow.state is MutationState.AWAITING_PASSWORD

        clock.advance(61)
        assert (await flow.submit_password("1234")).applied

    async def test_invalid_payload_rejected_at_begin(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery)

        outcome = flow.begin(
            PendingAction(ActionKind.EDIT_PROJECT, project.id, payload={"tags": list("abcd")})
        )

        assert outcome.status is FlowStatus.INVALID
        assert flow.state is MutationState.IDLE


class TestCommentActions:
    async def test_delete_requires_confirmation(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery, password="1111")
        comment = await create_comment(gallery, project.id, password="2222")
        flow.begin(PendingAction(ActionKind.DELETE_COMMENT, project.id, target_id=comment.id))

        # The project password does not open a comment
        assert (await flow.submit_password("1111")).status is FlowStatus.REJECTED

        verified = await flow.submit_password("2222")
        assert verified.status is FlowStatus.CONFIRMATION_REQUIRED
        assert flow.state is MutationState.AWAITING_CONFIRMATION
        assert len(await gallery.comments.list_comments(project.id)) == 1

        done = await flow.confirm()
        assert done.applied
        assert await gallery.comments.list_comments(project.id) == []
        assert flow.state is MutationState.IDLE

    async def test_cancel_at_confirmation_keeps_comment(
        self, gallery: Gallery, flow: MutationFlow
    ):
        project = await create_project(gallery)
        comment = await create_comment(gallery, project.id)
        flow.begin(PendingAction(ActionKind.DELETE_COMMENT, project.id, target_id=comment.id))
        await flow.submit_password("1234")

        outcome = flow.cancel()

        assert outcome.status is FlowStatus.CANCELLED
        assert flow.state is MutationState.IDLE
        assert len(await gallery.comments.list_comments(project.id)) == 1

    async def test_confirm_does_not_reverify(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery)
        comment = await create_comment(gallery, project.id)
        flow.begin(PendingAction(ActionKind.DELETE_COMMENT, project.id, target_id=comment.id))
        await flow.submit_password("1234")
        attempts_before = await gallery.rate_limiter.repo.get_attempts("session-a")

        await flow.confirm()

        assert await gallery.rate_limiter.repo.get_attempts("session-a") == attempts_before

    async def test_edit_comment_profanity_rejected_at_begin(
        self, gallery: Gallery, flow: MutationFlow
    ):
        project = await create_project(gallery)
        comment = await create_comment(gallery, project.id)

        outcome = flow.begin(
            PendingAction(
                ActionKind.EDIT_COMMENT,
                project.id,
                target_id=comment.id,
                payload={"content": "씨발"},
            )
        )

        assert outcome.status is FlowStatus.INVALID
        assert outcome.message == MSG_PROFANITY

    async def test_edit_comment_applies(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery)
        comment = await create_comment(gallery, project.id)
        flow.begin(
            PendingAction(
                ActionKind.EDIT_COMMENT,
                project.id,
                target_id=comment.id,
                payload={"content": "굿"},
            )
        )

        outcome = await flow.submit_password("1234")

        assert outcome.applied
        assert outcome.result.content == "굿"
        assert outcome.result.edited

    async def test_comment_deleted_mid_flow(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery)
        comment = await create_comment(gallery, project.id)
        flow.begin(PendingAction(ActionKind.DELETE_COMMENT, project.id, target_id=comment.id))
        await flow.submit_password("1234")
        await gallery.comments.delete(project.id, comment.id)

        outcome = await flow.confirm()

        assert outcome.status is FlowStatus.FAILED
        assert outcome.message == MSG_NOT_FOUND
        assert flow.state is MutationState.IDLE


class TestDeploymentActions:
    async def test_add_deployment_uses_project_password(
        self, gallery: Gallery, flow: MutationFlow
    ):
        project = await create_project(gallery, password="5555")
        flow.begin(
            PendingAction(
                ActionKind.ADD_DEPLOYMENT,
                project.id,
                payload={"version": "1.0.0", "content": "첫 배포"},
            )
        )

        outcome = await flow.submit_password("5555")

        assert outcome.applied
        assert (await gallery.projects.require(project.id)).latest_version == "1.0.0"

    async def test_bad_version_never_prompts(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery)

        outcome = flow.begin(
            PendingAction(
                ActionKind.ADD_DEPLOYMENT, project.id, payload={"version": "v1", "content": "x"}
            )
        )

        assert outcome.status is FlowStatus.INVALID
        assert outcome.message == MSG_INVALID_VERSION
        assert flow.state is MutationState.IDLE

    async def test_delete_deployment_confirmed(
        self, gallery: Gallery, flow: MutationFlow, clock: FakeClock
    ):
        project = await create_project(gallery)
        await create_deployment(gallery, project.id, "1.0.0")
        clock.advance(1)
        newest = await create_deployment(gallery, project.id, "1.1.0")
        flow.begin(PendingAction(ActionKind.DELETE_DEPLOYMENT, project.id, target_id=newest.id))

        assert (await flow.submit_password("1234")).status is FlowStatus.CONFIRMATION_REQUIRED
        assert (await flow.confirm()).applied

        page = await gallery.deployments.list_recent(project.id)
        assert [log.version for log in page.items] == ["1.0.0"]

    async def test_edit_deployment(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery)
        log = await create_deployment(gallery, project.id, "1.0.0")
        flow.begin(
            PendingAction(
                ActionKind.EDIT_DEPLOYMENT,
                project.id,
                target_id=log.id,
                payload={"content": "수정"},
            )
        )

        outcome = await flow.submit_password("1234")

        assert outcome.applied
        assert outcome.result.content == "수정"


class TestStateErrors:
    async def test_submit_without_action(self, flow: MutationFlow):
        with pytest.raises(FlowStateError):
            await flow.submit_password("1234")

    async def test_confirm_before_verification(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery)
        comment = await create_comment(gallery, project.id)
        flow.begin(PendingAction(ActionKind.DELETE_COMMENT, project.id, target_id=comment.id))

        with pytest.raises(FlowStateError):
            await flow.confirm()

    async def test_begin_twice(self, gallery: Gallery, flow: MutationFlow):
        project = await create_project(gallery)
        flow.begin(PendingAction(ActionKind.EDIT_PROJECT, project.id, payload={"title": "a"}))

        with pytest.raises(FlowStateError):
            flow.begin(PendingAction(ActionKind.EDIT_PROJECT, project.id, payload={"title": "b"}))

    def test_targeted_action_needs_target(self, flow: MutationFlow):
        with pytest.raises(FlowStateError):
            flow.begin(PendingAction(ActionKind.DELETE_COMMENT, "p1"))

    def test_cancel_when_idle(self, flow: MutationFlow):
        assert flow.cancel().status is FlowStatus.CANCELLED


class TestPendingAction:
    def test_comment_actions_verify_against_the_comment(self):
        pending = PendingAction(ActionKind.EDIT_COMMENT, "p1", target_id="c1")
        assert pending.credential_id == "c1"

    def test_deployment_actions_verify_against_the_project(self):
        pending = PendingAction(ActionKind.DELETE_DEPLOYMENT, "p1", target_id="d1")
        assert pending.credential_id == "p1"

    @pytest.mark.parametrize("target_id", [None, ""])
    def test_comment_credential_without_target_raises(self, target_id):
        pending = PendingAction(ActionKind.DELETE_COMMENT, "p1", target_id=target_id)
        with pytest.raises(FlowStateError):
            _ = pending.credential_id


def test_action_kinds_carry_credential_and_gate():
    assert ActionKind.ADD_DEPLOYMENT.credential_kind.label == "project"
    assert ActionKind.EDIT_COMMENT.credential_kind.label == "comment"
    assert {a for a in ActionKind if a.destructive} == {
        ActionKind.DELETE_COMMENT,
        ActionKind.DELETE_DEPLOYMENT,
    }
