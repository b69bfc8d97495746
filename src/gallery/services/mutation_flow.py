"""Password-gated mutation flow for owner-restricted actions.

States: IDLE -> AWAITING_PASSWORD -> VERIFYING -> (AWAITING_CONFIRMATION) ->
APPLYING -> IDLE. A rejected password returns the flow to
AWAITING_PASSWORD with the message kept in `error`; destructive actions pass
through a confirmation gate that does not re-run verification.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from src.gallery.core.exceptions import GalleryError, StoreError
from src.gallery.core.logging import (
    bind_action_context,
    bind_session_context,
    clear_context,
    get_logger,
)
from src.gallery.models.enums import ActionKind, FlowStatus, MutationState, ResourceKind
from src.gallery.schemas import (
    CommentUpdate,
    DeploymentLogCreate,
    DeploymentLogUpdate,
    FlowOutcome,
    ProjectUpdate,
    parse_input,
)
from src.gallery.services.comment_service import CommentService
from src.gallery.services.credential_verifier import CredentialVerifier
from src.gallery.services.deployment_service import DeploymentService
from src.gallery.services.project_service import ProjectService

logger = get_logger(__name__)

_PAYLOAD_SCHEMAS: dict[ActionKind, type[BaseModel]] = {
    ActionKind.EDIT_PROJECT: ProjectUpdate,
    ActionKind.EDIT_COMMENT: CommentUpdate,
    ActionKind.ADD_DEPLOYMENT: DeploymentLogCreate,
    ActionKind.EDIT_DEPLOYMENT: DeploymentLogUpdate,
}

_TARGETED = {
    ActionKind.EDIT_COMMENT,
    ActionKind.DELETE_COMMENT,
    ActionKind.EDIT_DEPLOYMENT,
    ActionKind.DELETE_DEPLOYMENT,
}


class FlowStateError(RuntimeError):
    """A flow step was called in a state that does not allow it."""


@dataclass
class PendingAction:
    """An owner action waiting for its password.

    `target_id` is the comment or deployment log acted on; project-level
    actions leave it None.
    """

    action: ActionKind
    project_id: str
    target_id: str | None = None
    payload: BaseModel | dict[str, Any] | None = None

    @property
    def credential_kind(self) -> ResourceKind:
        return self.action.credential_kind

    @property
    def credential_id(self) -> str:
        """Project actions (deployment logs included) verify against the project."""
        if self.credential_kind is ResourceKind.COMMENT:
            if not self.target_id:
                raise FlowStateError(f"{self.action.label} needs a target id")
            return self.target_id
        return self.project_id


class MutationFlow:
    """One viewer's pending privileged action.

    Every GalleryError raised while verifying or applying becomes a
    FlowOutcome; only misuse of the state machine raises FlowStateError.
    """

    def __init__(
        self,
        verifier: CredentialVerifier,
        projects: ProjectService,
        comments: CommentService,
        deployments: DeploymentService,
        session_id: str | None = None,
    ):
        self.verifier = verifier
        self.projects = projects
        self.comments = comments
        self.deployments = deployments
        self.session_id = session_id
        self.state = MutationState.IDLE
        self.pending: PendingAction | None = None
        self.error: str | None = None

    async def _execute(self, pending: PendingAction) -> Any:
        payload = pending.payload or {}
        target = pending.target_id or ""
        match pending.action:
            case ActionKind.EDIT_PROJECT:
                return await self.projects.edit(pending.project_id, payload)
            case ActionKind.EDIT_COMMENT:
                return await self.comments.edit(pending.project_id, target, payload)
            case ActionKind.DELETE_COMMENT:
                return await self.comments.delete(pending.project_id, target)
            case ActionKind.ADD_DEPLOYMENT:
                return await self.deployments.add(pending.project_id, payload)
            case ActionKind.EDIT_DEPLOYMENT:
                return await self.deployments.edit(pending.project_id, target, payload)
            case ActionKind.DELETE_DEPLOYMENT:
                return await self.deployments.delete(pending.project_id, target)

    def _reset(self) -> None:
        self.state = MutationState.IDLE
        self.pending = None
        self.error = None
        clear_context()

    def _require_state(self, *allowed: MutationState) -> PendingAction:
        if self.state not in allowed or self.pending is None:
            raise FlowStateError(f"Not allowed in state {self.state.value}")
        return self.pending

    def begin(self, pending: PendingAction) -> FlowOutcome:
        """Start an action and ask for its password.

        The payload is validated here, so a bad version string or a blocked
        word is rejected before any password prompt.
        """
        if self.state is not MutationState.IDLE:
            raise FlowStateError(f"Action already pending in state {self.state.value}")
        if pending.action in _TARGETED and not pending.target_id:
            raise FlowStateError(f"{pending.action.label} needs a target id")

        schema = _PAYLOAD_SCHEMAS.get(pending.action)
        try:
            if schema is not None:
                pending.payload = parse_input(schema, pending.payload or {})
            if isinstance(pending.payload, CommentUpdate):
                self.comments.ensure_clean(pending.payload.content)
        except GalleryError as e:
            logger.info("Action rejected before prompt", action=pending.action.label)
            return FlowOutcome(status=FlowStatus.INVALID, message=e.message)

        self.pending = pending
        self.state = MutationState.AWAITING_PASSWORD
        self.error = None
        bind_session_context(self.session_id)
        bind_action_context(pending.action.label, pending.target_id or pending.project_id)
        return FlowOutcome(status=FlowStatus.AWAITING_PASSWORD)

    async def submit_password(self, plaintext: str) -> FlowOutcome:
        """Verify the password; apply, ask for confirmation, or reject inline."""
        pending = self._require_state(MutationState.AWAITING_PASSWORD)
        self.state = MutationState.VERIFYING
        try:
            result = await self.verifier.verify(
                pending.credential_kind,
                pending.credential_id,
                plaintext,
                session_id=self.session_id,
                parent_id=pending.project_id,
            )
            result.raise_for_failure()
        except GalleryError as e:
            self.state = MutationState.AWAITING_PASSWORD
            self.error = e.message
            return FlowOutcome(status=FlowStatus.REJECTED, message=e.message)

        self.error = None
        if pending.action.destructive:
            self.state = MutationState.AWAITING_CONFIRMATION
            return FlowOutcome(status=FlowStatus.CONFIRMATION_REQUIRED)
        return await self._apply(pending)

    async def confirm(self) -> FlowOutcome:
        """Apply a verified destructive action."""
        pending = self._require_state(MutationState.AWAITING_CONFIRMATION)
        return await self._apply(pending)

    def cancel(self) -> FlowOutcome:
        if self.pending is not None:
            logger.debug("Action cancelled", state=self.state.value)
        self._reset()
        return FlowOutcome(status=FlowStatus.CANCELLED)

    async def _apply(self, pending: PendingAction) -> FlowOutcome:
        self.state = MutationState.APPLYING
        try:
            result = await self._execute(pending)
        except GalleryError as e:
            log = logger.error if isinstance(e, StoreError) else logger.warning
            log("Action failed", error=e.message)
            self._reset()
            return FlowOutcome(status=FlowStatus.FAILED, message=e.message)
        logger.info("Action applied")
        self._reset()
        return FlowOutcome(status=FlowStatus.APPLIED, result=result)
