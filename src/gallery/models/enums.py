"""Shared enums for models and the mutation protocol."""

from enum import Enum

from src.gallery.store.base import COMMENT_SECRETS, PROJECT_SECRETS, PROJECTS


class ResourceKind(Enum):
    """Kind of credential-bearing resource.

    Each member carries its secret namespace and the public collection that
    may still hold a legacy plaintext password, so callers never branch on
    the kind themselves.
    """

    PROJECT = ("project", PROJECT_SECRETS, PROJECTS)
    COMMENT = ("comment", COMMENT_SECRETS, PROJECTS + "/{parent_id}/comments")

    def __init__(self, label: str, secret_collection: str, legacy_collection: str):
        self.label = label
        self.secret_collection = secret_collection
        self.legacy_collection = legacy_collection

    @property
    def needs_parent(self) -> bool:
        return "{parent_id}" in self.legacy_collection

    def legacy_path(self, parent_id: str | None = None) -> str | None:
        """Public collection path holding the legacy record, if resolvable."""
        if not self.needs_parent:
            return self.legacy_collection
        if not parent_id:
            return None
        return self.legacy_collection.format(parent_id=parent_id)


class ActionKind(Enum):
    """Owner-restricted actions and the credential each one is gated by."""

    EDIT_PROJECT = ("edit_project", ResourceKind.PROJECT, False)
    EDIT_COMMENT = ("edit_comment", ResourceKind.COMMENT, False)
    DELETE_COMMENT = ("delete_comment", ResourceKind.COMMENT, True)
    ADD_DEPLOYMENT = ("add_deployment", ResourceKind.PROJECT, False)
    EDIT_DEPLOYMENT = ("edit_deployment", ResourceKind.PROJECT, False)
    DELETE_DEPLOYMENT = ("delete_deployment", ResourceKind.PROJECT, True)

    def __init__(self, label: str, credential_kind: ResourceKind, destructive: bool):
        self.label = label
        self.credential_kind = credential_kind
        self.destructive = destructive


class MutationState(str, Enum):
    """Where a pending privileged action stands."""

    IDLE = "idle"
    AWAITING_PASSWORD = "awaiting_password"
    VERIFYING = "verifying"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    APPLYING = "applying"


class VerificationFailure(str, Enum):
    RATE_LIMITED = "rate_limited"
    WRONG_PASSWORD = "wrong_password"


class SortOrder(str, Enum):
    """Gallery sort order."""

    LATEST = "latest"
    LIKES = "likes"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class FlowStatus(str, Enum):
    """Outcome of one step of the mutation flow."""

    AWAITING_PASSWORD = "awaiting_password"
    REJECTED = "rejected"
    CONFIRMATION_REQUIRED = "confirmation_required"
    APPLIED = "applied"
    CANCELLED = "cancelled"
    INVALID = "invalid"
    FAILED = "failed"


class RepairKind(str, Enum):
    """Advisory secondary write that can be replayed by reconciliation."""

    COMMENT_COUNT = "comment_count"
    LATEST_VERSION = "latest_version"
    COMMENT_SECRET = "comment_secret"
