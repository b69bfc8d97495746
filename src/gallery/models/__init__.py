"""Model exports.

Import from here: `from src.gallery.models import Project, Comment`
"""

from src.gallery.models.base import SECRET_FIELDS, StoredModel, now_ms
from src.gallery.models.comment import Comment
from src.gallery.models.deployment import DeploymentLog
from src.gallery.models.enums import (
    ActionKind,
    FlowStatus,
    MutationState,
    RepairKind,
    ResourceKind,
    SortOrder,
    Theme,
    VerificationFailure,
)
from src.gallery.models.project import DEFAULT_GENERATION, Project
from src.gallery.models.rate_limit import RateLimitRecord
from src.gallery.models.secret import CommentSecret, ProjectSecret

__all__ = [
    # Helpers
    "SECRET_FIELDS",
    "StoredModel",
    "now_ms",
    # Enums
    "ActionKind",
    "FlowStatus",
    "MutationState",
    "RepairKind",
    "ResourceKind",
    "SortOrder",
    "Theme",
    "VerificationFailure",
    # Public records
    "DEFAULT_GENERATION",
    "Comment",
    "DeploymentLog",
    "Project",
    # Private records
    "CommentSecret",
    "ProjectSecret",
    "RateLimitRecord",
]
