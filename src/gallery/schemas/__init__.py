"""Input payloads and operation results."""

from src.gallery.schemas.base import first_error_message, parse_input
from src.gallery.schemas.comment import CommentCreate, CommentUpdate
from src.gallery.schemas.deployment import DeploymentLogCreate, DeploymentLogUpdate
from src.gallery.schemas.project import ProjectCreate, ProjectUpdate
from src.gallery.schemas.results import (
    DeploymentPage,
    FlowOutcome,
    LikeResult,
    MigrationReport,
    RateLimitDecision,
    ReconciliationReport,
    VerificationResult,
)

__all__ = [
    # Helpers
    "first_error_message",
    "parse_input",
    # Inputs
    "CommentCreate",
    "CommentUpdate",
    "DeploymentLogCreate",
    "DeploymentLogUpdate",
    "ProjectCreate",
    "ProjectUpdate",
    # Results
    "DeploymentPage",
    "FlowOutcome",
    "LikeResult",
    "MigrationReport",
    "RateLimitDecision",
    "ReconciliationReport",
    "VerificationResult",
]
