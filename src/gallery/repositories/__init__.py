"""Repository layer - data access over the document store."""

from src.gallery.repositories.base import DocumentRepository, ModelSubscription
from src.gallery.repositories.comment import CommentRepository
from src.gallery.repositories.deployment import DeploymentLogRepository
from src.gallery.repositories.project import ProjectRepository
from src.gallery.repositories.rate_limit import RateLimitRepository
from src.gallery.repositories.secret import SecretRepository

__all__ = [
    # Base
    "DocumentRepository",
    "ModelSubscription",
    # Public collections
    "CommentRepository",
    "DeploymentLogRepository",
    "ProjectRepository",
    # Private collections
    "RateLimitRepository",
    "SecretRepository",
]
