"""Service layer - the credential-gated mutation protocol.

Re-exports all services for convenience.
"""

from src.gallery.services.comment_service import CommentService
from src.gallery.services.credential_verifier import CredentialVerifier
from src.gallery.services.deployment_service import DeploymentService
from src.gallery.services.gallery import arrange_projects
from src.gallery.services.migration_service import MigrationService
from src.gallery.services.mutation_flow import FlowStateError, MutationFlow, PendingAction
from src.gallery.services.project_service import ProjectService
from src.gallery.services.rate_limiter import RateLimiter
from src.gallery.services.reconciliation_service import PendingRepair, ReconciliationService
from src.gallery.services.secret_store import SecretStore

__all__ = [
    # Credentials
    "CredentialVerifier",
    "RateLimiter",
    "SecretStore",
    # Resources
    "CommentService",
    "DeploymentService",
    "ProjectService",
    "arrange_projects",
    # Protocol
    "FlowStateError",
    "MutationFlow",
    "PendingAction",
    # Maintenance
    "MigrationService",
    "PendingRepair",
    "ReconciliationService",
]
