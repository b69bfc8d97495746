"""Document store boundary: interface, transforms, and backends."""

from src.gallery.store.base import (
    COMMENT_SECRETS,
    CREATED_AT,
    DELETE_FIELD,
    PROJECT_SECRETS,
    PROJECTS,
    RATE_LIMITS,
    SERVER_TIMESTAMP,
    UPDATED_AT,
    ArrayRemove,
    ArrayUnion,
    Document,
    DocumentStore,
    Increment,
    Subscription,
    WriteBatch,
    comments_path,
    deployments_path,
)
from src.gallery.store.memory import InMemoryDocumentStore
from src.gallery.store.redis_store import RedisDocumentStore

__all__ = [
    # Collections
    "COMMENT_SECRETS",
    "PROJECT_SECRETS",
    "PROJECTS",
    "RATE_LIMITS",
    "comments_path",
    "deployments_path",
    # Fields and transforms
    "CREATED_AT",
    "UPDATED_AT",
    "DELETE_FIELD",
    "SERVER_TIMESTAMP",
    "ArrayRemove",
    "ArrayUnion",
    "Increment",
    # Interface
    "Document",
    "DocumentStore",
    "Subscription",
    "WriteBatch",
    # Backends
    "InMemoryDocumentStore",
    "RedisDocumentStore",
]
