"""Security utilities - credential hashing and session ids.

Re-exports all security-related functions for convenience.
"""

from src.gallery.core.security.crypto import (
    generate_session_id,
    hash_secret,
    is_legacy_digest,
    legacy_sha256,
    verify_legacy_plaintext,
    verify_secret,
)

__all__ = [
    "generate_session_id",
    "hash_secret",
    "is_legacy_digest",
    "legacy_sha256",
    "verify_legacy_plaintext",
    "verify_secret",
]
