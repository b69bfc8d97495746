"""Credential hashing and session id generation."""

import hmac
import re
import secrets
from hashlib import sha256
from typing import Final

import argon2

from src.gallery.core.config import get_settings

SESSION_ID_BYTES = 12

ARGON2_PREFIX: Final[str] = "$argon2"

# Unsalted hex SHA256 digests written before Argon2 was adopted
_LEGACY_DIGEST: Final[re.Pattern[str]] = re.compile(r"[0-9a-f]{64}")


def _create_password_hasher() -> argon2.PasswordHasher:
    """Create password hasher with settings from config."""
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


_password_hasher = _create_password_hasher()


def hash_secret(plaintext: str) -> str:
    """Hash a resource password using Argon2id for the secret store."""
    return _password_hasher.hash(plaintext)


def legacy_sha256(plaintext: str) -> str:
    """Unsalted hex SHA256, the format of digests stored by earlier clients."""
    return sha256(plaintext.encode()).hexdigest()


def is_legacy_digest(hashed: str) -> bool:
    return _LEGACY_DIGEST.fullmatch(hashed.lower()) is not None


def verify_secret(plaintext: str, hashed: str) -> bool:
    """Verify a plaintext input against a stored Argon2 hash or legacy SHA256 digest.

    Returns False on any mismatch or unrecognized hash format.
    """
    if hashed.startswith(ARGON2_PREFIX):
        try:
            return _password_hasher.verify(hashed, plaintext)
        except argon2.exceptions.VerifyMismatchError:
            return False
        except argon2.exceptions.InvalidHashError:
            return False
    if is_legacy_digest(hashed):
        return hmac.compare_digest(legacy_sha256(plaintext), hashed.lower())
    return False


def verify_legacy_plaintext(plaintext: str, stored_plaintext: str) -> bool:
    """Compare against a plaintext password still embedded in a legacy record."""
    return hmac.compare_digest(plaintext.encode(), stored_plaintext.encode())


def generate_session_id() -> str:
    """Generate an opaque, non-authenticating session id for likes and throttling."""
    return secrets.token_urlsafe(SESSION_ID_BYTES)
