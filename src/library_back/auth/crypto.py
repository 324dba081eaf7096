"""Password hashing and verification."""

from __future__ import annotations

import hashlib
import hmac
import secrets


def hash_password(password: str, salt: str | None = None) -> str:
    """Hash a password with salt using PBKDF2-SHA256 (100k iterations)."""
    if salt is None:
        salt = secrets.token_hex(16)

    key = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        100000,  # iterations
    )

    return f"{salt}${key.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash (constant-time comparison)."""
    try:
        salt, _ = password_hash.split("$")
        return hmac.compare_digest(hash_password(password, salt), password_hash)
    except ValueError:
        return False


def matches_shared_password(password: str, shared_password: str) -> bool:
    """Constant-time comparison against the configured shared password."""
    return hmac.compare_digest(password.encode("utf-8"), shared_password.encode("utf-8"))
