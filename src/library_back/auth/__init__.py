"""
Authentication for the library backend.

Provides:
- Password hashing and verification
- JWT issue and verification
- Per-request auth context built from request headers
"""

from library_back.auth.context import (
    AuthContext,
    build_auth_context,
    extract_bearer_token,
)
from library_back.auth.crypto import hash_password, matches_shared_password, verify_password
from library_back.auth.tokens import (
    TokenClaims,
    TokenConfig,
    TokenError,
    TokenService,
)

__all__ = [
    "AuthContext",
    "TokenClaims",
    "TokenConfig",
    "TokenError",
    "TokenService",
    "build_auth_context",
    "extract_bearer_token",
    "hash_password",
    "matches_shared_password",
    "verify_password",
]
