"""
Per-request authentication context.

``build_auth_context`` turns request headers into an ``AuthContext``. It
never raises: every outcome of reading the ``Authorization`` header maps to
a context value.

+-----------------------------------+---------------+-----------------+
| Header                            | authenticated | error_code      |
+===================================+===============+=================+
| absent                            | no            | None            |
| not ``Bearer <token>``            | no            | None            |
| bad signature / malformed         | no            | invalid_token   |
| expired                           | no            | token_expired   |
| valid, user deleted               | no            | unknown_user    |
| valid                             | yes           | None            |
+-----------------------------------+---------------+-----------------+
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from library_back.auth.tokens import TokenClaims, TokenError, TokenService
from library_back.errors import AuthenticationError

if TYPE_CHECKING:
    from library_back.store import User

BEARER_PREFIX = "bearer "

UserLoader = Callable[[str], "User | None"]


@dataclass(frozen=True)
class AuthContext:
    """
    Authentication state of one GraphQL operation.

    Attributes:
        current_user: Authenticated user document, if any
        claims: Verified token claims, if any
        error: Human-readable reason the token was rejected
        error_code: Machine-readable reason the token was rejected
    """

    current_user: User | None = None
    claims: TokenClaims | None = None
    error: str | None = None
    error_code: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Check if a user is attached."""
        return self.current_user is not None

    def require_user(self) -> User:
        """Return the current user or raise ``AuthenticationError``."""
        if self.current_user is None:
            raise AuthenticationError("not authenticated", reason=self.error_code)
        return self.current_user


def extract_bearer_token(headers: Mapping[str, str]) -> str | None:
    """
    Extract the token from ``Authorization: Bearer <token>``.

    The header name and the ``Bearer`` prefix are matched case-insensitively.

    Returns:
        Token string or None
    """
    auth_header = None
    for name, value in headers.items():
        if name.lower() == "authorization":
            auth_header = value
            break

    if not auth_header or not auth_header.lower().startswith(BEARER_PREFIX):
        return None

    token = auth_header[len(BEARER_PREFIX) :].strip()
    return token or None


def build_auth_context(
    headers: Mapping[str, str],
    token_service: TokenService,
    load_user: UserLoader,
) -> AuthContext:
    """
    Build the auth context for one request.

    Args:
        headers: Request headers
        token_service: Service used to verify the token
        load_user: Looks a user up by id; returns None when absent

    Returns:
        Authentication context (anonymous when no valid token)
    """
    token = extract_bearer_token(headers)
    if token is None:
        return AuthContext()

    try:
        claims = token_service.verify_token(token)
    except TokenError as e:
        return AuthContext(error=e.message, error_code=e.code)

    user = load_user(claims.id)
    if user is None:
        return AuthContext(
            claims=claims,
            error="Token refers to an unknown user",
            error_code="unknown_user",
        )

    return AuthContext(current_user=user, claims=claims)
