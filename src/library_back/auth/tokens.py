"""
JWT tokens for API clients.

A token carries the user's ``username`` and ``id`` plus the standard
``iat``/``exp``/``iss`` claims. Tokens are not persisted; they stay valid
until ``exp``.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Token Configuration
# =============================================================================


# Security: Allowed algorithms whitelist (HMAC only, shared secret)
ALLOWED_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})
BLOCKED_ALGORITHMS = frozenset({"none", "None", "NONE", "nOnE"})

# Minimum secret key length for HMAC algorithms (256 bits = 32 bytes)
MIN_HMAC_SECRET_LENGTH = 32

# Maximum token length to prevent DoS attacks
MAX_TOKEN_LENGTH = 16 * 1024


@dataclass
class TokenConfig:
    """
    Token configuration settings.

    Attributes:
        algorithm: HMAC signing algorithm
        secret_key: Shared signing secret (auto-generated if not provided)
        expire_minutes: Token lifetime
        issuer: Token issuer claim
        leeway_seconds: Clock skew tolerance in seconds
    """

    algorithm: str = "HS256"
    secret_key: str = field(default_factory=lambda: secrets.token_urlsafe(32))
    expire_minutes: int = 24 * 60
    issuer: str = "library-backend"
    leeway_seconds: int = 30


# =============================================================================
# Token Models
# =============================================================================


class TokenClaims(BaseModel):
    """Claims encoded in a login token."""

    model_config = ConfigDict(frozen=True)

    username: str = Field(description="Username at login time")
    id: str = Field(description="User document id")
    exp: int = Field(description="Expiration timestamp")
    iat: int = Field(description="Issued at timestamp")
    iss: str = Field(description="Issuer")

    @property
    def is_expired(self) -> bool:
        """Check if token is expired."""
        return datetime.now(UTC).timestamp() > self.exp


# =============================================================================
# Token Service
# =============================================================================


class TokenError(Exception):
    """Token verification error."""

    def __init__(self, message: str, code: str = "invalid_token"):
        super().__init__(message)
        self.message = message
        self.code = code


class TokenService:
    """Issues and verifies login tokens."""

    def __init__(self, config: TokenConfig | None = None):
        self.config = config or TokenConfig()
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate token configuration for security."""
        if self.config.algorithm in BLOCKED_ALGORITHMS:
            raise ValueError(f"Algorithm '{self.config.algorithm}' is blocked for security reasons")

        if self.config.algorithm not in ALLOWED_ALGORITHMS:
            raise ValueError(
                f"Algorithm '{self.config.algorithm}' is not allowed. "
                f"Allowed: {', '.join(sorted(ALLOWED_ALGORITHMS))}"
            )

        if len(self.config.secret_key) < MIN_HMAC_SECRET_LENGTH:
            raise ValueError(
                f"Secret key must be at least {MIN_HMAC_SECRET_LENGTH} bytes for HMAC algorithms. "
                f"Got {len(self.config.secret_key)} bytes."
            )

    def create_token(self, user_id: str, username: str) -> tuple[str, TokenClaims]:
        """
        Sign a token for a user.

        Args:
            user_id: User document id
            username: Username

        Returns:
            Tuple of (token string, claims)
        """
        now = datetime.now(UTC)
        exp = now + timedelta(minutes=self.config.expire_minutes)

        claims = TokenClaims(
            username=username,
            id=str(user_id),
            exp=int(exp.timestamp()),
            iat=int(now.timestamp()),
            iss=self.config.issuer,
        )

        token = jwt.encode(claims.model_dump(), self.config.secret_key, algorithm=self.config.algorithm)
        return token, claims

    def verify_token(self, token: str) -> TokenClaims:
        """
        Verify and decode a token.

        Args:
            token: JWT token string

        Returns:
            Decoded claims

        Raises:
            TokenError: If token is malformed, badly signed or expired
        """
        if len(token) > MAX_TOKEN_LENGTH:
            raise TokenError(
                f"Token exceeds maximum length ({MAX_TOKEN_LENGTH} bytes)",
                code="token_too_large",
            )

        # Security: Pre-check algorithm in header before full decode
        try:
            header_alg = jwt.get_unverified_header(token).get("alg", "")
        except jwt.exceptions.DecodeError:
            raise TokenError("Malformed token header", code="invalid_token")

        if header_alg in BLOCKED_ALGORITHMS or header_alg not in ALLOWED_ALGORITHMS:
            raise TokenError(f"Algorithm '{header_alg}' is not allowed", code="invalid_algorithm")

        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
                leeway=timedelta(seconds=self.config.leeway_seconds),
                options={"require": ["username", "id", "exp", "iat", "iss"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired", code="token_expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}", code="invalid_token")

        return TokenClaims(
            username=payload["username"],
            id=payload["id"],
            exp=payload["exp"],
            iat=payload["iat"],
            iss=payload["iss"],
        )
