"""
GraphQL error types for the library API.

Both errors subclass ``GraphQLError`` so Strawberry serialises their
``extensions`` into the response, giving clients a machine-readable code:

- AuthenticationError: caller must log in (``UNAUTHENTICATED``)
- UserInputError: validation, uniqueness or credential failure
  (``BAD_USER_INPUT``), with the offending arguments under ``invalidArgs``

Example:
    {
      "message": "not authenticated",
      "extensions": {"code": "UNAUTHENTICATED", "category": "authentication"}
    }
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from graphql import GraphQLError


class ErrorCategory(Enum):
    """High-level error categories for client handling.

    - AUTHENTICATION: Redirect to login, obtain a new token
    - VALIDATION: Show field-level errors
    """

    AUTHENTICATION = "authentication"
    VALIDATION = "validation"


class AuthenticationError(GraphQLError):
    """Raised when an operation requires a logged-in user."""

    code = "UNAUTHENTICATED"

    def __init__(self, message: str = "not authenticated", reason: str | None = None):
        extensions: dict[str, Any] = {
            "code": self.code,
            "category": ErrorCategory.AUTHENTICATION.value,
        }
        if reason:
            extensions["reason"] = reason
        super().__init__(message, extensions=extensions)
        self.reason = reason


class UserInputError(GraphQLError):
    """Raised when arguments fail validation or persistence."""

    code = "BAD_USER_INPUT"

    def __init__(
        self,
        message: str,
        invalid_args: dict[str, Any] | None = None,
        field_errors: dict[str, list[str]] | None = None,
    ):
        extensions: dict[str, Any] = {
            "code": self.code,
            "category": ErrorCategory.VALIDATION.value,
        }
        if invalid_args is not None:
            extensions["invalidArgs"] = invalid_args
        if field_errors:
            extensions["fieldErrors"] = field_errors
        super().__init__(message, extensions=extensions)
        self.invalid_args = invalid_args or {}
        self.field_errors = field_errors or {}


def field_errors_from(error: Exception) -> dict[str, list[str]]:
    """Extract per-field messages from a MongoEngine ``ValidationError``.

    ``ValidationError.to_dict()`` returns nested dicts for embedded fields
    and plain strings for scalar fields; both are flattened to lists.
    """
    to_dict = getattr(error, "to_dict", None)
    if to_dict is None:
        return {}
    result: dict[str, list[str]] = {}
    for field_name, detail in to_dict().items():
        if isinstance(detail, dict):
            result[field_name] = [str(v) for v in detail.values()]
        else:
            result[field_name] = [str(detail)]
    return result
