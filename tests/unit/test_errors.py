"""Unit tests for GraphQL error types."""

from __future__ import annotations

import pytest
from mongoengine.errors import ValidationError

from library_back.errors import AuthenticationError, UserInputError, field_errors_from
from library_back.store import Book


class TestAuthenticationError:
    def test_extensions(self) -> None:
        error = AuthenticationError()

        assert error.message == "not authenticated"
        assert error.extensions == {"code": "UNAUTHENTICATED", "category": "authentication"}

    def test_formatted(self) -> None:
        formatted = AuthenticationError(reason="invalid_token").formatted

        assert formatted["extensions"]["code"] == "UNAUTHENTICATED"
        assert formatted["extensions"]["reason"] == "invalid_token"


class TestUserInputError:
    def test_invalid_args(self) -> None:
        error = UserInputError("title too short", invalid_args={"title": "X"})

        assert error.extensions["code"] == "BAD_USER_INPUT"
        assert error.extensions["invalidArgs"] == {"title": "X"}
        assert "fieldErrors" not in error.extensions

    def test_field_errors(self) -> None:
        error = UserInputError("bad", field_errors={"title": ["String value is too short"]})

        assert error.extensions["fieldErrors"] == {"title": ["String value is too short"]}
        assert "invalidArgs" not in error.extensions


class TestFieldErrorsFrom:
    def test_validation_error(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            Book(title="X", published=1937).validate()

        errors = field_errors_from(exc_info.value)

        assert set(errors) == {"title", "author"}
        assert all(isinstance(messages, list) for messages in errors.values())

    def test_other_exception(self) -> None:
        assert field_errors_from(RuntimeError("boom")) == {}
