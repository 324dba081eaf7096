"""
User and login resolvers.
"""

from __future__ import annotations

import logging
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from mongoengine.errors import NotUniqueError, ValidationError
from starlette.concurrency import run_in_threadpool

from library_back.auth import (
    TokenService,
    hash_password,
    matches_shared_password,
    verify_password,
)
from library_back.errors import UserInputError, field_errors_from
from library_back.logging import get_api_logger, log_with_context
from library_back.store import User

logger = get_api_logger()

WRONG_CREDENTIALS = "wrong credentials"


def load_user(user_id: str) -> User | None:
    """Look a user up by id; malformed ids behave like unknown ones."""
    try:
        object_id = ObjectId(user_id)
    except (InvalidId, TypeError):
        return None
    return User.objects(id=object_id).first()


class UserService:
    """Resolver logic for ``createUser`` and ``login``."""

    def __init__(self, token_service: TokenService, shared_password: str | None = None) -> None:
        self.token_service = token_service
        self.shared_password = shared_password

    async def create_user(
        self,
        username: str,
        favorite_genre: str,
        password: str | None = None,
    ) -> User:
        """
        Persist a new user.

        Raises:
            UserInputError: If the username is taken, a field is invalid or
                the password is empty
        """
        args: dict[str, Any] = {"username": username, "favoriteGenre": favorite_genre}
        return await run_in_threadpool(self._create_user, args, password)

    def _create_user(self, args: dict[str, Any], password: str | None) -> User:
        user = User(username=args["username"], favorite_genre=args["favoriteGenre"])
        if password is not None:
            if not password:
                raise UserInputError(
                    "password must not be empty",
                    invalid_args=args,
                    field_errors={"password": ["must not be empty"]},
                )
            user.password_hash = hash_password(password)
        try:
            user.save()
        except NotUniqueError:
            raise UserInputError(f"username {args['username']!r} is already taken", invalid_args=args)
        except ValidationError as e:
            raise UserInputError(
                e.message or str(e),
                invalid_args=args,
                field_errors=field_errors_from(e),
            )

        log_with_context(logger, logging.INFO, "User created", username=user.username)
        return user

    async def login(self, username: str, password: str) -> str:
        """
        Check credentials and issue a token.

        Users created with a password must present it. Users created
        without one are accepted with the configured shared password.

        Returns:
            Signed token encoding the user's username and id

        Raises:
            UserInputError: If the user is unknown or the password is wrong
        """
        user = await run_in_threadpool(lambda: User.objects(username=username).first())

        if user is None or not self._password_matches(user, password):
            log_with_context(logger, logging.WARNING, "Login rejected", username=username)
            raise UserInputError(WRONG_CREDENTIALS)

        token, _ = self.token_service.create_token(user_id=str(user.pk), username=user.username)
        return token

    def _password_matches(self, user: User, password: str) -> bool:
        if user.password_hash:
            return verify_password(password, user.password_hash)
        if self.shared_password is None:
            return False
        return matches_shared_password(password, self.shared_password)
