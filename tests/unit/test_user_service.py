"""
Unit tests for user and login resolvers.
"""

from __future__ import annotations

import pytest

from library_back.auth import TokenService
from library_back.errors import UserInputError
from library_back.services import Services, load_user
from library_back.store import User


class TestCreateUser:
    """Test createUser."""

    @pytest.mark.asyncio
    async def test_create_user(self, services: Services) -> None:
        user = await services.users.create_user(username="mluukkai", favorite_genre="fantasy")

        assert user.pk is not None
        assert user.username == "mluukkai"
        assert user.favorite_genre == "fantasy"
        assert user.password_hash is None

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, services: Services) -> None:
        user = await services.users.create_user(username="hellas", favorite_genre="crime", password="s3cret")

        assert user.password_hash
        assert "s3cret" not in user.password_hash

    @pytest.mark.asyncio
    async def test_duplicate_username(self, services: Services, user: User) -> None:
        with pytest.raises(UserInputError) as exc_info:
            await services.users.create_user(username="mluukkai", favorite_genre="crime")

        assert exc_info.value.invalid_args == {"username": "mluukkai", "favoriteGenre": "crime"}
        assert User.objects.count() == 1

    @pytest.mark.asyncio
    async def test_short_username(self, services: Services) -> None:
        with pytest.raises(UserInputError) as exc_info:
            await services.users.create_user(username="ab", favorite_genre="crime")

        assert "username" in exc_info.value.field_errors

    @pytest.mark.asyncio
    async def test_empty_password_rejected(self, services: Services) -> None:
        """An empty password must not fall back to the shared one."""
        with pytest.raises(UserInputError) as exc_info:
            await services.users.create_user(username="hellas", favorite_genre="crime", password="")

        assert "password" in exc_info.value.field_errors
        assert "password" not in exc_info.value.invalid_args
        assert User.objects.count() == 0

        with pytest.raises(UserInputError):
            await services.users.login(username="hellas", password="password")


class TestLogin:
    """Test login."""

    @pytest.mark.asyncio
    async def test_shared_password(self, services: Services, token_service: TokenService, user: User) -> None:
        """Users without their own password log in with the shared one."""
        token = await services.users.login(username="mluukkai", password="password")

        claims = token_service.verify_token(token)
        assert claims.username == "mluukkai"
        assert claims.id == str(user.pk)

    @pytest.mark.asyncio
    async def test_wrong_password(self, services: Services, user: User) -> None:
        with pytest.raises(UserInputError) as exc_info:
            await services.users.login(username="mluukkai", password="hunter2")

        assert exc_info.value.message == "wrong credentials"

    @pytest.mark.asyncio
    async def test_unknown_user(self, services: Services) -> None:
        with pytest.raises(UserInputError) as exc_info:
            await services.users.login(username="nobody", password="password")

        assert exc_info.value.message == "wrong credentials"

    @pytest.mark.asyncio
    async def test_own_password(self, services: Services, token_service: TokenService) -> None:
        await services.users.create_user(username="hellas", favorite_genre="crime", password="s3cret")

        token = await services.users.login(username="hellas", password="s3cret")

        assert token_service.verify_token(token).username == "hellas"

    @pytest.mark.asyncio
    async def test_own_password_replaces_shared(self, services: Services) -> None:
        await services.users.create_user(username="hellas", favorite_genre="crime", password="s3cret")

        with pytest.raises(UserInputError):
            await services.users.login(username="hellas", password="password")


class TestLoadUser:
    def test_known_id(self, user: User) -> None:
        assert load_user(str(user.pk)) == user

    def test_unknown_id(self, store: None) -> None:
        assert load_user("64b7f0c2a1b2c3d4e5f60718") is None

    def test_malformed_id(self, store: None) -> None:
        assert load_user("not-an-object-id") is None
