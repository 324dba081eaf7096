"""Shared pytest fixtures for library backend tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest

from library_back.auth import AuthContext, TokenConfig, TokenService
from library_back.config import Settings
from library_back.notifications import BookAddedChannel
from library_back.services import Services, create_services
from library_back.store import Author, Book, User, connect_store, disconnect_store

TEST_SECRET = "test-secret-key-for-unit-tests-32bytes"


def _drop_collections() -> None:
    for document in (Book, Author, User):
        document.drop_collection()


@pytest.fixture
def store() -> Iterator[None]:
    """Connect MongoEngine to a fresh in-process mock database."""
    connect_store("mongomock://localhost/library-test")
    _drop_collections()
    yield
    _drop_collections()
    disconnect_store()


@pytest.fixture
def token_service() -> TokenService:
    """Token service with a fixed test secret."""
    return TokenService(TokenConfig(secret_key=TEST_SECRET))


@pytest.fixture
def channel() -> BookAddedChannel:
    return BookAddedChannel(queue_size=10)


@pytest.fixture
def services(store: None, token_service: TokenService, channel: BookAddedChannel) -> Services:
    """Resolver services wired to the mock store."""
    return create_services(token_service, channel=channel, shared_password="password")


@pytest.fixture
def user(store: None) -> User:
    """A saved user without a password of their own."""
    return User(username="mluukkai", favorite_genre="fantasy").save()


@pytest.fixture
def auth(user: User) -> AuthContext:
    """Auth context for a logged-in user."""
    return AuthContext(current_user=user)


@pytest.fixture
def anonymous() -> AuthContext:
    return AuthContext()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Application settings isolated from the environment."""
    return Settings(
        database_url=f"mongomock://localhost/library-api-{uuid4().hex[:8]}",
        secret_key=TEST_SECRET,
        log_dir=tmp_path / "logs",
        enable_graphiql=False,
    )
