"""
Domain resolvers for the library API.

Each service maps GraphQL operations to document store calls. Store calls
run in a worker thread so the event loop only waits on I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

from library_back.auth import TokenService
from library_back.notifications import BookAddedChannel
from library_back.services.authors import AuthorService, AuthorStats, book_counts_by_author
from library_back.services.books import BookService
from library_back.services.users import UserService, load_user


@dataclass(frozen=True)
class Services:
    """The resolver services shared by all requests."""

    books: BookService
    authors: AuthorService
    users: UserService


def create_services(
    token_service: TokenService,
    channel: BookAddedChannel | None = None,
    shared_password: str | None = None,
) -> Services:
    """Wire the services around one token service and notification channel."""
    return Services(
        books=BookService(channel),
        authors=AuthorService(),
        users=UserService(token_service, shared_password=shared_password),
    )


__all__ = [
    "AuthorService",
    "AuthorStats",
    "BookService",
    "Services",
    "UserService",
    "book_counts_by_author",
    "create_services",
    "load_user",
]
