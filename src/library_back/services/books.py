"""
Book resolvers.

``add_book`` validates the book before touching the authors collection, so
a rejected book never leaves a new author behind.
"""

from __future__ import annotations

import logging
from typing import Any

from mongoengine.errors import NotUniqueError, ValidationError
from starlette.concurrency import run_in_threadpool

from library_back.auth import AuthContext
from library_back.errors import UserInputError, field_errors_from
from library_back.logging import get_api_logger, log_with_context
from library_back.notifications import BookAdded, BookAddedChannel
from library_back.services.authors import find_author, get_or_create_author
from library_back.store import Author, Book

logger = get_api_logger()


def _validate_unsaved(document: Any, skip: frozenset[str], args: dict[str, Any]) -> None:
    """Run document validation, ignoring fields that are filled in later."""
    try:
        document.validate()
    except ValidationError as e:
        field_errors = {k: v for k, v in field_errors_from(e).items() if k not in skip}
        if field_errors:
            message = "; ".join(f"{k}: {', '.join(v)}" for k, v in field_errors.items())
            raise UserInputError(message, invalid_args=args, field_errors=field_errors)


class BookService:
    """Resolver logic for ``bookCount``, ``allBooks`` and ``addBook``."""

    def __init__(self, channel: BookAddedChannel | None = None) -> None:
        self.channel = channel

    async def book_count(self) -> int:
        return await run_in_threadpool(Book.objects.count)

    async def all_books(self, author: str | None = None, genre: str | None = None) -> list[Book]:
        """
        Books matching the optional filters, each with its author loaded.

        Args:
            author: Exact author name
            genre: A value the book's genres must contain

        Returns:
            Matching books; empty when the author name is unknown
        """
        return await run_in_threadpool(self._find_books, author, genre)

    def _find_books(self, author: str | None, genre: str | None) -> list[Book]:
        query: dict[str, Any] = {}
        if author is not None:
            author_doc = find_author(author)
            if author_doc is None:
                return []
            query["author"] = author_doc
        if genre is not None:
            query["genres"] = genre

        # One extra query for all referenced authors
        return list(Book.objects(**query).select_related())

    async def add_book(
        self,
        auth: AuthContext,
        title: str,
        published: int,
        author: str,
        genres: list[str],
    ) -> Book:
        """
        Create a book, creating its author on first use, and notify
        subscribers.

        Raises:
            AuthenticationError: If the caller is anonymous
            UserInputError: If the book or author fails validation
        """
        auth.require_user()
        args = {"title": title, "published": published, "author": author, "genres": list(genres)}

        book = await run_in_threadpool(self._create_book, args)

        if self.channel is not None:
            self.channel.publish(BookAdded(book=book))

        log_with_context(
            logger,
            logging.INFO,
            "Book added",
            title=book.title,
            author=book.author.name,
            by=auth.current_user.username if auth.current_user else None,
        )
        return book

    def _create_book(self, args: dict[str, Any]) -> Book:
        book = Book(title=args["title"], published=args["published"], genres=args["genres"])
        _validate_unsaved(book, frozenset({"author"}), args)
        _validate_unsaved(Author(name=args["author"]), frozenset(), args)

        author, created = get_or_create_author(args["author"], args)
        book.author = author
        try:
            book.save()
        except (NotUniqueError, ValidationError) as e:
            # Undo the implicit author unless another book already uses it
            if created and not Book.objects(author=author).count():
                author.delete()
            raise UserInputError(str(e), invalid_args=args, field_errors=field_errors_from(e))

        return book
