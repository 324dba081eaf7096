"""
Author resolvers.

Book counts are derived on read: ``all_authors`` groups the books
collection by author in one aggregation, so the count is always the number
of books that reference the author at the time of the query.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from mongoengine.errors import NotUniqueError, ValidationError
from starlette.concurrency import run_in_threadpool

from library_back.auth import AuthContext
from library_back.errors import UserInputError, field_errors_from
from library_back.logging import get_api_logger, log_with_context
from library_back.store import Author, Book

logger = get_api_logger()


@dataclass(frozen=True)
class AuthorStats:
    """An author together with its derived book count."""

    author: Author
    book_count: int


def book_counts_by_author() -> dict[ObjectId, int]:
    """Count books per author id with a single ``$group`` stage."""
    pipeline = [{"$group": {"_id": "$author", "count": {"$sum": 1}}}]
    return {row["_id"]: row["count"] for row in Book.objects.aggregate(pipeline)}


def find_author(name: str) -> Author | None:
    """Exact, case-sensitive name lookup."""
    return Author.objects(name=name).first()


def get_or_create_author(name: str, invalid_args: dict[str, Any]) -> tuple[Author, bool]:
    """
    Find an author by exact name or create it.

    The unique index on ``Author.name`` makes concurrent creation safe: the
    loser of a race re-reads the winner's document.

    Args:
        name: Author name
        invalid_args: Arguments reported if the name fails validation

    Returns:
        Tuple of (author, created)
    """
    author = find_author(name)
    if author is not None:
        return author, False

    author = Author(name=name)
    try:
        author.save()
    except ValidationError as e:
        raise UserInputError(
            e.message or str(e),
            invalid_args=invalid_args,
            field_errors=field_errors_from(e),
        )
    except NotUniqueError:
        existing = find_author(name)
        if existing is None:
            raise
        return existing, False

    return author, True


class AuthorService:
    """Resolver logic for ``allAuthors``, ``authorCount`` and ``editAuthor``."""

    async def author_count(self) -> int:
        return await run_in_threadpool(Author.objects.count)

    async def all_authors(self) -> list[AuthorStats]:
        """Every author with its book count."""
        return await run_in_threadpool(self._all_authors)

    def _all_authors(self) -> list[AuthorStats]:
        counts = book_counts_by_author()
        return [AuthorStats(author, counts.get(author.pk, 0)) for author in Author.objects]

    async def count_books(self, author_id: Any) -> int:
        """Number of books referencing one author."""
        return await run_in_threadpool(lambda: Book.objects(author=author_id).count())

    async def edit_author(
        self,
        auth: AuthContext,
        name: str,
        set_born_to: int,
    ) -> AuthorStats | None:
        """
        Set ``born`` on the author with this exact name.

        Returns:
            The updated author, or None when no author has that name

        Raises:
            AuthenticationError: If the caller is anonymous
            UserInputError: If the update fails validation
        """
        auth.require_user()
        args = {"name": name, "setBornTo": set_born_to}
        return await run_in_threadpool(self._edit_author, args)

    def _edit_author(self, args: dict[str, Any]) -> AuthorStats | None:
        author = find_author(args["name"])
        if author is None:
            return None

        author.born = args["setBornTo"]
        try:
            author.save()
        except ValidationError as e:
            raise UserInputError(
                e.message or str(e),
                invalid_args=args,
                field_errors=field_errors_from(e),
            )

        log_with_context(logger, logging.INFO, "Author updated", name=author.name, born=author.born)
        return AuthorStats(author, Book.objects(author=author).count())
