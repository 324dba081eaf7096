"""
GraphQL object types.

Each type is built from its MongoEngine document with ``from_document``.
"""

import strawberry
from bson import ObjectId

from library_back.store import Author, Book, User


@strawberry.type(name="Author")
class AuthorType:
    """
    GraphQL type representing a book author.

    ``bookCount`` is filled in by ``allAuthors`` from one aggregation; when
    an author is reached through a book it is counted on demand.
    """

    id: strawberry.ID
    name: str
    born: int | None = None
    known_book_count: strawberry.Private[int | None] = None

    @strawberry.field
    async def book_count(self, info: strawberry.Info) -> int:
        if self.known_book_count is not None:
            return self.known_book_count
        return await info.context.services.authors.count_books(ObjectId(self.id))

    @classmethod
    def from_document(cls, author: Author, book_count: int | None = None) -> "AuthorType":
        return cls(
            id=strawberry.ID(str(author.pk)),
            name=author.name,
            born=author.born,
            known_book_count=book_count,
        )


@strawberry.type(name="Book")
class BookType:
    """GraphQL type representing a book with its author inline."""

    title: str
    published: int
    author: AuthorType
    id: strawberry.ID
    genres: list[str]

    @classmethod
    def from_document(cls, book: Book) -> "BookType":
        return cls(
            title=book.title,
            published=book.published,
            author=AuthorType.from_document(book.author),
            id=strawberry.ID(str(book.pk)),
            genres=list(book.genres or []),
        )


@strawberry.type(name="User")
class UserType:
    """Public user information; the password hash is never exposed."""

    username: str
    favorite_genre: str
    id: strawberry.ID

    @classmethod
    def from_document(cls, user: User) -> "UserType":
        return cls(
            username=user.username,
            favorite_genre=user.favorite_genre,
            id=strawberry.ID(str(user.pk)),
        )


@strawberry.type(name="Token")
class TokenType:
    value: str
