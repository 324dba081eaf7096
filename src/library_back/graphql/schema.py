"""
Strawberry schema for the library API.

Query:        bookCount, authorCount, allBooks, allAuthors, me
Mutation:     addBook, editAuthor, createUser, login
Subscription: bookAdded

Resolvers only translate between GraphQL types and the services on
``info.context``; the services hold the business rules.
"""

from collections.abc import AsyncGenerator

import strawberry

from library_back.graphql.context import GraphQLContext
from library_back.graphql.types import AuthorType, BookType, TokenType, UserType

Info = strawberry.Info[GraphQLContext, None]


@strawberry.type
class Query:
    @strawberry.field(description="Total number of books")
    async def book_count(self, info: Info) -> int:
        return await info.context.services.books.book_count()

    @strawberry.field(description="Total number of authors")
    async def author_count(self, info: Info) -> int:
        return await info.context.services.authors.author_count()

    @strawberry.field(description="Books, optionally filtered by author name and genre")
    async def all_books(
        self,
        info: Info,
        author: str | None = None,
        genre: str | None = None,
    ) -> list[BookType]:
        books = await info.context.services.books.all_books(author=author, genre=genre)
        return [BookType.from_document(book) for book in books]

    @strawberry.field(description="Every author with its book count")
    async def all_authors(self, info: Info) -> list[AuthorType]:
        stats = await info.context.services.authors.all_authors()
        return [AuthorType.from_document(s.author, book_count=s.book_count) for s in stats]

    @strawberry.field(description="The logged-in user, or null")
    def me(self, info: Info) -> UserType | None:
        user = info.context.current_user
        return UserType.from_document(user) if user is not None else None


@strawberry.type
class Mutation:
    @strawberry.mutation(description="Add a book; the author is created on first use")
    async def add_book(
        self,
        info: Info,
        title: str,
        published: int,
        author: str,
        genres: list[str],
    ) -> BookType | None:
        book = await info.context.services.books.add_book(
            info.context.auth,
            title=title,
            published=published,
            author=author,
            genres=genres,
        )
        return BookType.from_document(book)

    @strawberry.mutation(description="Set an author's birth year; null if no such author")
    async def edit_author(self, info: Info, name: str, set_born_to: int) -> AuthorType | None:
        stats = await info.context.services.authors.edit_author(
            info.context.auth,
            name=name,
            set_born_to=set_born_to,
        )
        if stats is None:
            return None
        return AuthorType.from_document(stats.author, book_count=stats.book_count)

    @strawberry.mutation(description="Register a user")
    async def create_user(
        self,
        info: Info,
        username: str,
        favorite_genre: str,
        password: str | None = None,
    ) -> UserType | None:
        user = await info.context.services.users.create_user(
            username=username,
            favorite_genre=favorite_genre,
            password=password,
        )
        return UserType.from_document(user)

    @strawberry.mutation(description="Exchange credentials for a bearer token")
    async def login(self, info: Info, username: str, password: str) -> TokenType | None:
        token = await info.context.services.users.login(username=username, password=password)
        return TokenType(value=token)


@strawberry.type
class Subscription:
    @strawberry.subscription(description="Books as they are added")
    async def book_added(self, info: Info) -> AsyncGenerator[BookType, None]:
        subscription = info.context.channel.subscribe()
        try:
            async for event in subscription:
                yield BookType.from_document(event.book)
        finally:
            subscription.close()


def create_schema() -> strawberry.Schema:
    """Build the executable schema."""
    return strawberry.Schema(query=Query, mutation=Mutation, subscription=Subscription)


schema = create_schema()


def print_schema() -> str:
    """Return the schema SDL."""
    return schema.as_str()
