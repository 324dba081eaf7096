"""
MongoEngine documents for the catalog.

Collections:
- authors: unique by name; ``born`` is the only mutable field
- books: reference their author by ObjectId
- users: unique by username; password stored as a PBKDF2 hash

Author book counts are never stored; see ``AuthorService``.
"""

from __future__ import annotations

from mongoengine import (
    Document,
    IntField,
    ListField,
    ReferenceField,
    StringField,
)


class Author(Document):
    name = StringField(required=True, unique=True, min_length=4)
    born = IntField()

    meta = {"collection": "authors"}

    def __repr__(self) -> str:
        return f"<Author {self.name!r}>"


class Book(Document):
    title = StringField(required=True, unique=True, min_length=2)
    published = IntField(required=True)
    author = ReferenceField(Author, required=True)
    genres = ListField(StringField(), default=list)

    meta = {
        "collection": "books",
        "indexes": ["author", "genres"],
    }

    def __repr__(self) -> str:
        return f"<Book {self.title!r}>"


class User(Document):
    username = StringField(required=True, unique=True, min_length=3)
    favorite_genre = StringField(required=True, db_field="favoriteGenre")
    password_hash = StringField()

    meta = {"collection": "users"}

    def __repr__(self) -> str:
        return f"<User {self.username!r}>"
