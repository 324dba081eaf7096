"""
Document store for the library backend.

Persistence is delegated to MongoDB through MongoEngine; this package only
declares the documents and manages the connection.
"""

from library_back.store.connection import (
    check_store,
    connect_store,
    disconnect_store,
    is_mock_url,
    redact_url,
)
from library_back.store.documents import Author, Book, User

__all__ = [
    "Author",
    "Book",
    "User",
    "check_store",
    "connect_store",
    "disconnect_store",
    "is_mock_url",
    "redact_url",
]
