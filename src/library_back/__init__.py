"""
Library Backend - GraphQL API for a book catalog.

This package provides:
- Store: MongoEngine documents for books, authors and users
- Auth: password hashing, JWT tokens and per-request auth context
- Services: resolver logic for books, authors and users
- GraphQL: Strawberry schema and FastAPI application
"""

from library_back._version import get_version as _get_version

__version__ = _get_version()

from library_back.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
