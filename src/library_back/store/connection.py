"""
Document store connection management.

Supports two URL schemes:
- ``mongodb://`` / ``mongodb+srv://``: a real MongoDB deployment
- ``mongomock://``: an in-process mock database for development and tests

The mock scheme is translated to a ``mongodb://`` URL served by
``mongomock.MongoClient`` so MongoEngine parses the database name the same
way for both.
"""

from __future__ import annotations

import logging
from typing import Any

import mongomock
from mongoengine import connect, disconnect
from mongoengine.connection import DEFAULT_CONNECTION_NAME, get_connection

from library_back.logging import get_store_logger, log_with_context

MOCK_SCHEME = "mongomock://"

# Fail fast when a real server is unreachable
SERVER_SELECTION_TIMEOUT_MS = 5000

logger = get_store_logger()


def is_mock_url(database_url: str) -> bool:
    """Check whether the URL selects the in-process mock database."""
    return database_url.startswith(MOCK_SCHEME)


def redact_url(database_url: str) -> str:
    """Hide credentials in a connection URL for logging."""
    scheme, sep, rest = database_url.partition("://")
    if not sep or "@" not in rest:
        return database_url
    _, _, host_part = rest.rpartition("@")
    return f"{scheme}://***@{host_part}"


def connect_store(database_url: str, alias: str = DEFAULT_CONNECTION_NAME) -> Any:
    """
    Register the MongoEngine connection for ``alias``.

    Args:
        database_url: ``mongodb://``, ``mongodb+srv://`` or ``mongomock://`` URL
        alias: MongoEngine connection alias

    Returns:
        The underlying client
    """
    log_with_context(logger, logging.INFO, "Connecting to document store", url=redact_url(database_url))

    if is_mock_url(database_url):
        host = "mongodb://" + database_url[len(MOCK_SCHEME) :]
        return connect(
            host=host,
            alias=alias,
            mongo_client_class=mongomock.MongoClient,
        )

    return connect(
        host=database_url,
        alias=alias,
        serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
    )


def check_store(alias: str = DEFAULT_CONNECTION_NAME) -> bool:
    """
    Round-trip to the server.

    Returns:
        True when the server answered

    Raises:
        pymongo.errors.PyMongoError: If the server is unreachable
    """
    get_connection(alias).server_info()
    return True


def disconnect_store(alias: str = DEFAULT_CONNECTION_NAME) -> None:
    """Close and unregister the connection for ``alias``."""
    disconnect(alias)
    logger.info("Disconnected from document store")
