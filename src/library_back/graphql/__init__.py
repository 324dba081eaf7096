"""
GraphQL layer for the library backend.

Key components:
- types: Strawberry object types built from store documents
- context: Per-operation context with auth state and services
- schema: Query, Mutation and Subscription roots
"""

from library_back.graphql.context import GraphQLContext, get_context
from library_back.graphql.schema import create_schema, print_schema, schema
from library_back.graphql.types import AuthorType, BookType, TokenType, UserType

__all__ = [
    "AuthorType",
    "BookType",
    "GraphQLContext",
    "TokenType",
    "UserType",
    "create_schema",
    "get_context",
    "print_schema",
    "schema",
]
