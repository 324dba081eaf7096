"""
GraphQL context for library requests.

The context is attached to every GraphQL operation and provides:
- Auth state built from the ``Authorization`` header
- The resolver services
- The book-added notification channel
- A request id for log correlation
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from starlette.concurrency import run_in_threadpool
from starlette.requests import HTTPConnection
from strawberry.fastapi import BaseContext

from library_back.auth import AuthContext, build_auth_context
from library_back.services import load_user

if TYPE_CHECKING:
    from library_back.notifications import BookAddedChannel
    from library_back.services import Services
    from library_back.store import User


class GraphQLContext(BaseContext):
    """
    Per-operation context.

    Example:
        async def resolve_me(self, info: Info) -> UserType | None:
            user = info.context.current_user
            return UserType.from_document(user) if user else None
    """

    def __init__(
        self,
        auth: AuthContext,
        services: Services,
        channel: BookAddedChannel,
        request_id: str | None = None,
    ) -> None:
        super().__init__()
        self.auth = auth
        self.services = services
        self.channel = channel
        self.request_id = request_id or str(uuid.uuid4())

    @property
    def current_user(self) -> User | None:
        return self.auth.current_user


async def get_context(connection: HTTPConnection) -> GraphQLContext:
    """
    Build the context for an HTTP request or a websocket connection.

    Collaborators are read from ``app.state``, where the application
    lifespan placed them.
    """
    state = connection.app.state
    auth = await run_in_threadpool(
        build_auth_context,
        connection.headers,
        state.token_service,
        load_user,
    )
    return GraphQLContext(
        auth=auth,
        services=state.services,
        channel=state.channel,
        request_id=connection.headers.get("X-Request-ID"),
    )
