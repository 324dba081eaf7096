"""
FastAPI application for the library backend.

The lifespan owns every process-wide collaborator:

- startup: logging, store connection (fails fast when unreachable), token
  service, notification channel, resolver services
- shutdown: close the channel (ending open subscriptions), disconnect

All of them live on ``app.state`` and reach resolvers through the
GraphQL context.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool
from strawberry.fastapi import GraphQLRouter

from library_back import __version__
from library_back.auth import TokenConfig, TokenService
from library_back.config import Settings, get_settings
from library_back.graphql import get_context, schema
from library_back.logging import get_api_logger, setup_logging
from library_back.notifications import BookAddedChannel
from library_back.services import create_services
from library_back.store import check_store, connect_store, disconnect_store, redact_url

logger = get_api_logger()


def create_token_service(settings: Settings) -> TokenService:
    return TokenService(
        TokenConfig(
            algorithm=settings.token_algorithm,
            secret_key=settings.secret_key,
            expire_minutes=settings.token_expire_minutes,
            issuer=settings.token_issuer,
        )
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_dir, settings.log_level)

    try:
        connect_store(settings.database_url)
        await run_in_threadpool(check_store)
    except Exception:
        logger.exception("Cannot reach document store at %s", redact_url(settings.database_url))
        disconnect_store()
        raise
    logger.info("Connected to document store")

    channel = BookAddedChannel(queue_size=settings.subscriber_queue_size)
    token_service = create_token_service(settings)

    app.state.channel = channel
    app.state.token_service = token_service
    app.state.services = create_services(
        token_service,
        channel=channel,
        shared_password=settings.shared_password,
    )
    logger.info("%s %s ready", settings.app_name, __version__)

    try:
        yield
    finally:
        await channel.close()
        disconnect_store()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="GraphQL API for a book catalog with user accounts",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    graphql_router = GraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql" if settings.enable_graphiql else None,
    )
    app.include_router(graphql_router, prefix="/graphql")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        try:
            await run_in_threadpool(check_store)
            store = "ok"
        except PyMongoError:
            store = "unavailable"
        return {"status": "healthy", "store": store}

    return app
