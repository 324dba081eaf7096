"""
Library backend CLI.

Commands:
- serve:  run the GraphQL server with uvicorn
- schema: print the GraphQL schema SDL
"""

from __future__ import annotations

import typer
from rich.console import Console

from library_back import __version__
from library_back.config import get_settings

app = typer.Typer(
    help="GraphQL backend for a book catalog",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"library-backend {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """Library backend commands."""


@app.command(name="serve")
def serve_command(
    host: str | None = typer.Option(None, "--host", help="Bind address (default from settings)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default from settings)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the GraphQL server until interrupted."""
    import uvicorn

    settings = get_settings()
    bind_host = host or settings.host
    bind_port = port or settings.port

    console.print(f"[green]Server ready at http://{bind_host}:{bind_port}/graphql[/green]")
    console.print(f"[green]Subscriptions ready at ws://{bind_host}:{bind_port}/graphql[/green]")
    try:
        uvicorn.run(
            "library_back.app:create_app",
            factory=True,
            host=bind_host,
            port=bind_port,
            reload=reload,
            log_level=settings.log_level.lower(),
        )
    except Exception as e:
        console.print(f"[red]Server failed: {e}[/red]")
        raise typer.Exit(1)


@app.command(name="schema")
def schema_command() -> None:
    """Print the GraphQL schema SDL."""
    from library_back.graphql import print_schema

    typer.echo(print_schema())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
