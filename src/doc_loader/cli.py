"""Command-line interface for doc-loader."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from doc_loader import __version__
from doc_loader.config import AppConfig, FetcherConfig, LoaderConfig
from doc_loader.context import BrowsingContext
from doc_loader.document import Document
from doc_loader.errors import OperationCancelledError
from doc_loader.models import HttpMethod, NavigationRequest

app = typer.Typer(
    name="doc-loader",
    help="Load web documents, optionally following meta refresh redirects.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"doc-loader version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Document loader with meta refresh support."""
    pass


def parse_header(value: str) -> tuple[str, str]:
    """Split a ``Name: value`` header argument."""
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        raise typer.BadParameter(f"Header must look like 'Name: value', got {value!r}")
    return name.strip(), header_value.strip()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _build_config(
    base: AppConfig,
    follow_refresh: Optional[bool],
    max_refreshes: Optional[int],
    timeout: Optional[int],
    verbose: bool,
) -> AppConfig:
    """Apply command-line overrides, re-validating every model."""
    loader = base.loader.model_dump()
    if follow_refresh is not None:
        loader["follow_meta_refresh"] = follow_refresh
    if max_refreshes is not None:
        loader["max_refreshes"] = max_refreshes

    fetcher = base.fetcher.model_dump()
    if timeout is not None:
        fetcher["timeout_ms"] = timeout

    return AppConfig(
        fetcher=FetcherConfig(**fetcher),
        loader=LoaderConfig(**loader),
        verbose=base.verbose or verbose,
    )


async def _load(config: AppConfig, request: NavigationRequest) -> Document:
    async with BrowsingContext.from_config(config) as context:
        return await context.navigate(request)


def _print_document(document: Document) -> None:
    table = Table(title="Loaded Document", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("URL", document.url)
    table.add_row("Status", str(document.status_code))
    table.add_row("Content type", document.content_type)
    table.add_row("Title", document.title or "-")
    console.print(table)


@app.command("open")
def open_document(
    url: str = typer.Argument(..., help="Address of the document to load"),
    follow_refresh: Optional[bool] = typer.Option(
        None,
        "--follow-refresh/--no-follow-refresh",
        help="Follow <meta http-equiv=refresh> directives",
    ),
    max_refreshes: Optional[int] = typer.Option(
        None,
        "--max-refreshes",
        min=0,
        help="Maximum meta refreshes to follow (0 = unlimited)",
    ),
    timeout: Optional[int] = typer.Option(
        None,
        "--timeout",
        min=1000,
        max=120000,
        help="Request timeout in milliseconds",
    ),
    method: str = typer.Option(
        "GET",
        "--method",
        "-X",
        help="HTTP method for the initial request",
    ),
    data: Optional[str] = typer.Option(
        None,
        "--data",
        "-d",
        help="Request body for the initial request",
    ),
    header: list[str] = typer.Option(
        [],
        "--header",
        "-H",
        help="Extra request header as 'Name: value' (repeatable)",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    dump_config: bool = typer.Option(
        False,
        "--dump-config",
        help="Print the effective configuration as TOML and exit",
    ),
):
    """
    Load a document and print a summary of the final page.

    Examples:

        doc-loader open https://example.com

        doc-loader open https://example.com --follow-refresh --max-refreshes 5

        doc-loader open https://example.com/form -X POST -d "q=1" -H "Accept: text/html"
    """
    try:
        http_method = HttpMethod(method.upper())
    except ValueError:
        console.print(f"[red]Invalid method: {method}.[/red]")
        raise typer.Exit(1)

    headers = tuple(parse_header(h) for h in header)

    try:
        base = AppConfig.from_toml(config_file) if config_file else AppConfig()
        config = _build_config(base, follow_refresh, max_refreshes, timeout, verbose)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if dump_config:
        console.print(config.to_toml(), end="", markup=False, highlight=False)
        raise typer.Exit()

    _configure_logging(config.verbose)

    request = NavigationRequest(
        target=url,
        method=http_method,
        body=data.encode() if data is not None else None,
        headers=headers,
    )

    try:
        document = asyncio.run(_load(config, request))
    except (KeyboardInterrupt, OperationCancelledError):
        console.print("\n[yellow]Navigation cancelled.[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if config.verbose:
            console.print_exception()
        raise typer.Exit(1)

    with document:
        _print_document(document)


if __name__ == "__main__":
    app()
