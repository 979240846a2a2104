"""CLI for querying saved capture files.

Runs the same listing, search and download operations as the MCP tools
against a capture file exported with network_export (or a mitmproxy .flow
dump), without a browser.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from netsift.capture.download import download_response, format_download_report
from netsift.capture.files import open_capture
from netsift.capture.listing import list_simplified
from netsift.capture.patterns import grep_text
from netsift.capture.search import format_search_report, search_exchanges
from netsift.capture.store import CaptureStore
from netsift.config import get_log_level
from netsift.models import DEFAULT_SEARCH_FIELDS, CaptureQueryError, SearchField
from netsift.utils.logging import setup_logging

app = typer.Typer(
    name="netsift-cli",
    help="Query captured browser network traffic - list, search and download requests",
)

CaptureFile = Annotated[
    Path,
    typer.Argument(
        help="Capture file (.json from network_export, or mitmproxy .flow)",
    ),
]


def _fail(error: CaptureQueryError) -> typer.Exit:
    typer.echo(f"❌ Error [{error.code.value}]: {error.message}", err=True)
    return typer.Exit(1)


def _load(file: Path) -> CaptureStore:
    try:
        return open_capture(file)
    except CaptureQueryError as e:
        raise _fail(e) from e


@app.callback()
def main_callback() -> None:
    """Configure logging for every command."""
    setup_logging(get_log_level())


@app.command("list")
def list_requests(
    file: CaptureFile,
    include_images: Annotated[
        bool,
        typer.Option("--images", help="Include image requests"),
    ] = False,
    include_fonts: Annotated[
        bool,
        typer.Option("--fonts", help="Include font requests"),
    ] = False,
) -> None:
    """List captured requests without analytics, tracking, image and font noise.

    Example:
        netsift-cli list capture.json
    """
    store = _load(file)
    typer.echo(list_simplified(store, include_images, include_fonts))


@app.command()
def search(
    file: CaptureFile,
    query: Annotated[str, typer.Argument(help="Text or regular expression to find")],
    is_regex: Annotated[
        bool,
        typer.Option("--regex", "-r", help="Treat query as a regular expression"),
    ] = False,
    fields: Annotated[
        list[SearchField] | None,
        typer.Option("--in", "-i", help="Field to search (repeatable)"),
    ] = None,
    context_chars: Annotated[
        int,
        typer.Option("--context", "-c", help="Characters of context around each match"),
    ] = 120,
    max_results: Annotated[
        int,
        typer.Option("--max-results", "-n", help="Maximum number of matching requests"),
    ] = 20,
    max_matches_per_field: Annotated[
        int,
        typer.Option("--max-per-field", help="Maximum snippets per field per request"),
    ] = 3,
    include_filtered: Annotated[
        bool,
        typer.Option("--all", "-a", help="Also search analytics/tracking/image/font traffic"),
    ] = False,
) -> None:
    """Search captured requests and show highlighted snippets.

    Example:
        netsift-cli search capture.json "Soap" --in url --in responseBody
    """
    store = _load(file)
    search_fields = fields or list(DEFAULT_SEARCH_FIELDS)
    try:
        outcome = asyncio.run(
            search_exchanges(
                store,
                query,
                is_regex=is_regex,
                fields=search_fields,
                context_chars=context_chars,
                max_results=max_results,
                max_matches_per_field=max_matches_per_field,
                include_filtered_domains=include_filtered,
            )
        )
    except CaptureQueryError as e:
        raise _fail(e) from e
    typer.echo(format_search_report(outcome, query, is_regex, search_fields))


@app.command()
def download(
    file: CaptureFile,
    url_pattern: Annotated[str, typer.Argument(help="Substring or regular expression matched against URLs")],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="File to save the response body to"),
    ],
    is_regex: Annotated[
        bool,
        typer.Option("--regex", "-r", help="Treat url_pattern as a regular expression"),
    ] = False,
    match_index: Annotated[
        int,
        typer.Option("--index", "-x", help="Which match to download (0 = first)"),
    ] = 0,
    include_filtered: Annotated[
        bool,
        typer.Option("--all", "-a", help="Also match analytics/tracking/image/font traffic"),
    ] = False,
) -> None:
    """Save the body of a captured response to a file.

    Example:
        netsift-cli download capture.json /api/items -o items.json
    """
    store = _load(file)
    try:
        result = asyncio.run(
            download_response(
                store,
                url_pattern,
                output,
                is_regex=is_regex,
                match_index=match_index,
                include_filtered_domains=include_filtered,
            )
        )
    except CaptureQueryError as e:
        raise _fail(e) from e
    except OSError as e:
        typer.echo(f"❌ Failed to write file: {e}", err=True)
        raise typer.Exit(1) from e
    typer.echo(format_download_report(result, url_pattern))


@app.command()
def grep(
    file: Annotated[Path, typer.Argument(help="Any text file, e.g. a saved page or response body")],
    query: Annotated[str, typer.Argument(help="Text or regular expression to find")],
    is_regex: Annotated[
        bool,
        typer.Option("--regex", "-r", help="Treat query as a regular expression"),
    ] = False,
    context_chars: Annotated[
        int,
        typer.Option("--context", "-c", help="Characters of context around each match"),
    ] = 200,
    max_matches: Annotated[
        int,
        typer.Option("--max-matches", "-n", help="Maximum number of snippets"),
    ] = 20,
) -> None:
    """Search a text file and show matches in context.

    Example:
        netsift-cli grep items.json '"price":\\s*\\d+' --regex
    """
    if not file.exists():
        typer.echo(f"❌ File not found: {file}", err=True)
        raise typer.Exit(1)
    text = file.read_text(encoding="utf-8", errors="replace")
    try:
        typer.echo(grep_text(text, query, is_regex, context_chars, max_matches, source=str(file)))
    except CaptureQueryError as e:
        raise _fail(e) from e


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
