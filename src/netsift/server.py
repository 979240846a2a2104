"""FastMCP server for querying captured browser network traffic.

Provides MCP tools to browse with a recording page and then list, search and
download the captured requests.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated

from fastmcp import FastMCP

from netsift import handlers
from netsift.browser.session import CaptureSessionManager

logger = logging.getLogger(__name__)

# Create MCP server instance
mcp = FastMCP("netsift")


@mcp.tool()
async def browser_navigate(
    url: Annotated[str, "URL to open in the recording browser page"],
) -> str:
    """Open a URL in the recording browser.

    Starts the browser on first use. All network requests issued by the page
    are captured for the network_* tools.
    """
    try:
        session = await CaptureSessionManager.get_or_create()
        return await session.navigate(url)
    except TimeoutError:
        return f"Error: Navigation to {url} timed out."
    except RuntimeError as e:
        return f"Error: {e}"
    except Exception as e:
        logger.error(f"Navigation failed: {e}", exc_info=True)
        return f"Error: {type(e).__name__}: {e}"


@mcp.tool()
async def browser_page_grep(
    query: Annotated[str, "Text or regular expression to find in the page HTML"],
    is_regex: Annotated[bool, "Treat query as a regular expression"] = False,
    context_chars: Annotated[int, "Characters of context around each match"] = 200,
    max_matches: Annotated[int, "Maximum number of snippets to show"] = 20,
) -> str:
    """Search the current page's HTML and show matches in context."""
    return await handlers.grep_page(query, is_regex, context_chars, max_matches)


@mcp.tool()
async def capture_status() -> str:
    """Show whether a capture session is active and how much it recorded."""
    return json.dumps(CaptureSessionManager.get_status(), ensure_ascii=False, indent=2)


@mcp.tool()
async def capture_clear() -> str:
    """Forget all captured requests while keeping the browser open."""
    return await handlers.clear_capture()


@mcp.tool()
async def capture_close() -> str:
    """Close the browser and end the capture session."""
    try:
        await CaptureSessionManager.close()
        return "Capture session closed."
    except Exception as e:
        logger.error(f"Error closing capture session: {e}", exc_info=True)
        return f"Error: Failed to close capture session: {e}"


@mcp.tool()
async def network_requests_simplified(
    include_images: Annotated[bool, "Include image requests"] = False,
    include_fonts: Annotated[bool, "Include font requests"] = False,
) -> str:
    """List captured requests without analytics, tracking, image and font noise.

    Shows query parameters and POST bodies, which is useful for spotting API
    and pagination calls.
    """
    return await handlers.list_requests(include_images, include_fonts)


@mcp.tool()
async def network_search(
    query: Annotated[str, "Text or regular expression to find in captured requests"],
    is_regex: Annotated[bool, "Treat query as a regular expression"] = False,
    search_in: Annotated[
        list[str] | None,
        "Fields to search: url, requestHeaders, requestBody, responseHeaders, responseBody",
    ] = None,
    context_chars: Annotated[int, "Characters of context around each match"] = 120,
    max_results: Annotated[int, "Maximum number of matching requests"] = 20,
    max_matches_per_field: Annotated[int, "Maximum snippets per field per request"] = 3,
    include_filtered_domains: Annotated[bool, "Also search analytics/tracking/image/font traffic"] = False,
) -> str:
    """Search captured requests like the search box of the DevTools network panel.

    Finds API calls whose URL, headers or bodies contain specific data
    (product names, prices, JSON fields) and shows >>>highlighted<<< snippets.
    """
    return await handlers.search_requests(
        query,
        is_regex=is_regex,
        search_in=search_in,
        context_chars=context_chars,
        max_results=max_results,
        max_matches_per_field=max_matches_per_field,
        include_filtered_domains=include_filtered_domains,
    )


@mcp.tool()
async def network_download(
    url_pattern: Annotated[str, "Substring or regular expression matched against request URLs"],
    output_path: Annotated[str, "Absolute path to save the response body to"],
    is_regex: Annotated[bool, "Treat url_pattern as a regular expression"] = False,
    match_index: Annotated[int, "Which match to download if several match (0 = first)"] = 0,
    include_filtered_domains: Annotated[bool, "Also match analytics/tracking/image/font traffic"] = False,
) -> str:
    """Save a captured response body to a file.

    Useful for keeping API JSON/XML responses for offline parser work.
    """
    return await handlers.download_request(
        url_pattern,
        output_path,
        is_regex=is_regex,
        match_index=match_index,
        include_filtered_domains=include_filtered_domains,
    )


@mcp.tool()
async def network_export(
    output_path: Annotated[str, "Path of the JSON capture file to write"],
) -> str:
    """Export all captured requests to a JSON capture file.

    The file can be queried later with the netsift-cli command.
    """
    return await handlers.export_requests(output_path)
