"""Tool handlers operating on the active capture session.

Each handler receives the session from require_capture_session and returns
the text shown to the caller; query errors become error messages.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from netsift.capture.download import download_response, format_download_report
from netsift.capture.files import export_capture
from netsift.capture.listing import list_simplified
from netsift.capture.patterns import grep_text
from netsift.capture.search import format_search_report, search_exchanges
from netsift.decorators import handle_query_error, require_capture_session
from netsift.models import DEFAULT_SEARCH_FIELDS

if TYPE_CHECKING:
    from netsift.browser.session import CaptureSession

logger = logging.getLogger(__name__)


@handle_query_error
@require_capture_session
async def grep_page(
    session: CaptureSession,
    query: str,
    is_regex: bool = False,
    context_chars: int = 200,
    max_matches: int = 20,
) -> str:
    html = await session.get_page_content()
    return grep_text(html, query, is_regex, context_chars, max_matches, source="page HTML")


@require_capture_session
async def clear_capture(session: CaptureSession) -> str:
    count = len(session.store)
    session.store.clear()
    return f"Cleared {count} captured request(s)."


@require_capture_session
async def list_requests(session: CaptureSession, include_images: bool = False, include_fonts: bool = False) -> str:
    return list_simplified(session.store, include_images, include_fonts)


@handle_query_error
@require_capture_session
async def search_requests(
    session: CaptureSession,
    query: str,
    is_regex: bool = False,
    search_in: Sequence[str] | None = None,
    context_chars: int = 120,
    max_results: int = 20,
    max_matches_per_field: int = 3,
    include_filtered_domains: bool = False,
) -> str:
    fields = list(search_in) if search_in is not None else [f.value for f in DEFAULT_SEARCH_FIELDS]
    outcome = await search_exchanges(
        session.store,
        query,
        is_regex=is_regex,
        fields=fields,
        context_chars=context_chars,
        max_results=max_results,
        max_matches_per_field=max_matches_per_field,
        include_filtered_domains=include_filtered_domains,
    )
    return format_search_report(outcome, query, is_regex, fields)


@handle_query_error
@require_capture_session
async def download_request(
    session: CaptureSession,
    url_pattern: str,
    output_path: str,
    is_regex: bool = False,
    match_index: int = 0,
    include_filtered_domains: bool = False,
) -> str:
    try:
        result = await download_response(
            session.store,
            url_pattern,
            output_path,
            is_regex=is_regex,
            match_index=match_index,
            include_filtered_domains=include_filtered_domains,
        )
    except OSError as e:
        return f"Error: Failed to write file: {e}"
    return format_download_report(result, url_pattern)


@require_capture_session
async def export_requests(session: CaptureSession, output_path: str) -> str:
    try:
        count = await export_capture(session.store, output_path)
    except OSError as e:
        return f"Error: Failed to write file: {e}"
    return f"Exported {count} request(s) to {output_path}"
