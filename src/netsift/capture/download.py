"""Save a captured response body to disk.

Selects one completed exchange by URL pattern and match index, passes its
body through the safety gate and writes it as UTF-8 text.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from netsift.capture.body_gate import MAX_RESPONSE_SIZE, read_text_safely
from netsift.capture.classifier import should_filter
from netsift.capture.patterns import compile_pattern
from netsift.capture.store import CapturedExchange, CaptureStore
from netsift.models import CaptureQueryError, DownloadResult, ErrorCode, UnsafeReason

logger = logging.getLogger(__name__)

_UNSAFE_EXPLANATIONS = {
    UnsafeReason.BINARY_CONTENT_TYPE: "The response has a binary content type.",
    UnsafeReason.BINARY_EXTENSION: "The URL points to a binary file type.",
    UnsafeReason.DECLARED_TOO_LARGE: f"The declared Content-Length exceeds {MAX_RESPONSE_SIZE // (1024 * 1024)}MB.",
    UnsafeReason.TOO_LARGE: f"The body exceeds {MAX_RESPONSE_SIZE // (1024 * 1024)}MB.",
    UnsafeReason.UNREADABLE: "The response body is unavailable.",
}


def build_url_matcher(url_pattern: str, is_regex: bool = False) -> Callable[[str], bool]:
    """Build a case-insensitive URL predicate.

    Raises:
        CaptureQueryError: INVALID_PATTERN if the regular expression does not compile
    """
    pattern = compile_pattern(url_pattern, is_regex)
    return lambda url: pattern.search(url) is not None


def find_matches(
    store: CaptureStore,
    url_pattern: str,
    is_regex: bool = False,
    include_filtered_domains: bool = False,
) -> list[CapturedExchange]:
    """Collect completed exchanges whose URL matches, in capture order."""
    matcher = build_url_matcher(url_pattern, is_regex)
    matches: list[CapturedExchange] = []
    for exchange in store.snapshot():
        request = exchange.request
        if not include_filtered_domains and should_filter(request.url, request.resource_type):
            continue
        if exchange.response is None:
            continue
        if matcher(request.url):
            matches.append(exchange)
    return matches


async def download_response(
    store: CaptureStore,
    url_pattern: str,
    output_path: str | Path,
    is_regex: bool = False,
    match_index: int = 0,
    include_filtered_domains: bool = False,
) -> DownloadResult:
    """Write the body of a matching captured response to a file.

    Args:
        store: Capture store to search
        url_pattern: Substring or regular expression matched against request URLs
        output_path: File to write; missing parent directories are created
        is_regex: Treat url_pattern as a regular expression
        match_index: Which match to download (0 = first)
        include_filtered_domains: Also match analytics/image/font traffic

    Returns:
        Metadata about the saved body

    Raises:
        CaptureQueryError: INVALID_PATTERN, NOT_FOUND, INDEX_OUT_OF_RANGE,
            UNSAFE_BODY or INVALID_INPUT
    """
    if match_index < 0:
        raise CaptureQueryError(
            code=ErrorCode.INVALID_INPUT,
            message=f"Match index must not be negative, got {match_index}.",
        )

    matches = find_matches(store, url_pattern, is_regex, include_filtered_domains)
    if not matches:
        raise CaptureQueryError(
            code=ErrorCode.NOT_FOUND,
            message=(
                f'No captured requests matching pattern "{url_pattern}". '
                "Try network_search first to find the right URL pattern."
            ),
            details={"pattern": url_pattern},
        )
    if match_index >= len(matches):
        raise CaptureQueryError(
            code=ErrorCode.INDEX_OUT_OF_RANGE,
            message=(
                f"Match index {match_index} out of range. Found {len(matches)} matching "
                f"request(s) (indices 0-{len(matches) - 1})."
            ),
            details={"pattern": url_pattern, "match_count": len(matches)},
        )

    selected = matches[match_index]
    request = selected.request
    response = selected.response
    assert response is not None
    content_type = response.content_type or "unknown"

    gated = await read_text_safely(response, request.url)
    if gated.text is None:
        reason = gated.reason or UnsafeReason.UNREADABLE
        raise CaptureQueryError(
            code=ErrorCode.UNSAFE_BODY,
            message=(
                f"Cannot download response body for {request.url}\n"
                f"Content-Type: {content_type}\n"
                f"{_UNSAFE_EXPLANATIONS[reason]}"
            ),
            details={"url": request.url, "content_type": content_type, "reason": reason.value},
        )

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(gated.text, encoding="utf-8", newline="")
    logger.info("Saved %d chars from %s to %s", len(gated.text), request.url, output)

    return DownloadResult(
        url=request.url,
        method=request.method.upper(),
        status=response.status,
        status_text=response.status_text,
        content_type=content_type,
        length=len(gated.text),
        output_path=str(output),
        match_index=match_index,
        total_matches=len(matches),
    )


def format_download_report(result: DownloadResult, url_pattern: str) -> str:
    """Render a download result as a text report."""
    lines = [
        "## Network Response Downloaded",
        f"URL: {result.url}",
        f"Method: {result.method} | Status: {result.status} {result.status_text}",
        f"Content-Type: {result.content_type}",
        f"Content-Length: {result.length} chars",
        f"Saved to: {result.output_path}",
        "",
        f'Matched {result.total_matches} request(s) for pattern "{url_pattern}", '
        f"downloaded match #{result.match_index}.",
    ]
    return "\n".join(lines)
