"""Full-text search across captured exchanges.

Works like the search box of a browser's network panel: every selected field
of every non-noise exchange is scanned for the query, and each hit is reported
with context snippets.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from netsift.capture.body_gate import safe_response_text
from netsift.capture.classifier import should_filter
from netsift.capture.patterns import compile_pattern, extract_snippets
from netsift.capture.store import CapturedExchange, CaptureStore, format_headers
from netsift.models import (
    DEFAULT_SEARCH_FIELDS,
    CaptureQueryError,
    ErrorCode,
    FieldMatch,
    SearchField,
    SearchOutcome,
    SearchResult,
)

logger = logging.getLogger(__name__)


def normalize_fields(fields: Iterable[SearchField | str] | None) -> list[SearchField]:
    """Convert field names to SearchField values in declared order.

    Raises:
        CaptureQueryError: INVALID_INPUT for an unknown field name
    """
    if fields is None:
        return list(DEFAULT_SEARCH_FIELDS)
    wanted: set[SearchField] = set()
    for name in fields:
        try:
            wanted.add(SearchField(name))
        except ValueError as e:
            valid = ", ".join(f.value for f in SearchField)
            raise CaptureQueryError(
                code=ErrorCode.INVALID_INPUT,
                message=f"Unknown search field: {name}. Valid fields: {valid}",
                details={"field": str(name)},
            ) from e
    return [f for f in SearchField if f in wanted]


async def _field_text(exchange: CapturedExchange, search_field: SearchField) -> str | None:
    request = exchange.request
    response = exchange.response
    match search_field:
        case SearchField.URL:
            return request.url
        case SearchField.REQUEST_HEADERS:
            return format_headers(request.headers)
        case SearchField.REQUEST_BODY:
            return request.post_data or None
        case SearchField.RESPONSE_HEADERS:
            return format_headers(response.headers) if response else None
        case SearchField.RESPONSE_BODY:
            if response is None:
                return None
            return await safe_response_text(response, request.url)
    return None


async def search_exchange(
    exchange: CapturedExchange,
    pattern: re.Pattern[str],
    fields: list[SearchField],
    context_chars: int,
    max_matches_per_field: int,
) -> list[FieldMatch]:
    """Search the selected fields of one exchange.

    Returns:
        Field matches in declared field order; empty if nothing matched
    """
    matches: list[FieldMatch] = []
    for search_field in fields:
        text = await _field_text(exchange, search_field)
        if not text:
            continue
        result = extract_snippets(text, pattern, context_chars, max_matches_per_field)
        if result.total_matches > 0:
            matches.append(
                FieldMatch(
                    field=search_field,
                    total_length=len(text),
                    total_matches=result.total_matches,
                    snippets=result.snippets,
                )
            )
    return matches


async def search_exchanges(
    store: CaptureStore,
    query: str,
    is_regex: bool = False,
    fields: Iterable[SearchField | str] | None = None,
    context_chars: int = 120,
    max_results: int = 20,
    max_matches_per_field: int = 3,
    include_filtered_domains: bool = False,
) -> SearchOutcome:
    """Search captured exchanges for a query.

    Exchanges are scanned one at a time in capture order. Scanning stops as
    soon as ``max_results`` matching exchanges have been collected.

    Args:
        store: Capture store to search
        query: Literal text or regular expression
        is_regex: Treat the query as a regular expression
        fields: Fields to search (defaults to url, requestBody, responseBody)
        context_chars: Characters of context on each side of a match
        max_results: Maximum number of matching exchanges to return
        max_matches_per_field: Maximum snippets per field per exchange
        include_filtered_domains: Also search analytics/image/font traffic

    Returns:
        Matching exchanges and the number of exchanges considered

    Raises:
        CaptureQueryError: INVALID_PATTERN for a bad regex, INVALID_INPUT for bad arguments
    """
    pattern = compile_pattern(query, is_regex)
    search_fields = normalize_fields(fields)
    if max_results < 1:
        raise CaptureQueryError(
            code=ErrorCode.INVALID_INPUT,
            message=f"max_results must be at least 1, got {max_results}",
        )

    outcome = SearchOutcome()
    for exchange in store.snapshot():
        request = exchange.request
        if not include_filtered_domains and should_filter(request.url, request.resource_type):
            continue
        outcome.total_considered += 1

        field_matches = await search_exchange(
            exchange, pattern, search_fields, context_chars, max_matches_per_field
        )
        if not field_matches:
            continue

        response = exchange.response
        outcome.results.append(
            SearchResult(
                method=request.method.upper(),
                url=request.url,
                status=response.status if response else None,
                status_text=response.status_text if response else "",
                resource_type=request.resource_type or "unknown",
                content_type=response.content_type if response else "",
                fields=field_matches,
            )
        )
        if len(outcome.results) >= max_results:
            break

    logger.debug(
        "Search for %r matched %d of %d exchanges",
        query,
        len(outcome.results),
        outcome.total_considered,
    )
    return outcome


def format_search_report(
    outcome: SearchOutcome,
    query: str,
    is_regex: bool = False,
    fields: Iterable[SearchField | str] | None = None,
) -> str:
    """Render search results as a text report."""
    searched_in = ", ".join(f.value for f in normalize_fields(fields))
    lines = [
        "## Network Search Results",
        f'Query: "{query}"' + (" (regex)" if is_regex else "") + f" | Searched in: {searched_in}",
        f"Found: {len(outcome.results)} matching requests (out of {outcome.total_considered} total)",
    ]

    for i, result in enumerate(outcome.results, start=1):
        lines.append("")
        lines.append("---")
        header = f"### [{i}] [{result.method}] {result.url}"
        if result.status is not None:
            header += f" => [{result.status}] {result.status_text}"
        lines.append(header)
        lines.append(f"Resource type: {result.resource_type} | Content-Type: {result.content_type}")

        for field_match in result.fields:
            lines.append("")
            lines.append(
                f"**{field_match.field.value}** ({field_match.total_length} chars, "
                f"{field_match.total_matches} matches, showing {len(field_match.snippets)}):"
            )
            for snippet in field_match.snippets:
                lines.append(f"  {snippet}")

    return "\n".join(lines)
