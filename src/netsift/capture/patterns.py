"""Pattern compilation and context snippet extraction.

Queries are compiled case-insensitively, either literally (every regex
metacharacter escaped) or as a regular expression. Snippets show each match
with surrounding context, the match wrapped in ``>>>``/``<<<`` markers and an
ellipsis on every side where the context window was cut short.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from netsift.models import CaptureQueryError, ErrorCode, SnippetResult

HIGHLIGHT_OPEN = ">>>"
HIGHLIGHT_CLOSE = "<<<"
ELLIPSIS = "..."


def compile_pattern(query: str, is_regex: bool = False) -> re.Pattern[str]:
    """Compile a search query into a case-insensitive pattern.

    Args:
        query: Literal text or regular expression
        is_regex: Treat the query as a regular expression

    Returns:
        Compiled pattern

    Raises:
        CaptureQueryError: INVALID_PATTERN if the regular expression does not compile
    """
    source = query if is_regex else re.escape(query)
    try:
        return re.compile(source, re.IGNORECASE)
    except re.error as e:
        raise CaptureQueryError(
            code=ErrorCode.INVALID_PATTERN,
            message=f"Invalid regex pattern: {e}",
            details={"pattern": query},
        ) from e


@dataclass(frozen=True)
class MatchWindow:
    """One match and the context window around it.

    Attributes:
        start: Match start offset
        end: Match end offset
        window_start: Context window start, clamped to 0
        window_end: Context window end, clamped to the text length
        clipped_start: Window does not reach the start of the text
        clipped_end: Window does not reach the end of the text
    """

    start: int
    end: int
    window_start: int
    window_end: int
    clipped_start: bool
    clipped_end: bool

    @classmethod
    def around(cls, match: re.Match[str], text_length: int, context_chars: int) -> MatchWindow:
        start, end = match.span()
        window_start = max(0, start - context_chars)
        window_end = min(text_length, end + context_chars)
        return cls(
            start=start,
            end=end,
            window_start=window_start,
            window_end=window_end,
            clipped_start=window_start > 0,
            clipped_end=window_end < text_length,
        )

    def render(self, text: str) -> str:
        """Render the window as a highlighted snippet of ``text``."""
        prefix = ELLIPSIS if self.clipped_start else ""
        suffix = ELLIPSIS if self.clipped_end else ""
        before = text[self.window_start : self.start]
        matched = text[self.start : self.end]
        after = text[self.end : self.window_end]
        return f"{prefix}{before}{HIGHLIGHT_OPEN}{matched}{HIGHLIGHT_CLOSE}{after}{suffix}"


def extract_snippets(
    text: str,
    pattern: re.Pattern[str],
    context_chars: int,
    max_snippets: int,
) -> SnippetResult:
    """Extract highlighted context snippets for every match in ``text``.

    All non-overlapping matches are counted, even past ``max_snippets``.
    Each call scans with its own iterator, and zero-length matches advance
    the scan by one character, so any finite input terminates.

    Args:
        text: Text to search
        pattern: Compiled pattern
        context_chars: Characters of context on each side of a match
        max_snippets: Maximum number of snippets to render

    Returns:
        Rendered snippets and the total match count
    """
    context_chars = max(0, context_chars)
    snippets: list[str] = []
    total_matches = 0
    for match in pattern.finditer(text):
        total_matches += 1
        if len(snippets) < max_snippets:
            snippets.append(MatchWindow.around(match, len(text), context_chars).render(text))
    return SnippetResult(snippets=snippets, total_matches=total_matches)


def grep_text(
    text: str,
    query: str,
    is_regex: bool = False,
    context_chars: int = 200,
    max_matches: int = 20,
    source: str = "text",
) -> str:
    """Search an arbitrary text blob and render a match report.

    Args:
        text: Text to search (e.g. full page HTML)
        query: Literal text or regular expression
        is_regex: Treat the query as a regular expression
        context_chars: Characters of context on each side of a match
        max_matches: Maximum number of snippets to show
        source: Label for what was searched

    Returns:
        Human-readable report

    Raises:
        CaptureQueryError: INVALID_PATTERN if the regular expression does not compile
    """
    pattern = compile_pattern(query, is_regex)
    result = extract_snippets(text, pattern, context_chars, max_matches)

    label = f'"{query}"' + (" (regex)" if is_regex else "")
    if result.total_matches == 0:
        return f"No matches for {label} in {source} ({len(text)} chars)."

    lines = [
        "## Text Search Results",
        f"Query: {label} | Searched in: {source} ({len(text)} chars)",
        f"Found: {result.total_matches} matches, showing {len(result.snippets)}",
    ]
    for i, snippet in enumerate(result.snippets, start=1):
        lines.append("")
        lines.append(f"[{i}] {snippet}")
    return "\n".join(lines)
