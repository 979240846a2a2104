"""Pydantic data models for netsift.

This module defines the result and error types shared by the capture query
engine and the tool layer.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class SearchField(str, Enum):
    """Searchable parts of a captured exchange.

    Declaration order is the order fields are searched and reported in.
    """

    URL = "url"
    REQUEST_HEADERS = "requestHeaders"
    REQUEST_BODY = "requestBody"
    RESPONSE_HEADERS = "responseHeaders"
    RESPONSE_BODY = "responseBody"


DEFAULT_SEARCH_FIELDS: tuple[SearchField, ...] = (
    SearchField.URL,
    SearchField.REQUEST_BODY,
    SearchField.RESPONSE_BODY,
)


class SnippetResult(BaseModel):
    """Snippets extracted from one text blob.

    Attributes:
        snippets: Rendered context snippets (at most the requested cap)
        total_matches: Number of matches found, including those past the cap
    """

    snippets: list[str] = []
    total_matches: int = 0


class FieldMatch(BaseModel):
    """Matches found in a single field of an exchange.

    Attributes:
        field: Field that was searched
        total_length: Length of the searched text in characters
        total_matches: Number of matches in the field
        snippets: Rendered snippets, capped per field
    """

    field: SearchField
    total_length: int
    total_matches: int
    snippets: list[str] = []


class SearchResult(BaseModel):
    """Per-exchange search result.

    Attributes:
        method: Upper-cased HTTP method
        url: Request URL
        status: Response status code, None when no response was captured
        status_text: Response status text
        resource_type: Resource type label, "unknown" when unavailable
        content_type: Response content type, empty when unknown
        fields: Field matches in declared field order
    """

    method: str
    url: str
    status: int | None = None
    status_text: str = ""
    resource_type: str = "unknown"
    content_type: str = ""
    fields: list[FieldMatch] = []


class SearchOutcome(BaseModel):
    """Result of one search over the capture store.

    Attributes:
        results: Matching exchanges in capture order
        total_considered: Exchanges that survived filtering and were scanned
    """

    results: list[SearchResult] = []
    total_considered: int = 0


class DownloadResult(BaseModel):
    """Metadata for a response body persisted to disk.

    Attributes:
        url: Request URL of the downloaded exchange
        method: Upper-cased HTTP method
        status: Response status code
        status_text: Response status text
        content_type: Response content type, "unknown" when absent
        length: Body length in characters
        output_path: Path the body was written to
        match_index: Index of the selected match
        total_matches: Number of exchanges that matched the pattern
    """

    url: str
    method: str
    status: int
    status_text: str = ""
    content_type: str = "unknown"
    length: int
    output_path: str
    match_index: int = 0
    total_matches: int = 1


class UnsafeReason(str, Enum):
    """Why the body safety gate refused a response body."""

    BINARY_CONTENT_TYPE = "binary_content_type"
    BINARY_EXTENSION = "binary_extension"
    DECLARED_TOO_LARGE = "declared_too_large"
    TOO_LARGE = "too_large"
    UNREADABLE = "unreadable"


class ErrorCode(str, Enum):
    """Error codes for netsift query errors."""

    INVALID_PATTERN = "invalid_pattern"
    NOT_FOUND = "not_found"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    UNSAFE_BODY = "unsafe_body"
    NO_SESSION = "no_session"
    INVALID_INPUT = "invalid_input"


class CaptureQueryError(Exception):
    """Terminal error for a single query operation.

    Attributes:
        code: Error code
        message: Human-readable error message
        details: Additional error details
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, object] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            details: Additional context (e.g., pattern, match count)
        """
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class BodyReadError(Exception):
    """Raised by a body loader when a response body cannot be read.

    Never escapes the capture store: the read boundary converts it
    into an unavailable body.
    """
