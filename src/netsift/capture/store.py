"""Ordered store of captured HTTP exchanges.

The browser session appends exchanges as network activity happens; the query
engine only ever reads a snapshot of the store.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field

from netsift.models import BodyReadError

logger = logging.getLogger(__name__)

BodyLoader = Callable[[], Awaitable[str]]


def header_value(headers: Mapping[str, str], name: str) -> str | None:
    """Look up a header value case-insensitively.

    Args:
        headers: Header mapping as observed
        name: Header name to look up

    Returns:
        Header value, or None if the header is absent
    """
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def format_headers(headers: Mapping[str, str]) -> str:
    """Render headers as ``key: value`` lines."""
    return "\n".join(f"{key}: {value}" for key, value in headers.items())


@dataclass
class CapturedRequest:
    """An observed HTTP request.

    Attributes:
        method: HTTP method
        url: Request URL
        headers: Request headers (case as observed)
        post_data: Request body, if any
        resource_type: Browser resource type label, None when unavailable
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    post_data: str | None = None
    resource_type: str | None = None


@dataclass
class CapturedResponse:
    """An observed HTTP response with a lazily read body.

    Attributes:
        status: Status code
        status_text: Status text
        headers: Response headers (case as observed)
        body_loader: Coroutine factory returning the body text
        body_timeout: Seconds to wait for the body, None to wait indefinitely
    """

    status: int
    status_text: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body_loader: BodyLoader | None = None
    body_timeout: float | None = None
    _body: str | None = field(default=None, init=False, repr=False)

    @classmethod
    def with_body(
        cls,
        status: int,
        body: str,
        status_text: str = "",
        headers: dict[str, str] | None = None,
    ) -> CapturedResponse:
        """Create a response whose body is already known."""

        async def load() -> str:
            return body

        return cls(status=status, status_text=status_text, headers=headers or {}, body_loader=load)

    @property
    def content_type(self) -> str:
        """Content-Type header value, empty string when absent."""
        return header_value(self.headers, "content-type") or ""

    async def text(self) -> str:
        """Read the response body.

        The first successful read is cached, so repeated calls do not hit
        the collaborator again.

        Returns:
            Body text

        Raises:
            BodyReadError: If no body is available or the loader fails
        """
        if self._body is not None:
            return self._body
        if self.body_loader is None:
            raise BodyReadError("Response body is not available")
        try:
            if self.body_timeout is not None:
                body = await asyncio.wait_for(self.body_loader(), timeout=self.body_timeout)
            else:
                body = await self.body_loader()
        except BodyReadError:
            raise
        except TimeoutError as e:
            raise BodyReadError(f"Body read timed out after {self.body_timeout}s") from e
        except Exception as e:
            raise BodyReadError(f"{type(e).__name__}: {e}") from e
        self._body = body
        return body

    async def read_body(self) -> str | None:
        """Read the response body, returning None when it is unavailable."""
        try:
            return await self.text()
        except BodyReadError as e:
            logger.debug("Response body unavailable: %s", e)
            return None


@dataclass
class CapturedExchange:
    """One captured request paired with its response (if it completed).

    Attributes:
        request: The captured request
        response: The captured response, None if it never completed
        source: Collaborator object the request was captured from
    """

    request: CapturedRequest
    response: CapturedResponse | None = None
    source: object | None = field(default=None, repr=False, compare=False)


class CaptureStore:
    """Chronologically ordered collection of captured exchanges.

    Entries are only appended; query operations iterate a snapshot taken at
    call start so concurrent appends never reorder a running scan.
    """

    def __init__(self, exchanges: list[CapturedExchange] | None = None) -> None:
        self._exchanges: list[CapturedExchange] = list(exchanges or [])

    def __len__(self) -> int:
        return len(self._exchanges)

    def __iter__(self) -> Iterator[CapturedExchange]:
        return iter(self.snapshot())

    def append(self, exchange: CapturedExchange) -> CapturedExchange:
        """Append an exchange at the end of the store."""
        self._exchanges.append(exchange)
        return exchange

    def add(
        self,
        request: CapturedRequest,
        response: CapturedResponse | None = None,
        source: object | None = None,
    ) -> CapturedExchange:
        """Append a request (and optional response) as a new exchange."""
        return self.append(CapturedExchange(request=request, response=response, source=source))

    def attach_response(self, source: object, response: CapturedResponse) -> bool:
        """Attach a response to the exchange captured from ``source``.

        Args:
            source: Collaborator request object passed to add()
            response: Response to attach

        Returns:
            True if a matching exchange without a response was found
        """
        for exchange in reversed(self._exchanges):
            if exchange.source is source:
                if exchange.response is not None:
                    return False
                exchange.response = response
                return True
        return False

    def snapshot(self) -> tuple[CapturedExchange, ...]:
        """Return the current exchanges in capture order."""
        return tuple(self._exchanges)

    def clear(self) -> None:
        """Remove all captured exchanges."""
        self._exchanges.clear()
