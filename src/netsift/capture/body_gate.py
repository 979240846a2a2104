"""Safety checks before a response body is read as text.

Cheap header/URL heuristics run first so binary or oversized bodies are never
fetched; the size limit is enforced again on the text actually read.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlsplit

from netsift.capture.store import CapturedResponse, header_value
from netsift.models import UnsafeReason

logger = logging.getLogger(__name__)

MAX_RESPONSE_SIZE = 5 * 1024 * 1024

BINARY_CONTENT_TYPES = re.compile(r"^(image|audio|video)/", re.IGNORECASE)

BINARY_EXTENSIONS = re.compile(
    r"\.(pdf|zip|gz|tar|rar|7z|exe|dll|so|dylib|woff2?|ttf|otf|eot|docx?|xlsx?|pptx?)$",
    re.IGNORECASE,
)


def declared_length(headers: Mapping[str, str]) -> int | None:
    """Parse the Content-Length header, None if absent or malformed."""
    raw = header_value(headers, "content-length")
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def precheck(content_type: str, url: str, content_length: int | None) -> UnsafeReason | None:
    """Reject a body from its metadata alone.

    Args:
        content_type: Response content type (may be empty)
        url: Request URL; only its path is inspected
        content_length: Declared body length, None if unknown

    Returns:
        The reason the body is unsafe, or None if it may be read
    """
    if BINARY_CONTENT_TYPES.match(content_type.strip()):
        return UnsafeReason.BINARY_CONTENT_TYPE
    if BINARY_EXTENSIONS.search(urlsplit(url).path):
        return UnsafeReason.BINARY_EXTENSION
    if content_length is not None and content_length > MAX_RESPONSE_SIZE:
        return UnsafeReason.DECLARED_TOO_LARGE
    return None


@dataclass(frozen=True)
class GatedBody:
    """Outcome of a gated body read.

    Attributes:
        text: Body text, None when the gate refused it
        reason: Why the body was refused, None when it was read
    """

    text: str | None
    reason: UnsafeReason | None = None

    @property
    def ok(self) -> bool:
        return self.text is not None


async def read_text_safely(response: CapturedResponse, url: str) -> GatedBody:
    """Read a response body as text if the safety gate allows it.

    Read failures are reported as UNREADABLE and never raised.

    Args:
        response: Captured response
        url: Request URL of the exchange

    Returns:
        Gated body with either the text or the refusal reason
    """
    reason = precheck(response.content_type, url, declared_length(response.headers))
    if reason is not None:
        logger.debug("Skipping body of %s: %s", url, reason.value)
        return GatedBody(text=None, reason=reason)

    text = await response.read_body()
    if text is None:
        return GatedBody(text=None, reason=UnsafeReason.UNREADABLE)
    if len(text) > MAX_RESPONSE_SIZE:
        logger.debug("Discarding body of %s: %d chars exceeds limit", url, len(text))
        return GatedBody(text=None, reason=UnsafeReason.TOO_LARGE)
    return GatedBody(text=text)


async def safe_response_text(response: CapturedResponse, url: str) -> str | None:
    """Return the response body text, or None if it is unsafe or unavailable."""
    return (await read_text_safely(response, url)).text
