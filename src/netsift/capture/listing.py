"""Compact listing of captured exchanges.

Shows one block per useful exchange: the request line with its status, any
query parameters, and a preview of the POST body.
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit

from netsift.capture.classifier import is_image_url, should_filter
from netsift.capture.store import CapturedExchange, CaptureStore

MAX_PARAM_VALUE_LENGTH = 100
MAX_BODY_PREVIEW_LENGTH = 500

EMPTY_LISTING = "No relevant network requests found."


def _truncate(value: str, limit: int) -> str:
    return value[:limit] + "..." if len(value) > limit else value


def extract_query_params(url: str) -> dict[str, str] | None:
    """Decode the query string of a URL.

    Repeated keys keep their last value.

    Returns:
        Mapping of parameter names to values, or None if there are none
    """
    try:
        query = urlsplit(url).query
    except ValueError:
        return None
    params = dict(parse_qsl(query, keep_blank_values=True))
    return params or None


def render_exchange(exchange: CapturedExchange) -> str:
    """Render one exchange as a listing block."""
    request = exchange.request
    response = exchange.response

    request_line = f"[{request.method.upper()}] {request.url}"
    if response is not None:
        request_line += f" => [{response.status}] {response.status_text}"
    lines = [request_line]

    params = extract_query_params(request.url)
    if params:
        pairs = ", ".join(f"{key}={_truncate(value, MAX_PARAM_VALUE_LENGTH)}" for key, value in params.items())
        lines.append(f"  Query Params: {pairs}")

    if request.post_data:
        lines.append(f"  Body: {_truncate(request.post_data, MAX_BODY_PREVIEW_LENGTH)}")

    return "\n".join(lines)


def is_listed(exchange: CapturedExchange, include_images: bool = False, include_fonts: bool = False) -> bool:
    """Decide whether an exchange appears in the simplified listing.

    The image and font switches run first, then the general noise filter,
    which still hides image and font traffic it recognises.
    """
    url = exchange.request.url
    resource_type = exchange.request.resource_type
    if not include_images and (resource_type == "image" or is_image_url(url)):
        return False
    if not include_fonts and resource_type == "font":
        return False
    return not should_filter(url, resource_type)


def list_simplified(store: CaptureStore, include_images: bool = False, include_fonts: bool = False) -> str:
    """Render the simplified listing of a capture store.

    Args:
        store: Capture store to list
        include_images: Keep image requests
        include_fonts: Keep font requests

    Returns:
        Listing text in capture order
    """
    blocks = [
        render_exchange(exchange)
        for exchange in store.snapshot()
        if is_listed(exchange, include_images, include_fonts)
    ]
    return "\n".join(blocks) or EMPTY_LISTING
