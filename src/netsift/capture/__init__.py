"""Capture query engine.

Filtering, searching, listing and downloading over an ordered store of
captured HTTP exchanges.
"""

from netsift.capture.body_gate import MAX_RESPONSE_SIZE, read_text_safely, safe_response_text
from netsift.capture.classifier import should_filter
from netsift.capture.download import download_response, format_download_report
from netsift.capture.files import export_capture, load_capture, load_flow_file, open_capture
from netsift.capture.listing import list_simplified
from netsift.capture.patterns import compile_pattern, extract_snippets, grep_text
from netsift.capture.search import format_search_report, search_exchanges
from netsift.capture.store import CapturedExchange, CapturedRequest, CapturedResponse, CaptureStore

__all__ = [
    "MAX_RESPONSE_SIZE",
    "CaptureStore",
    "CapturedExchange",
    "CapturedRequest",
    "CapturedResponse",
    "compile_pattern",
    "download_response",
    "export_capture",
    "extract_snippets",
    "format_download_report",
    "format_search_report",
    "grep_text",
    "list_simplified",
    "load_capture",
    "load_flow_file",
    "open_capture",
    "read_text_safely",
    "safe_response_text",
    "search_exchanges",
    "should_filter",
]
