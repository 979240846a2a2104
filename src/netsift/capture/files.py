"""Capture file import and export.

A capture file is a JSON list of request/response records, so a browsing
session can be saved and queried later without a browser. mitmproxy ``.flow``
dumps can be loaded as well when mitmproxy is installed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from netsift.capture.body_gate import read_text_safely
from netsift.capture.store import CapturedRequest, CapturedResponse, CaptureStore
from netsift.models import CaptureQueryError, ErrorCode

logger = logging.getLogger(__name__)


async def export_capture(store: CaptureStore, output_path: str | Path) -> int:
    """Write the capture store to a JSON capture file.

    Response bodies are included only when the safety gate allows them;
    otherwise ``body`` is null and ``bodyUnavailable`` gives the reason.

    Args:
        store: Capture store to export
        output_path: Destination file; missing parent directories are created

    Returns:
        Number of exported exchanges
    """
    records: list[dict[str, Any]] = []
    for exchange in store.snapshot():
        request = exchange.request
        record: dict[str, Any] = {
            "request": {
                "method": request.method,
                "url": request.url,
                "headers": dict(request.headers),
                "postData": request.post_data,
                "resourceType": request.resource_type,
            },
            "response": None,
        }
        response = exchange.response
        if response is not None:
            gated = await read_text_safely(response, request.url)
            record["response"] = {
                "status": response.status,
                "statusText": response.status_text,
                "headers": dict(response.headers),
                "body": gated.text,
            }
            if gated.reason is not None:
                record["response"]["bodyUnavailable"] = gated.reason.value
        records.append(record)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(records, f, ensure_ascii=False, indent=2)

    logger.info("Exported %d exchanges to %s", len(records), output)
    return len(records)


def _response_from_record(data: dict[str, Any]) -> CapturedResponse:
    body = data.get("body")
    if body is None:
        return CapturedResponse(
            status=int(data.get("status", 0)),
            status_text=data.get("statusText", ""),
            headers=dict(data.get("headers") or {}),
        )
    return CapturedResponse.with_body(
        status=int(data.get("status", 0)),
        status_text=data.get("statusText", ""),
        headers=dict(data.get("headers") or {}),
        body=body,
    )


def load_capture(path: str | Path) -> CaptureStore:
    """Load a JSON capture file written by export_capture.

    Raises:
        CaptureQueryError: INVALID_INPUT if the file is missing or malformed
    """
    source = Path(path)
    try:
        with open(source, encoding="utf-8") as f:
            records = json.load(f)
    except FileNotFoundError as e:
        raise CaptureQueryError(
            code=ErrorCode.INVALID_INPUT,
            message=f"Capture file not found: {source}",
            details={"path": str(source)},
        ) from e
    except json.JSONDecodeError as e:
        raise CaptureQueryError(
            code=ErrorCode.INVALID_INPUT,
            message=f"Capture file is not valid JSON: {e}",
            details={"path": str(source)},
        ) from e

    if not isinstance(records, list):
        raise CaptureQueryError(
            code=ErrorCode.INVALID_INPUT,
            message="Capture file must contain a list of exchanges",
            details={"path": str(source)},
        )

    store = CaptureStore()
    for i, record in enumerate(records):
        try:
            req = record["request"]
            request = CapturedRequest(
                method=req["method"],
                url=req["url"],
                headers=dict(req.get("headers") or {}),
                post_data=req.get("postData"),
                resource_type=req.get("resourceType"),
            )
            response_data = record.get("response")
            response = _response_from_record(response_data) if response_data else None
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CaptureQueryError(
                code=ErrorCode.INVALID_INPUT,
                message=f"Malformed exchange #{i} in capture file: {e}",
                details={"path": str(source), "index": i},
            ) from e
        store.add(request, response)

    logger.debug("Loaded %d exchanges from %s", len(store), source)
    return store


def load_flow_file(path: str | Path) -> CaptureStore:
    """Load a mitmproxy ``.flow`` dump into a capture store.

    Raises:
        CaptureQueryError: INVALID_INPUT if mitmproxy is missing or the file is absent
    """
    try:
        from mitmproxy import io as mio
        from mitmproxy.http import HTTPFlow
    except ImportError as e:
        raise CaptureQueryError(
            code=ErrorCode.INVALID_INPUT,
            message="mitmproxy is not installed. Install netsift[mitmproxy] to read .flow files.",
        ) from e

    source = Path(path)
    if not source.exists():
        raise CaptureQueryError(
            code=ErrorCode.INVALID_INPUT,
            message=f"Capture file not found: {source}",
            details={"path": str(source)},
        )

    store = CaptureStore()
    with open(source, "rb") as f:
        reader = mio.FlowReader(f)
        for flow in reader.stream():
            if not isinstance(flow, HTTPFlow):
                continue
            request = CapturedRequest(
                method=flow.request.method,
                url=flow.request.url,
                headers=dict(flow.request.headers),
                post_data=flow.request.get_text(strict=False) or None,
            )
            response = None
            if flow.response is not None:
                body = flow.response.get_text(strict=False)
                headers = dict(flow.response.headers)
                if body is None:
                    response = CapturedResponse(
                        status=flow.response.status_code,
                        status_text=flow.response.reason,
                        headers=headers,
                    )
                else:
                    response = CapturedResponse.with_body(
                        status=flow.response.status_code,
                        status_text=flow.response.reason,
                        headers=headers,
                        body=body,
                    )
            store.add(request, response)

    logger.debug("Loaded %d flows from %s", len(store), source)
    return store


def open_capture(path: str | Path) -> CaptureStore:
    """Load a capture file, choosing the reader from its extension."""
    if Path(path).suffix == ".flow":
        return load_flow_file(path)
    return load_capture(path)
