"""Unit tests for capture file export and import."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from netsift.capture.files import export_capture, load_capture, load_flow_file, open_capture
from netsift.capture.store import CaptureStore
from netsift.models import CaptureQueryError, ErrorCode
from tests.factories import make_exchange


class TestExportCapture:
    """Tests for export_capture."""

    @pytest.mark.asyncio
    async def test_exports_records(self, shop_store: CaptureStore, tmp_path: Path) -> None:
        output = tmp_path / "captures" / "shop.json"

        count = await export_capture(shop_store, output)

        assert count == 3
        records = json.loads(output.read_text(encoding="utf-8"))
        assert [r["request"]["url"] for r in records] == [e.request.url for e in shop_store]
        api = records[1]
        assert api["request"]["resourceType"] == "fetch"
        assert api["response"]["status"] == 200
        assert api["response"]["body"] == '{"items":["Soap"]}'
        assert "bodyUnavailable" not in api["response"]

    @pytest.mark.asyncio
    async def test_binary_body_is_not_exported(self, shop_store: CaptureStore, tmp_path: Path) -> None:
        output = tmp_path / "shop.json"

        await export_capture(shop_store, output)

        image = json.loads(output.read_text(encoding="utf-8"))[0]
        assert image["response"]["body"] is None
        assert image["response"]["bodyUnavailable"] == "binary_content_type"

    @pytest.mark.asyncio
    async def test_exchange_without_response(self, tmp_path: Path) -> None:
        store = CaptureStore([make_exchange("https://x.com/pending", status=None, post_data="a=1")])
        output = tmp_path / "pending.json"

        await export_capture(store, output)

        record = json.loads(output.read_text(encoding="utf-8"))[0]
        assert record["response"] is None
        assert record["request"]["postData"] == "a=1"


class TestLoadCapture:
    """Tests for load_capture."""

    @pytest.mark.asyncio
    async def test_export_then_load_keeps_exchanges(self, shop_store: CaptureStore, tmp_path: Path) -> None:
        output = tmp_path / "shop.json"
        await export_capture(shop_store, output)

        loaded = load_capture(output)

        exchanges = loaded.snapshot()
        assert len(exchanges) == 3
        assert exchanges[1].request.url == "https://shop.example.com/api/items?page=1"
        assert exchanges[1].response is not None
        assert await exchanges[1].response.read_body() == '{"items":["Soap"]}'
        assert exchanges[0].response is not None
        assert await exchanges[0].response.read_body() is None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CaptureQueryError) as exc_info:
            load_capture(tmp_path / "missing.json")
        assert exc_info.value.code == ErrorCode.INVALID_INPUT
        assert "not found" in exc_info.value.message

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CaptureQueryError) as exc_info:
            load_capture(path)
        assert exc_info.value.code == ErrorCode.INVALID_INPUT

    def test_not_a_list(self, tmp_path: Path) -> None:
        path = tmp_path / "obj.json"
        path.write_text('{"request": {}}', encoding="utf-8")

        with pytest.raises(CaptureQueryError, match="list of exchanges"):
            load_capture(path)

    def test_malformed_exchange(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.json"
        path.write_text(json.dumps([{"request": {"url": "https://x.com"}}]), encoding="utf-8")

        with pytest.raises(CaptureQueryError, match="Malformed exchange #0"):
            load_capture(path)

    @pytest.mark.parametrize(
        "response",
        [
            {"status": "OK"},
            "200 OK",
            {"status": 200, "headers": "content-type"},
        ],
    )
    def test_malformed_response(self, tmp_path: Path, response: object) -> None:
        path = tmp_path / "bad_response.json"
        request = {"method": "GET", "url": "https://x.com/api"}
        path.write_text(json.dumps([{"request": request, "response": response}]), encoding="utf-8")

        with pytest.raises(CaptureQueryError, match="Malformed exchange #0") as exc_info:
            load_capture(path)

        assert exc_info.value.code == ErrorCode.INVALID_INPUT
        assert exc_info.value.details["index"] == 0

    def test_minimal_records(self, tmp_path: Path) -> None:
        path = tmp_path / "minimal.json"
        path.write_text(
            json.dumps(
                [
                    {"request": {"method": "GET", "url": "https://x.com/a"}},
                    {"request": {"method": "GET", "url": "https://x.com/b"}, "response": {"status": 204}},
                ]
            ),
            encoding="utf-8",
        )

        store = load_capture(path)

        first, second = store.snapshot()
        assert first.response is None
        assert first.request.resource_type is None
        assert second.response is not None
        assert second.response.status == 204


class TestLoadFlowFile:
    """Tests for load_flow_file."""

    def test_mitmproxy_missing(self, tmp_path: Path) -> None:
        with (
            patch.dict(sys.modules, {"mitmproxy": None}),
            pytest.raises(CaptureQueryError, match="mitmproxy is not installed"),
        ):
            load_flow_file(tmp_path / "capture.flow")

    def test_reads_http_flows(self, tmp_path: Path) -> None:
        """HTTP flows become exchanges; other flow kinds are skipped."""
        path = tmp_path / "capture.flow"
        path.write_bytes(b"")

        class FakeHTTPFlow:
            def __init__(self, url: str, with_response: bool) -> None:
                self.request = MagicMock()
                self.request.method = "GET"
                self.request.url = url
                self.request.headers = {"accept": "*/*"}
                self.request.get_text.return_value = ""
                self.response = None
                if with_response:
                    self.response = MagicMock()
                    self.response.status_code = 200
                    self.response.reason = "OK"
                    self.response.headers = {"content-type": "application/json"}
                    self.response.get_text.return_value = '{"ok":true}'

        flows = [FakeHTTPFlow("https://x.com/api", True), object(), FakeHTTPFlow("https://x.com/pending", False)]
        mock_io = MagicMock()
        mock_io.FlowReader.return_value.stream.return_value = iter(flows)
        mock_http = MagicMock()
        mock_http.HTTPFlow = FakeHTTPFlow
        mock_mitmproxy = MagicMock(io=mock_io, http=mock_http)

        with patch.dict(
            sys.modules,
            {"mitmproxy": mock_mitmproxy, "mitmproxy.io": mock_io, "mitmproxy.http": mock_http},
        ):
            store = open_capture(path)

        exchanges = store.snapshot()
        assert [e.request.url for e in exchanges] == ["https://x.com/api", "https://x.com/pending"]
        assert exchanges[0].request.post_data is None
        assert exchanges[0].response is not None
        assert exchanges[0].response.status_text == "OK"
        assert exchanges[1].response is None
